"""Read-only lookups over the O2O checkout and its route table."""

from .engine import QueryEngine

__all__ = ["QueryEngine"]
