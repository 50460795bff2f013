"""Invocation tracing."""

from .tracing import Timer, TraceRecord, TraceStore

__all__ = ["Timer", "TraceRecord", "TraceStore"]
