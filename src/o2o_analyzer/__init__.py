"""O2O Laravel analyzer package."""

from .config import AnalyzerConfig

__all__ = ["AnalyzerConfig"]
