"""Route table access."""

from .cache import RouteCache, RouteSource

__all__ = ["RouteCache", "RouteSource"]
