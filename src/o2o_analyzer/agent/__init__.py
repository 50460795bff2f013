"""Tool catalog, registry and dispatch boundary."""

from .dispatcher import Dispatcher, ToolResult
from .registry import ToolDescriptor, ToolRegistry, ToolSpec

__all__ = ["Dispatcher", "ToolDescriptor", "ToolRegistry", "ToolResult", "ToolSpec"]
