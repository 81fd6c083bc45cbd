"""Tool interfaces exposing snapshots to a host process."""

from .registry import ToolDispatchError, ToolHandler, ToolRegistry, ToolSpec

__all__ = ["ToolDispatchError", "ToolHandler", "ToolRegistry", "ToolSpec"]
