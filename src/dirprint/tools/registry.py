"""Named tool handlers with descriptions, kept in registration order."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

ToolHandler = Callable[[dict[str, object]], dict[str, object]]


@dataclass(slots=True, frozen=True)
class ToolDispatchError(Exception):
    """Unknown tool or invalid tool arguments."""

    code: str
    message: str


@dataclass(slots=True, frozen=True)
class ToolSpec:
    """One registered tool and the help text shown by tools/list."""

    name: str
    description: str
    handler: ToolHandler


@dataclass(slots=True)
class ToolRegistry:
    _tools: dict[str, ToolSpec] = field(default_factory=dict)

    def register(self, name: str, handler: ToolHandler, description: str = "") -> None:
        """Register a named handler; re-registering a name is an error."""
        if name in self._tools:
            raise ValueError(f"Tool already registered: {name}")
        self._tools[name] = ToolSpec(name=name, description=description, handler=handler)

    def names(self) -> tuple[str, ...]:
        return tuple(self._tools.keys())

    def describe(self) -> list[dict[str, str]]:
        """Return name/description pairs in registration order."""
        return [
            {"name": spec.name, "description": spec.description} for spec in self._tools.values()
        ]

    def dispatch(self, name: str, arguments: dict[str, object]) -> dict[str, object]:
        """Dispatch to a registered tool by name."""
        spec = self._tools.get(name)
        if spec is None:
            raise ToolDispatchError(code="UNKNOWN_TOOL", message=f"Unknown tool: {name}")
        return spec.handler(arguments)
