"""Built-in tools."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from johnathan.toolkit.models import Tool, ToolResult
from johnathan.toolkit.registry import ToolRegistry


class GetTimeTool:
    """Returns the current local date and time.

    Args:
        clock: Returns an aware datetime for "now". Defaults to the local
            system clock.
    """

    name = "get_current_time"

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now().astimezone())

    def definition(self) -> Tool:
        return Tool(
            name=self.name,
            description=(
                "Get the current date and time. Use this when the user asks "
                "about the current time or date."
            ),
            input_schema={"type": "object", "properties": {}, "required": []},
        )

    def execute(self, input: Any) -> ToolResult:
        now = self._clock()
        return ToolResult.ok(
            f"Current time: {now.isoformat(timespec='seconds')} "
            f"(Unix timestamp: {int(now.timestamp())})"
        )


def default_registry() -> ToolRegistry:
    """A registry holding every built-in tool."""
    registry = ToolRegistry()
    registry.register(GetTimeTool())
    return registry
