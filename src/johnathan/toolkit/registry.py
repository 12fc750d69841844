"""ToolRegistry: holds tool executors and dispatches calls by name."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from johnathan.exceptions import UnknownToolError
from johnathan.toolkit.models import Tool, ToolResult

logger = logging.getLogger(__name__)


@runtime_checkable
class ToolExecutor(Protocol):
    """Protocol every registered tool satisfies.

    ``name`` must match the name in ``definition()``; it is the key the
    model uses to request the tool. It is a plain attribute rather than a
    ``name()`` method, so a class attribute or a dataclass field satisfies
    the protocol.
    """

    name: str

    def definition(self) -> Tool:
        """The tool definition sent to the model."""
        ...

    def execute(self, input: Any) -> ToolResult:
        """Run the tool on its JSON input."""
        ...


class FunctionTool:
    """Adapts a plain callable to the ToolExecutor protocol.

    The handler receives the JSON input object as keyword arguments.
    Exceptions raised by the handler become failed ToolResults.

    Usage::

        registry.register(FunctionTool(
            "add",
            "Add two integers.",
            {"type": "object", "properties": {"a": {"type": "integer"},
                                               "b": {"type": "integer"}}},
            lambda a, b: a + b,
        ))
    """

    def __init__(
        self,
        name: str,
        description: str,
        input_schema: dict[str, Any],
        handler: Callable[..., object],
    ) -> None:
        self.name = name
        self._tool = Tool(name=name, description=description, input_schema=input_schema)
        self._handler = handler

    def definition(self) -> Tool:
        return self._tool

    def execute(self, input: Any) -> ToolResult:
        if not isinstance(input, dict):
            return ToolResult.fail(f"Expected a JSON object input, got {type(input).__name__}")
        try:
            result = self._handler(**input)
        except Exception as exc:
            logger.debug("Tool %s failed: %s", self.name, exc, exc_info=True)
            return ToolResult.fail(f"{type(exc).__name__}: {exc}")
        return ToolResult.ok(str(result))


class ToolRegistry:
    """Holds registered tools and dispatches executions by name.

    Usage::

        registry = ToolRegistry()
        registry.register(GetTimeTool())
        result = registry.execute("get_current_time", {})
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolExecutor] = {}

    def register(self, executor: ToolExecutor) -> None:
        """Register a tool under its name, replacing any previous one."""
        if executor.name in self._tools:
            logger.debug("Replacing registered tool %s", executor.name)
        self._tools[executor.name] = executor

    def definitions(self) -> list[Tool]:
        """Snapshot of every registered tool definition, in registration order."""
        return [executor.definition() for executor in self._tools.values()]

    def execute(self, name: str, input: Any) -> ToolResult:
        """Execute a registered tool.

        Args:
            name: Exact tool name.
            input: JSON input for the tool.

        Returns:
            The executor's own ToolResult, unchanged.

        Raises:
            UnknownToolError: If no tool is registered under ``name``.
        """
        executor = self._tools.get(name)
        if executor is None:
            raise UnknownToolError(name)
        return executor.execute(input)

    def names(self) -> list[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
