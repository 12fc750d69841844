"""Toolkit data models.

Frozen dataclasses for tool definitions and tool execution results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Tool:
    """A tool definition for LLM consumption.

    Attributes:
        name: Tool name, unique within a registry.
        description: Human-readable description of when/why to use this tool.
        input_schema: JSON Schema dict describing the tool's input object.
    """

    name: str
    description: str
    input_schema: dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )

    def to_anthropic(self) -> dict[str, Any]:
        """Convert to Anthropic tool-use format.

        Returns:
            Dict with "name", "description", and "input_schema".
        """
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema,
        }


@dataclass(frozen=True)
class ToolResult:
    """Structured result from executing a tool.

    A failed execution is data, not an exception: executors return
    ``ToolResult.fail(...)`` and the orchestrator feeds it back to the
    model.

    Attributes:
        success: Whether execution succeeded.
        output: String output on success.
        error: Error message on failure.
    """

    success: bool
    output: str = ""
    error: str = ""

    @classmethod
    def ok(cls, output: str) -> ToolResult:
        return cls(success=True, output=output)

    @classmethod
    def fail(cls, error: str) -> ToolResult:
        return cls(success=False, error=error)

    def as_text(self) -> str:
        """Text sent back to the model for this result."""
        if self.success:
            return self.output
        return f"Error: {self.error}"
