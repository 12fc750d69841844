"""Orchestrator step records."""

from __future__ import annotations

from dataclasses import dataclass

from johnathan.protocols import ToolCall
from johnathan.toolkit.models import ToolResult


@dataclass(frozen=True)
class StepResult:
    """Result of a single orchestrator step (one tool call).

    Frozen: step results are immutable records of what happened.

    Attributes:
        round: 1-based request round that produced the tool call.
        step: 1-based position of the call across the whole turn.
        tool_call: The call the model requested.
        result: What the tool returned (or the error it was converted to).
    """

    round: int
    step: int
    tool_call: ToolCall
    result: ToolResult

    @property
    def success(self) -> bool:
        return self.result.success
