"""Johnathan exception hierarchy.

All Johnathan-specific exceptions inherit from AgentError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from johnathan.models.content import Message


class AgentError(Exception):
    """Base exception for all Johnathan errors."""


class LLMClientError(AgentError):
    """Base for all completion-service client errors."""


class LLMConfigError(LLMClientError):
    """Missing or invalid client configuration (e.g., no API key)."""


class LLMResponseError(LLMClientError):
    """Unexpected response body from the completion service."""


class TransportError(LLMClientError):
    """Sending a request or reading its response stream failed.

    Attributes:
        status_code: HTTP status of the failed response, or None when the
            failure happened below HTTP (connect, read, timeout).
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ProtocolDecodeError(AgentError):
    """A stream payload matched no known event shape.

    Raised by ``parse_event``; the stream decoder recovers from it by
    skipping the payload.
    """

    def __init__(self, payload: str, reason: str = "") -> None:
        self.payload = payload
        msg = f"Unrecognized stream payload: {payload[:80]!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class ToolError(AgentError):
    """Base for tool registry errors."""


class UnknownToolError(ToolError):
    """Raised when a tool name is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class OrchestratorError(AgentError):
    """Raised when the orchestrator cannot complete a turn."""


class ToolLoopExceededError(OrchestratorError):
    """Every round up to the limit requested more tool calls.

    Attributes:
        max_rounds: The round limit that was reached.
        history: Snapshot of the conversation history at the point of
            failure, for diagnostics.
    """

    def __init__(self, max_rounds: int, history: tuple[Message, ...] = ()) -> None:
        self.max_rounds = max_rounds
        self.history = history
        super().__init__(
            f"Tool loop exceeded: model still requesting tools after "
            f"{max_rounds} round(s)"
        )


class ContentValidationError(AgentError):
    """Raised when a wire message cannot be converted into a Message.

    Named ContentValidationError (not ValidationError) to avoid
    collision with pydantic.ValidationError.
    """
