"""Protocol definitions for Johnathan.

Defines the pluggable Transport interface and the frozen dataclasses
produced by a completion round (ToolCall, ChatResponse).
"""

from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator

    from johnathan.models.content import ToolUseBlock

logger = logging.getLogger(__name__)

UNKNOWN_STOP_REASON = "unknown"


@dataclass(frozen=True)
class ToolCall:
    """A finalized tool invocation decoded from one tool_use block.

    ``input`` is the parsed JSON input (an empty dict when the streamed
    input was missing or malformed).
    """

    id: str
    name: str
    input: Any = field(default_factory=dict)

    @classmethod
    def from_block(cls, block: dict) -> ToolCall:
        """Parse from a buffered ``tool_use`` content block dict."""
        return cls(
            id=block.get("id", ""),
            name=block.get("name", ""),
            input=block.get("input", {}),
        )

    def to_block(self) -> ToolUseBlock:
        """Reconstruct the ``tool_use`` content block for the history."""
        from johnathan.models.content import ToolUseBlock

        return ToolUseBlock(id=self.id, name=self.name, input=self.input)


@dataclass(frozen=True)
class ChatResponse:
    """The structured result of one completion round.

    Attributes:
        text: All text fragments of the round, concatenated in order.
        stop_reason: Why the round ended ("end_turn", "tool_use",
            "max_tokens", ...), or "unknown" if the service never said.
        tool_calls: Tool invocations in the order their blocks opened.
    """

    text: str = ""
    stop_reason: str = UNKNOWN_STOP_REASON
    tool_calls: tuple[ToolCall, ...] = ()

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)

    @classmethod
    def from_message(cls, body: dict) -> ChatResponse:
        """Build a response from a buffered (non-streaming) message body.

        Text blocks are concatenated; ``tool_use`` blocks become
        ToolCalls; other block types are ignored.
        """
        parts: list[str] = []
        calls: list[ToolCall] = []
        for block in body.get("content") or []:
            if not isinstance(block, dict):
                continue
            block_type = block.get("type")
            if block_type == "text":
                parts.append(block.get("text", ""))
            elif block_type == "tool_use":
                calls.append(ToolCall.from_block(block))
            else:
                logger.debug("Ignoring content block of type %r", block_type)
        return cls(
            text="".join(parts),
            stop_reason=body.get("stop_reason") or UNKNOWN_STOP_REASON,
            tool_calls=tuple(calls),
        )

    def __str__(self) -> str:
        return self.text


@runtime_checkable
class Transport(Protocol):
    """Protocol for the completion-service transport.

    The built-in AnthropicClient implements this protocol. Any object
    with these methods works, which is how tests script responses.
    """

    def send(self, request: dict) -> dict:
        """Send a non-streaming request and return the decoded body."""
        ...

    def stream(self, request: dict) -> AbstractContextManager[Iterator[str]]:
        """Send a streaming request.

        Returns a context manager yielding the response's text lines. The
        underlying response is released when the context exits.
        """
        ...

    def close(self) -> None:
        """Release underlying resources."""
        ...
