"""Conversation message model.

A Message carries a role and exactly one content shape for its whole
lifetime: either plain text (TextContent) or an ordered sequence of
content blocks (BlocksContent). Content blocks are Pydantic models with
a discriminated union on ``type``, mirroring the wire format.

The wire format flattens content (a bare string, or a list of blocks).
That flattening is confined to ``Message.to_wire()`` and
``Message.from_wire()``; everything else works with the tagged shapes.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from typing import TYPE_CHECKING, Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from johnathan.exceptions import ContentValidationError

if TYPE_CHECKING:
    from johnathan.protocols import ToolCall


class Role(str, enum.Enum):
    """Conversation roles accepted by the completion service."""

    USER = "user"
    ASSISTANT = "assistant"


# ---------------------------------------------------------------------------
# Content blocks
# ---------------------------------------------------------------------------


class TextBlock(BaseModel):
    """A run of text inside a block-shaped message."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str

    def to_wire(self) -> dict[str, Any]:
        return {"type": self.type, "text": self.text}


class ToolUseBlock(BaseModel):
    """A tool invocation requested by the assistant."""

    model_config = ConfigDict(frozen=True)

    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: Any = Field(default_factory=dict)

    def to_wire(self) -> dict[str, Any]:
        return {"type": self.type, "id": self.id, "name": self.name, "input": self.input}


class ToolResultBlock(BaseModel):
    """The outcome of a tool invocation, paired to it by ``tool_use_id``."""

    model_config = ConfigDict(frozen=True)

    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str
    content: str
    is_error: bool = False

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {
            "type": self.type,
            "tool_use_id": self.tool_use_id,
            "content": self.content,
        }
        if self.is_error:
            wire["is_error"] = True
        return wire


ContentBlock = Annotated[
    Union[TextBlock, ToolUseBlock, ToolResultBlock],
    Field(discriminator="type"),
]

_block_adapter = TypeAdapter(ContentBlock)


# ---------------------------------------------------------------------------
# Message content (two-variant union)
# ---------------------------------------------------------------------------


class TextContent(BaseModel):
    """Plain-text message content."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


class BlocksContent(BaseModel):
    """Block-structured message content."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["blocks"] = "blocks"
    blocks: tuple[ContentBlock, ...]


Content = Annotated[Union[TextContent, BlocksContent], Field(discriminator="kind")]


class Message(BaseModel):
    """A single conversation message.

    Frozen: a message's role and content shape never change once built.
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    content: Content

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def user(cls, text: str) -> Message:
        return cls(role=Role.USER, content=TextContent(text=text))

    @classmethod
    def assistant(cls, text: str) -> Message:
        return cls(role=Role.ASSISTANT, content=TextContent(text=text))

    @classmethod
    def tool_uses(cls, calls: Iterable[ToolCall], text: str = "") -> Message:
        """Build the assistant message that requested ``calls``.

        A non-empty ``text`` is kept as a leading text block.
        """
        blocks: list[TextBlock | ToolUseBlock] = []
        if text:
            blocks.append(TextBlock(text=text))
        blocks.extend(call.to_block() for call in calls)
        return cls(role=Role.ASSISTANT, content=BlocksContent(blocks=tuple(blocks)))

    @classmethod
    def tool_results(cls, results: Iterable[ToolResultBlock]) -> Message:
        """Build the user message that answers a round of tool calls."""
        return cls(role=Role.USER, content=BlocksContent(blocks=tuple(results)))

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def blocks(self) -> tuple[TextBlock | ToolUseBlock | ToolResultBlock, ...]:
        """Content blocks, or an empty tuple for text content."""
        if isinstance(self.content, BlocksContent):
            return self.content.blocks
        return ()

    @property
    def text(self) -> str:
        """Plain text of the message (text blocks joined for block content)."""
        if isinstance(self.content, TextContent):
            return self.content.text
        return "".join(b.text for b in self.content.blocks if isinstance(b, TextBlock))

    # ------------------------------------------------------------------
    # Wire boundary
    # ------------------------------------------------------------------

    def to_wire(self) -> dict[str, Any]:
        """Flatten to the completion-service message format."""
        if isinstance(self.content, TextContent):
            content: str | list[dict[str, Any]] = self.content.text
        else:
            content = [block.to_wire() for block in self.content.blocks]
        return {"role": self.role.value, "content": content}

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> Message:
        """Rebuild a Message from its flattened wire form.

        Raises:
            ContentValidationError: If the role or any block is invalid.
        """
        raw = data.get("content", "")
        try:
            if isinstance(raw, str):
                content: TextContent | BlocksContent = TextContent(text=raw)
            else:
                content = BlocksContent(
                    blocks=tuple(_block_adapter.validate_python(b) for b in raw)
                )
            return cls(role=data.get("role"), content=content)
        except (ValidationError, TypeError) as e:
            raise ContentValidationError(f"Invalid wire message: {e}") from e
