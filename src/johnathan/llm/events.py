"""Server-sent event decoder for the streaming messages endpoint.

Turns raw stream lines into typed events. Only ``data:`` lines carry
payloads; everything else (blank separators, ``event:`` names, comments)
is ignored. Payloads are validated against a discriminated union of the
event shapes the aggregator understands; any other payload is skipped so
that new event types never break an older client.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import Annotated, Literal, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from johnathan.exceptions import ProtocolDecodeError, TransportError

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_PAYLOAD = "[DONE]"


# ---------------------------------------------------------------------------
# Event models
# ---------------------------------------------------------------------------


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class ContentBlockInfo(_Frozen):
    """The block announced by a ``content_block_start`` event."""

    type: str
    id: str | None = None
    name: str | None = None


class BlockDelta(_Frozen):
    """Incremental block data: a text fragment or a partial-JSON fragment."""

    type: str = ""
    text: str | None = None
    partial_json: str | None = None


class MessageDeltaBody(_Frozen):
    stop_reason: str | None = None


class ContentBlockStart(_Frozen):
    type: Literal["content_block_start"]
    index: int
    content_block: ContentBlockInfo


class ContentBlockDelta(_Frozen):
    type: Literal["content_block_delta"]
    index: int
    delta: BlockDelta


class ContentBlockStop(_Frozen):
    type: Literal["content_block_stop"]
    index: int


class MessageDelta(_Frozen):
    type: Literal["message_delta"]
    delta: MessageDeltaBody = Field(default_factory=MessageDeltaBody)


StreamEvent = Annotated[
    Union[ContentBlockStart, ContentBlockDelta, ContentBlockStop, MessageDelta],
    Field(discriminator="type"),
]

_event_adapter = TypeAdapter(StreamEvent)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def parse_event(payload: str) -> StreamEvent:
    """Validate one ``data:`` payload against the known event shapes.

    Args:
        payload: The JSON text following the data prefix.

    Returns:
        The typed event.

    Raises:
        ProtocolDecodeError: If the payload is not JSON or matches no
            known event shape.
    """
    try:
        return _event_adapter.validate_json(payload)
    except ValidationError as e:
        raise ProtocolDecodeError(payload, reason=f"{e.error_count()} validation error(s)") from e


def _payload_of(line: str | bytes) -> str | None:
    """Return the data payload of an SSE line, or None for non-data lines."""
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    line = line.rstrip("\r\n")
    if not line.startswith(DATA_PREFIX):
        return None
    payload = line[len(DATA_PREFIX):]
    if payload.startswith(" "):
        payload = payload[1:]
    return payload


def decode_events(lines: Iterable[str | bytes]) -> Iterator[StreamEvent]:
    """Lazily decode stream lines into typed events.

    Args:
        lines: Text lines of an open response stream. The iterable is
            consumed exactly once.

    Yields:
        One event per recognized ``data:`` payload, in arrival order.

    Raises:
        TransportError: If reading the underlying stream fails. The
            sequence ends at that point.
    """
    iterator = iter(lines)
    while True:
        try:
            line = next(iterator)
        except StopIteration:
            return
        except TransportError:
            raise
        except (httpx.HTTPError, OSError) as e:
            raise TransportError(f"Stream read failed: {e}") from e

        payload = _payload_of(line)
        if payload is None or payload == DONE_PAYLOAD:
            continue
        try:
            event = parse_event(payload)
        except ProtocolDecodeError as e:
            logger.debug("Skipping stream payload: %s", e)
            continue
        yield event
