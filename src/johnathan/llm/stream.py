"""Streaming response aggregation.

StreamAggregator folds decoded stream events into a ChatResponse:
text deltas are forwarded to an optional sink and accumulated, tool_use
blocks are reassembled from partial-JSON fragments, and the last
reported stop reason wins.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from johnathan.llm.events import (
    ContentBlockDelta,
    ContentBlockStart,
    ContentBlockStop,
    MessageDelta,
    StreamEvent,
)
from johnathan.protocols import UNKNOWN_STOP_REASON, ChatResponse, ToolCall

logger = logging.getLogger(__name__)

TextSink = Callable[[str], None]


@dataclass
class PartialToolCall:
    """A tool_use block whose input is still streaming in.

    Mutable: ``json_buffer`` grows with every partial-JSON delta until
    the block stops.
    """

    id: str
    name: str
    json_buffer: str = ""

    def finalize(self) -> ToolCall:
        """Parse the buffered input and freeze the call.

        A buffer that is not valid JSON (including an empty one) yields
        an empty input object.
        """
        try:
            tool_input = json.loads(self.json_buffer)
        except json.JSONDecodeError:
            if self.json_buffer:
                logger.warning(
                    "Malformed JSON input for tool call %s (%s); using empty input",
                    self.id,
                    self.name,
                )
            tool_input = {}
        return ToolCall(id=self.id, name=self.name, input=tool_input)


class StreamAggregator:
    """Accumulates one round's stream events into a ChatResponse.

    Usage::

        aggregator = StreamAggregator(on_text=print_chunk)
        for event in decode_events(lines):
            aggregator.feed(event)
        response = aggregator.finish()
    """

    def __init__(self, on_text: TextSink | None = None) -> None:
        self._on_text = on_text
        self._parts: list[str] = []
        self._stop_reason = UNKNOWN_STOP_REASON
        self._tool_calls: list[ToolCall] = []
        self._open_tool: PartialToolCall | None = None

    @property
    def text(self) -> str:
        """Text accumulated so far."""
        return "".join(self._parts)

    @property
    def stop_reason(self) -> str:
        return self._stop_reason

    @property
    def tool_calls(self) -> tuple[ToolCall, ...]:
        """Tool calls finalized so far."""
        return tuple(self._tool_calls)

    def feed(self, event: StreamEvent) -> None:
        """Apply one event, in arrival order."""
        if isinstance(event, ContentBlockStart):
            self._on_block_start(event)
        elif isinstance(event, ContentBlockDelta):
            self._on_block_delta(event)
        elif isinstance(event, ContentBlockStop):
            self._on_block_stop()
        elif isinstance(event, MessageDelta):
            if event.delta.stop_reason is not None:
                self._stop_reason = event.delta.stop_reason

    def finish(self) -> ChatResponse:
        """Close the round and build the response.

        A tool_use block that never stopped is dropped.
        """
        if self._open_tool is not None:
            logger.warning(
                "Stream ended inside tool call %s (%s); discarding it",
                self._open_tool.id,
                self._open_tool.name,
            )
            self._open_tool = None
        return ChatResponse(
            text=self.text,
            stop_reason=self._stop_reason,
            tool_calls=tuple(self._tool_calls),
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _on_block_start(self, event: ContentBlockStart) -> None:
        block = event.content_block
        if block.type != "tool_use":
            return
        if self._open_tool is not None:
            logger.warning(
                "Tool call %s (%s) was never closed; discarding it",
                self._open_tool.id,
                self._open_tool.name,
            )
        self._open_tool = PartialToolCall(id=block.id or "", name=block.name or "")

    def _on_block_delta(self, event: ContentBlockDelta) -> None:
        delta = event.delta
        if delta.text is not None:
            if self._on_text is not None:
                self._on_text(delta.text)
            self._parts.append(delta.text)
        elif delta.partial_json is not None:
            if self._open_tool is None:
                logger.debug("Dropping partial JSON outside a tool_use block")
                return
            self._open_tool.json_buffer += delta.partial_json

    def _on_block_stop(self) -> None:
        if self._open_tool is None:
            return
        self._tool_calls.append(self._open_tool.finalize())
        self._open_tool = None


def aggregate_stream(
    events: Iterable[StreamEvent],
    on_text: TextSink | None = None,
) -> ChatResponse:
    """Drain ``events`` into a ChatResponse.

    Args:
        events: Decoded events of one round, typically from
            ``decode_events``.
        on_text: Called once per text fragment, in order, before the
            fragment is accumulated.

    Returns:
        The round's ChatResponse.

    Raises:
        TransportError: If the event source fails mid-stream. No partial
            response is returned.
    """
    aggregator = StreamAggregator(on_text=on_text)
    for event in events:
        aggregator.feed(event)
    return aggregator.finish()
