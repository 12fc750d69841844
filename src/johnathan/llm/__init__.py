"""Completion-service infrastructure for Johnathan.

Provides the httpx transport, the server-sent event decoder, and the
streaming aggregator that turns a response stream into a ChatResponse.
"""

from johnathan.llm.client import AnthropicClient
from johnathan.llm.events import (
    ContentBlockDelta,
    ContentBlockStart,
    ContentBlockStop,
    MessageDelta,
    StreamEvent,
    decode_events,
    parse_event,
)
from johnathan.llm.stream import PartialToolCall, StreamAggregator, aggregate_stream

__all__ = [
    "AnthropicClient",
    "ContentBlockDelta",
    "ContentBlockStart",
    "ContentBlockStop",
    "MessageDelta",
    "StreamEvent",
    "decode_events",
    "parse_event",
    "PartialToolCall",
    "StreamAggregator",
    "aggregate_stream",
]
