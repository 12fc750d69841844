"""Shared test fixtures and helpers for Johnathan.

Provides builders for server-sent event lines and a scripted transport
that plays back canned rounds instead of calling the network.
"""

from __future__ import annotations

import json
from contextlib import contextmanager

import pytest

from johnathan.models.config import AgentConfig

# ------------------------------------------------------------------
# SSE line builders
# ------------------------------------------------------------------


def sse(event: dict) -> str:
    """Encode one event as a ``data:`` line."""
    return f"data: {json.dumps(event)}"


def text_start(index: int = 0) -> str:
    return sse({"type": "content_block_start", "index": index,
                "content_block": {"type": "text", "text": ""}})


def text_delta(text: str, index: int = 0) -> str:
    return sse({"type": "content_block_delta", "index": index,
                "delta": {"type": "text_delta", "text": text}})


def tool_start(call_id: str, name: str, index: int = 0) -> str:
    return sse({"type": "content_block_start", "index": index,
                "content_block": {"type": "tool_use", "id": call_id, "name": name, "input": {}}})


def json_delta(fragment: str, index: int = 0) -> str:
    return sse({"type": "content_block_delta", "index": index,
                "delta": {"type": "input_json_delta", "partial_json": fragment}})


def block_stop(index: int = 0) -> str:
    return sse({"type": "content_block_stop", "index": index})


def message_delta(stop_reason: str | None) -> str:
    delta = {} if stop_reason is None else {"stop_reason": stop_reason}
    return sse({"type": "message_delta", "delta": delta, "usage": {"output_tokens": 5}})


def text_round(text: str, stop_reason: str = "end_turn") -> list[str]:
    """Lines of a round that answers with ``text`` only."""
    return [
        "event: message_start",
        sse({"type": "message_start", "message": {"id": "msg_1", "role": "assistant"}}),
        "",
        text_start(0),
        text_delta(text, 0),
        block_stop(0),
        message_delta(stop_reason),
        sse({"type": "message_stop"}),
    ]


def tool_round(
    calls: list[tuple[str, str, str]],
    *,
    text: str = "",
    stop_reason: str = "tool_use",
) -> list[str]:
    """Lines of a round that requests tools.

    Args:
        calls: (call_id, tool_name, input_json) tuples.
        text: Optional text block before the tool blocks.
    """
    lines: list[str] = []
    index = 0
    if text:
        lines += [text_start(index), text_delta(text, index), block_stop(index)]
        index += 1
    for call_id, name, input_json in calls:
        lines += [tool_start(call_id, name, index), json_delta(input_json, index), block_stop(index)]
        index += 1
    lines.append(message_delta(stop_reason))
    return lines


# ------------------------------------------------------------------
# Scripted transport
# ------------------------------------------------------------------


class ScriptedTransport:
    """A Transport that plays back one scripted item per request.

    Each script item is a list of SSE lines (for ``stream``) or a body
    dict (for ``send``). An Exception instance inside a line list is
    raised when iteration reaches it, simulating a mid-stream failure.
    """

    def __init__(self, script: list):
        self.script = list(script)
        self.requests: list[dict] = []
        self.opened = 0
        self.released = 0
        self.closed = False

    def _next(self, request: dict):
        self.requests.append(json.loads(json.dumps(request)))
        if not self.script:
            raise AssertionError("ScriptedTransport ran out of responses")
        return self.script.pop(0)

    def send(self, request: dict) -> dict:
        return self._next(request)

    @contextmanager
    def stream(self, request: dict):
        lines = self._next(request)
        self.opened += 1

        def _iter():
            for line in lines:
                if isinstance(line, Exception):
                    raise line
                yield line

        try:
            yield _iter()
        finally:
            self.released += 1

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def config() -> AgentConfig:
    return AgentConfig(model="test-model", max_tokens=256, max_rounds=3, system_prompt="Be brief.")
