"""Tool-augmented conversation loop.

The Orchestrator drives one conversation turn as a series of rounds:
send the history to the completion service, aggregate the streamed
response, and, while the model keeps requesting tools, execute them and
feed their results back. The turn ends with the first plain answer or
fails once the round limit is reached.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from johnathan.exceptions import ToolLoopExceededError, UnknownToolError
from johnathan.llm.events import decode_events
from johnathan.llm.stream import TextSink, aggregate_stream
from johnathan.models.config import AgentConfig
from johnathan.models.content import Message, Role, TextContent, ToolResultBlock
from johnathan.orchestrator.models import StepResult
from johnathan.protocols import ChatResponse, ToolCall
from johnathan.toolkit.models import ToolResult
from johnathan.toolkit.registry import ToolRegistry

if TYPE_CHECKING:
    from johnathan.protocols import Transport

logger = logging.getLogger(__name__)


class Orchestrator:
    """Runs conversation turns against a completion service with tools.

    The orchestrator exclusively owns the conversation history. Messages
    are only ever appended; a turn that fails leaves what it appended in
    place so the caller can inspect it.

    Usage::

        orch = Orchestrator(client, default_registry(), on_text=print_chunk)
        answer = orch.run("What time is it?")
    """

    def __init__(
        self,
        client: Transport,
        registry: ToolRegistry | None = None,
        config: AgentConfig | None = None,
        *,
        on_text: TextSink | None = None,
        on_step: Callable[[StepResult], None] | None = None,
    ) -> None:
        self._client = client
        self._registry = registry if registry is not None else ToolRegistry()
        self._config = config or AgentConfig()
        self._on_text = on_text
        self._on_step = on_step
        self._history: list[Message] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def history(self) -> tuple[Message, ...]:
        """Snapshot of the conversation so far."""
        return tuple(self._history)

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    def reset(self) -> None:
        """Start a new conversation. Earlier history snapshots are unaffected."""
        self._history = []

    def run(self, user_message: str | Message) -> str:
        """Run one conversation turn.

        Args:
            user_message: The user's text, or a prebuilt user Message.

        Returns:
            The text of the model's final answer.

        Raises:
            TransportError: If a round's request or stream fails.
            ToolLoopExceededError: If every round up to
                ``config.max_rounds`` requested tool calls.
        """
        if isinstance(user_message, str):
            user_message = Message.user(user_message)
        self._history.append(user_message)

        step_counter = 0
        for round_num in range(1, self._config.max_rounds + 1):
            response = self._complete(round_num)

            if not response.tool_calls:
                self._history.append(Message.assistant(response.text))
                return response.text

            self._history.append(Message.tool_uses(response.tool_calls, text=response.text))
            result_blocks: list[ToolResultBlock] = []
            for tc in response.tool_calls:
                step_counter += 1
                result = self._execute_tool_call(tc)
                result_blocks.append(
                    ToolResultBlock(
                        tool_use_id=tc.id,
                        content=result.as_text(),
                        is_error=not result.success,
                    )
                )
                if self._on_step is not None:
                    self._on_step(
                        StepResult(round=round_num, step=step_counter, tool_call=tc, result=result)
                    )
            self._history.append(Message.tool_results(result_blocks))

        raise ToolLoopExceededError(self._config.max_rounds, history=self.history)

    # ------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------

    def _build_request(self) -> dict[str, Any]:
        request: dict[str, Any] = {
            "model": self._config.model,
            "max_tokens": self._config.max_tokens,
            "messages": [m.to_wire() for m in self._history if not _is_empty_answer(m)],
            "stream": self._config.stream,
        }
        if self._config.system_prompt:
            request["system"] = self._config.system_prompt
        tools = self._registry.definitions()
        if tools:
            request["tools"] = [t.to_anthropic() for t in tools]
        return request

    def _complete(self, round_num: int) -> ChatResponse:
        """Send the history and aggregate the model's response."""
        request = self._build_request()
        logger.debug(
            "Round %d: sending %d message(s), %d tool(s), stream=%s",
            round_num,
            len(request["messages"]),
            len(request.get("tools", [])),
            self._config.stream,
        )
        if self._config.stream:
            with self._client.stream(request) as lines:
                response = aggregate_stream(decode_events(lines), on_text=self._on_text)
        else:
            response = ChatResponse.from_message(self._client.send(request))
            if response.text and self._on_text is not None:
                self._on_text(response.text)
        logger.debug(
            "Round %d: stop_reason=%s, %d tool call(s)",
            round_num,
            response.stop_reason,
            len(response.tool_calls),
        )
        return response

    def _execute_tool_call(self, tc: ToolCall) -> ToolResult:
        """Execute one tool call, converting every failure into a result."""
        try:
            result = self._registry.execute(tc.name, tc.input)
        except UnknownToolError as exc:
            logger.warning("Model requested unknown tool %s", tc.name)
            return ToolResult.fail(str(exc))
        except Exception as exc:
            logger.warning("Tool %s raised: %s", tc.name, exc, exc_info=True)
            return ToolResult.fail(f"{type(exc).__name__}: {exc}")
        if not result.success:
            logger.warning("Tool %s failed: %s", tc.name, result.error)
        return result


def _is_empty_answer(message: Message) -> bool:
    """An assistant text message with no text; the service rejects these."""
    return (
        message.role is Role.ASSISTANT
        and isinstance(message.content, TextContent)
        and not message.content.text
    )
