"""Integration tests for the orchestration loop.

All tests use a scripted transport -- no real API calls.
"""

from __future__ import annotations

import pytest

from johnathan.exceptions import OrchestratorError, ToolLoopExceededError, TransportError
from johnathan.models.config import AgentConfig
from johnathan.models.content import Message, Role, TextContent, ToolResultBlock, ToolUseBlock
from johnathan.orchestrator import Orchestrator, StepResult
from johnathan.toolkit import FunctionTool, GetTimeTool, ToolRegistry, ToolResult
from tests.conftest import ScriptedTransport, message_delta, text_delta, text_round, text_start, tool_round


def time_registry() -> ToolRegistry:
    registry = ToolRegistry()
    registry.register(GetTimeTool())
    return registry


class ExplodingTool:
    name = "explode"

    def definition(self):
        from johnathan.toolkit import Tool

        return Tool(name=self.name, description="Always raises.")

    def execute(self, input):
        raise RuntimeError("kaboom")


# ===========================================================================
# Round trips
# ===========================================================================


class TestPlainAnswer:
    def test_single_round(self, config):
        transport = ScriptedTransport([text_round("Hello!")])
        orch = Orchestrator(transport, ToolRegistry(), config)

        answer = orch.run("Hi")

        assert answer == "Hello!"
        assert orch.history == (Message.user("Hi"), Message.assistant("Hello!"))
        assert len(transport.requests) == 1

    def test_request_shape(self, config):
        transport = ScriptedTransport([text_round("ok")])
        Orchestrator(transport, time_registry(), config).run("Hi")

        request = transport.requests[0]
        assert request["model"] == "test-model"
        assert request["max_tokens"] == 256
        assert request["system"] == "Be brief."
        assert request["stream"] is True
        assert request["messages"] == [{"role": "user", "content": "Hi"}]
        assert request["tools"] == [GetTimeTool().definition().to_anthropic()]

    def test_empty_system_and_registry_are_omitted(self):
        transport = ScriptedTransport([text_round("ok")])
        Orchestrator(transport, config=AgentConfig(system_prompt="")).run("Hi")

        request = transport.requests[0]
        assert "system" not in request
        assert "tools" not in request

    def test_text_sink_receives_stream(self, config):
        received: list[str] = []
        lines = [text_start(0), text_delta("Hel"), text_delta("lo")]
        transport = ScriptedTransport([lines])

        answer = Orchestrator(transport, config=config, on_text=received.append).run("Hi")

        assert received == ["Hel", "lo"]
        assert answer == "Hello"

    def test_stream_released_after_round(self, config):
        transport = ScriptedTransport([text_round("a")])
        Orchestrator(transport, config=config).run("x")
        assert transport.opened == transport.released == 1


class TestToolRoundTrip:
    def test_end_to_end_tool_round_trip(self, config):
        transport = ScriptedTransport([
            tool_round([("t1", "get_current_time", "")]),
            text_round("It is noon.", stop_reason="end_turn"),
        ])
        steps: list[StepResult] = []
        orch = Orchestrator(transport, time_registry(), config, on_step=steps.append)

        answer = orch.run("What time is it?")

        assert answer == "It is noon."
        assert len(transport.requests) == 2

        history = orch.history
        assert [m.role for m in history] == [Role.USER, Role.ASSISTANT, Role.USER, Role.ASSISTANT]
        assert history[1].blocks == (ToolUseBlock(id="t1", name="get_current_time", input={}),)
        result_block = history[2].blocks[0]
        assert isinstance(result_block, ToolResultBlock)
        assert result_block.tool_use_id == "t1"
        assert result_block.content.startswith("Current time:")
        assert not result_block.is_error
        assert history[3] == Message.assistant("It is noon.")

        assert len(steps) == 1
        assert steps[0].round == 1
        assert steps[0].tool_call.id == "t1"
        assert steps[0].success

    def test_second_request_carries_tool_exchange(self, config):
        transport = ScriptedTransport([
            tool_round([("t1", "get_current_time", "{}")]),
            text_round("done"),
        ])
        Orchestrator(transport, time_registry(), config).run("time?")

        messages = transport.requests[1]["messages"]
        assert messages[1] == {
            "role": "assistant",
            "content": [{"type": "tool_use", "id": "t1", "name": "get_current_time", "input": {}}],
        }
        assert messages[2]["role"] == "user"
        assert messages[2]["content"][0]["tool_use_id"] == "t1"

    def test_multiple_calls_execute_in_order(self, config):
        order: list[str] = []
        registry = ToolRegistry()
        for name in ["first", "second", "third"]:
            registry.register(
                FunctionTool(name, "records", {"type": "object"}, lambda _n=name: order.append(_n) or _n)
            )
        transport = ScriptedTransport([
            tool_round([("a", "first", "{}"), ("b", "second", "{}"), ("c", "third", "{}")]),
            text_round("all done"),
        ])
        steps: list[StepResult] = []
        orch = Orchestrator(transport, registry, config, on_step=steps.append)

        orch.run("go")

        assert order == ["first", "second", "third"]
        assert [s.step for s in steps] == [1, 2, 3]
        results = orch.history[2].blocks
        assert [(b.tool_use_id, b.content) for b in results] == [
            ("a", "first"),
            ("b", "second"),
            ("c", "third"),
        ]

    def test_text_before_tool_use_is_kept(self, config):
        transport = ScriptedTransport([
            tool_round([("t1", "get_current_time", "")], text="Let me check."),
            text_round("Noon."),
        ])
        received: list[str] = []
        orch = Orchestrator(transport, time_registry(), config, on_text=received.append)

        orch.run("time?")

        assert orch.history[1].text == "Let me check."
        assert received == ["Let me check.", "Noon."]

    def test_unknown_tool_is_fed_back_as_error(self, config):
        transport = ScriptedTransport([
            tool_round([("t1", "teleport", '{"to": "mars"}')]),
            text_round("I cannot teleport."),
        ])
        steps: list[StepResult] = []
        orch = Orchestrator(transport, time_registry(), config, on_step=steps.append)

        answer = orch.run("beam me up")

        assert answer == "I cannot teleport."
        block = orch.history[2].blocks[0]
        assert block.is_error
        assert block.content == "Error: Unknown tool: teleport"
        assert not steps[0].success
        wire = transport.requests[1]["messages"][2]["content"][0]
        assert wire["is_error"] is True

    def test_failing_tool_does_not_abort_siblings(self, config):
        registry = time_registry()
        registry.register(ExplodingTool())
        transport = ScriptedTransport([
            tool_round([("t1", "explode", "{}"), ("t2", "get_current_time", "{}")]),
            text_round("partial success"),
        ])
        orch = Orchestrator(transport, registry, config)

        assert orch.run("go") == "partial success"

        first, second = orch.history[2].blocks
        assert first.is_error
        assert first.content == "Error: RuntimeError: kaboom"
        assert not second.is_error

    def test_tool_failure_result_is_error(self, config):
        registry = ToolRegistry()
        registry.register(FunctionTool("div", "divide", {"type": "object"}, lambda a, b: a / b))
        transport = ScriptedTransport([
            tool_round([("t1", "div", '{"a": 1, "b": 0}')]),
            text_round("Cannot divide by zero."),
        ])
        orch = Orchestrator(transport, registry, config)
        orch.run("1/0")
        block = orch.history[2].blocks[0]
        assert block.is_error
        assert "ZeroDivisionError" in block.content

    def test_malformed_tool_json_runs_with_empty_input(self, config):
        seen: list[dict] = []
        registry = ToolRegistry()
        registry.register(FunctionTool("probe", "p", {"type": "object"}, lambda **kw: seen.append(kw) or "ok"))
        transport = ScriptedTransport([
            tool_round([("t1", "probe", "{broken")]),
            text_round("fine"),
        ])
        Orchestrator(transport, registry, config).run("go")
        assert seen == [{}]


# ===========================================================================
# Loop bound
# ===========================================================================


class TestLoopBound:
    def test_fails_after_exactly_max_rounds(self, config):
        rounds = [tool_round([(f"t{i}", "get_current_time", "")]) for i in range(5)]
        transport = ScriptedTransport(rounds)
        orch = Orchestrator(transport, time_registry(), config)

        with pytest.raises(ToolLoopExceededError) as exc_info:
            orch.run("loop forever")

        assert len(transport.requests) == config.max_rounds == 3
        err = exc_info.value
        assert err.max_rounds == 3
        assert isinstance(err, OrchestratorError)
        # user + (assistant tool_use, user tool_result) per round
        assert len(err.history) == 1 + 2 * 3
        assert err.history == orch.history

    def test_answer_on_last_round_succeeds(self):
        transport = ScriptedTransport([
            tool_round([("t1", "get_current_time", "")]),
            text_round("made it"),
        ])
        orch = Orchestrator(transport, time_registry(), AgentConfig(max_rounds=2))
        assert orch.run("x") == "made it"

    def test_single_round_limit(self):
        transport = ScriptedTransport([tool_round([("t1", "get_current_time", "")])])
        orch = Orchestrator(transport, time_registry(), AgentConfig(max_rounds=1))
        with pytest.raises(ToolLoopExceededError):
            orch.run("x")
        assert len(transport.requests) == 1


# ===========================================================================
# Failures and history ownership
# ===========================================================================


class TestFailuresAndHistory:
    def test_transport_error_propagates_without_answer(self, config):
        lines = [text_start(0), text_delta("par"), TransportError("connection reset")]
        transport = ScriptedTransport([lines])
        orch = Orchestrator(transport, config=config)

        with pytest.raises(TransportError):
            orch.run("Hi")

        assert orch.history == (Message.user("Hi"),)
        assert transport.released == 1

    def test_history_spans_turns(self, config):
        transport = ScriptedTransport([text_round("one"), text_round("two")])
        orch = Orchestrator(transport, config=config)

        orch.run("first")
        orch.run("second")

        assert [m.text for m in orch.history] == ["first", "one", "second", "two"]
        assert len(transport.requests[1]["messages"]) == 3

    def test_empty_answer_kept_in_history_but_not_resent(self, config):
        transport = ScriptedTransport([[message_delta("end_turn")], text_round("two")])
        orch = Orchestrator(transport, config=config)

        assert orch.run("first") == ""
        assert orch.run("second") == "two"

        assert orch.history[1] == Message.assistant("")
        assert transport.requests[1]["messages"] == [
            {"role": "user", "content": "first"},
            {"role": "user", "content": "second"},
        ]

    def test_history_snapshot_is_immutable_copy(self, config):
        transport = ScriptedTransport([text_round("one"), text_round("two")])
        orch = Orchestrator(transport, config=config)
        orch.run("first")
        snapshot = orch.history
        orch.run("second")
        assert len(snapshot) == 2
        assert len(orch.history) == 4

    def test_reset_starts_new_conversation(self, config):
        transport = ScriptedTransport([text_round("one"), text_round("two")])
        orch = Orchestrator(transport, config=config)
        orch.run("first")
        orch.reset()
        orch.run("again")
        assert transport.requests[1]["messages"] == [{"role": "user", "content": "again"}]

    def test_accepts_prebuilt_message(self, config):
        transport = ScriptedTransport([text_round("ok")])
        orch = Orchestrator(transport, config=config)
        orch.run(Message.user("prebuilt"))
        assert isinstance(orch.history[0].content, TextContent)
        assert orch.history[0].text == "prebuilt"


# ===========================================================================
# Buffered (non-streaming) mode
# ===========================================================================


class TestBufferedMode:
    def test_buffered_tool_round_trip(self):
        config = AgentConfig(stream=False, max_rounds=3)
        transport = ScriptedTransport([
            {
                "content": [{"type": "tool_use", "id": "t1", "name": "get_current_time", "input": {}}],
                "stop_reason": "tool_use",
            },
            {"content": [{"type": "text", "text": "It is late."}], "stop_reason": "end_turn"},
        ])
        received: list[str] = []
        orch = Orchestrator(transport, time_registry(), config, on_text=received.append)

        assert orch.run("time?") == "It is late."
        assert received == ["It is late."]
        assert transport.requests[0]["stream"] is False
        assert transport.opened == 0

    def test_buffered_tool_result_pairs_by_id(self):
        registry = ToolRegistry()
        registry.register(FunctionTool("echo", "e", {"type": "object"}, lambda text: text))
        transport = ScriptedTransport([
            {
                "content": [
                    {"type": "tool_use", "id": "x2", "name": "echo", "input": {"text": "b"}},
                    {"type": "tool_use", "id": "x1", "name": "echo", "input": {"text": "a"}},
                ],
                "stop_reason": "tool_use",
            },
            {"content": [{"type": "text", "text": "ok"}], "stop_reason": "end_turn"},
        ])
        orch = Orchestrator(transport, registry, AgentConfig(stream=False))
        orch.run("go")
        pairs = {b.tool_use_id: b.content for b in orch.history[2].blocks}
        assert pairs == {"x1": "a", "x2": "b"}


def test_tool_result_text_for_failures():
    assert ToolResult.fail("Unknown tool: x").as_text() == "Error: Unknown tool: x"
