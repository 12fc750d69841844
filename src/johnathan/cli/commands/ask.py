"""johnathan ask -- answer a single prompt and exit."""

from __future__ import annotations

import click

from johnathan.cli.formatting import format_error, format_loop_exceeded, get_console
from johnathan.exceptions import AgentError, ToolLoopExceededError


@click.command()
@click.argument("prompt", nargs=-1, required=True)
@click.pass_context
def ask(ctx: click.Context, prompt: tuple[str, ...]) -> None:
    """Send PROMPT to the agent and print the answer."""
    from johnathan.cli import _make_client, _make_orchestrator

    console = get_console()
    config = ctx.obj["config"]
    try:
        client = _make_client(config)
        try:
            orch = _make_orchestrator(client, config, console)
            orch.run(" ".join(prompt))
            console.out("")
        finally:
            client.close()
    except ToolLoopExceededError as e:
        console.out("")
        format_loop_exceeded(e, console)
        raise SystemExit(1) from None
    except AgentError as e:
        console.out("")
        format_error(str(e), console)
        raise SystemExit(1) from None
