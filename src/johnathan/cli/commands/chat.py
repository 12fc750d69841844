"""johnathan chat -- interactive read-eval-print loop."""

from __future__ import annotations

import click

from johnathan._version import __version__
from johnathan.cli.formatting import (
    format_error,
    format_loop_exceeded,
    get_console,
    print_banner,
)
from johnathan.exceptions import AgentError, ToolLoopExceededError

EXIT_COMMANDS = frozenset({"quit", "exit", "q"})


def should_exit(line: str) -> bool:
    """Whether the user asked to leave the REPL."""
    return line.strip().lower() in EXIT_COMMANDS


@click.command()
@click.pass_context
def chat(ctx: click.Context) -> None:
    """Start an interactive conversation. History is kept until exit."""
    from johnathan.cli import _make_client, _make_orchestrator

    console = get_console()
    config = ctx.obj["config"]
    try:
        client = _make_client(config)
    except AgentError as e:
        format_error(str(e), console)
        raise SystemExit(1) from None

    try:
        orch = _make_orchestrator(client, config, console)
        print_banner(__version__, console)
        while True:
            try:
                line = console.input("> ").strip()
            except (EOFError, KeyboardInterrupt):
                console.print()
                break
            if not line:
                continue
            if should_exit(line):
                break

            try:
                orch.run(line)
                console.out("\n")
            except ToolLoopExceededError as e:
                console.out("")
                format_loop_exceeded(e, console)
            except AgentError as e:
                console.out("")
                format_error(str(e), console)
        console.print("Goodbye!")
    finally:
        client.close()
