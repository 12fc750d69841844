"""Johnathan CLI -- terminal interface for the agent.

This module is NEVER imported from johnathan/__init__.py.
It is only loaded via the ``johnathan`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

try:
    import click
except ImportError:
    raise ImportError(
        "CLI dependencies not installed. Install with: pip install johnathan-agent[cli]"
    ) from None

from johnathan.models.config import DEFAULT_API_URL, DEFAULT_MODEL, AgentConfig
from johnathan.prompts.system import DEFAULT_SYSTEM_PROMPT

if TYPE_CHECKING:
    from rich.console import Console

    from johnathan.orchestrator import Orchestrator
    from johnathan.protocols import Transport


@click.group()
@click.option("--model", default=DEFAULT_MODEL, envvar="JOHNATHAN_MODEL", help="Model identifier.")
@click.option(
    "--max-tokens",
    default=1024,
    type=click.IntRange(min=1),
    envvar="JOHNATHAN_MAX_TOKENS",
    help="Maximum tokens generated per round.",
)
@click.option(
    "--max-rounds",
    default=10,
    type=click.IntRange(min=1),
    envvar="JOHNATHAN_MAX_ROUNDS",
    help="Maximum tool-use rounds per turn.",
)
@click.option(
    "--system",
    "system_prompt",
    default=DEFAULT_SYSTEM_PROMPT,
    envvar="JOHNATHAN_SYSTEM_PROMPT",
    help="System prompt.",
)
@click.option("--api-url", default=DEFAULT_API_URL, envvar="JOHNATHAN_API_URL", help="Messages endpoint.")
@click.option("--no-stream", is_flag=True, help="Wait for complete responses instead of streaming.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(
    ctx: click.Context,
    model: str,
    max_tokens: int,
    max_rounds: int,
    system_prompt: str,
    api_url: str,
    no_stream: bool,
    verbose: bool,
) -> None:
    """Johnathan: a streaming, tool-using chat agent."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config"] = AgentConfig(
        api_url=api_url,
        model=model,
        max_tokens=max_tokens,
        max_rounds=max_rounds,
        system_prompt=system_prompt,
        stream=not no_stream,
    )


def _make_client(config: AgentConfig) -> Transport:
    """Build the transport. Tests patch this to script responses."""
    from johnathan.llm.client import AnthropicClient

    return AnthropicClient(config)


def _make_orchestrator(client: Transport, config: AgentConfig, console: Console) -> Orchestrator:
    from johnathan.cli.formatting import format_step, make_text_sink
    from johnathan.orchestrator import Orchestrator
    from johnathan.toolkit import default_registry

    return Orchestrator(
        client,
        default_registry(),
        config,
        on_text=make_text_sink(console),
        on_step=lambda step: format_step(step, console),
    )


# Register subcommands after cli group is defined
from johnathan.cli.commands.ask import ask  # noqa: E402
from johnathan.cli.commands.chat import chat  # noqa: E402

cli.add_command(ask)
cli.add_command(chat)
