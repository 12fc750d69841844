"""Rich formatting helpers for the Johnathan CLI.

Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape

if TYPE_CHECKING:
    from collections.abc import Callable

    from johnathan.exceptions import ToolLoopExceededError
    from johnathan.orchestrator.models import StepResult

_PREVIEW_CHARS = 200


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def print_banner(version: str, console: Console) -> None:
    title = f"Johnathan Agent v{version}"
    console.print(f"[bold]{title}[/bold]")
    console.print("=" * len(title))
    console.print("Type 'quit' or 'exit' to stop.\n")


def make_text_sink(console: Console) -> Callable[[str], None]:
    """Return a callback that writes streamed text fragments as they arrive."""

    def _write(fragment: str) -> None:
        console.out(fragment, end="", highlight=False)

    return _write


def format_step(step: StepResult, console: Console) -> None:
    """Display one executed tool call, dimmed."""
    args = json.dumps(step.tool_call.input, ensure_ascii=False)
    text = step.result.as_text()
    if len(text) > _PREVIEW_CHARS:
        text = text[: _PREVIEW_CHARS - 3] + "..."
    style = "dim" if step.success else "dim red"
    console.print(
        f"[{style}]\\[tool] {escape(step.tool_call.name)}({escape(args)}) -> {escape(text)}[/{style}]"
    )


def format_loop_exceeded(error: ToolLoopExceededError, console: Console) -> None:
    format_error(str(error), console)
    console.print(f"[dim]{len(error.history)} message(s) in history at failure.[/dim]")


def format_error(message: str, console: Console) -> None:
    """Display an error message in red."""
    console.print(f"[red]Error:[/red] {escape(message)}")
