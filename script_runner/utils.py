"""Shared console helpers for the build script runner.

Every module prints through the single Rich ``console`` defined here so that
phase headers, verbose command echoes and error messages share one output
stream and one style.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule

console = Console()


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Render an elapsed time for the verbose ``finished in`` line.

    Under a minute keeps one decimal (``"0.4s"``); longer spans drop the
    fraction and show whole units (``"1m 5s"``, ``"1h 1m 1s"``).
    """
    if seconds < 60:
        return f"{max(seconds, 0.0):.1f}s"

    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    return f"{minutes}m {secs}s"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


PHASE_COLORS: dict[str, str] = {
    "before-build": "bright_cyan",
    "after-emit": "bright_green",
    "on-exit": "bright_blue",
}


def print_phase_header(phase: str, description: str) -> None:
    """Print the one-line banner announcing a phase's scripts.

    Args:
        phase: Phase identifier (``before-build``, ``after-emit``, ``on-exit``).
        description: Human-readable description, e.g. ``"pre-build scripts"``.
    """
    color = PHASE_COLORS.get(phase, "white")
    console.print(
        Rule(f"[bold {color}]Executing {description}[/bold {color}]", style=color)
    )


def print_command(command_line: str) -> None:
    """Echo a command line before it runs (verbose mode)."""
    console.print(f"[dim]$ {escape(command_line)}[/dim]", highlight=False)


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]")
