"""Shared utility functions for headstarter.

Provides async command execution and the Rich-based console helpers used for
every piece of user-visible output (banners, success/failure lines, summary
tables).
"""

from __future__ import annotations

import asyncio
import os
import signal
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console()

# Each command gets its own process group on POSIX so a timeout or an
# interrupt can take down everything the shell spawned, not just the shell.
_NEW_SESSION = os.name != "nt"

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


def _kill_process_tree(process: asyncio.subprocess.Process) -> None:
    if _NEW_SESSION:
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
    else:
        process.kill()


async def run_command(
    cmd: str,
    cwd: str | Path | None = None,
    timeout: Optional[float] = None,
) -> tuple[int, str]:
    """Run a shell command and wait for it to exit.

    The child inherits the parent's stdout/stderr so package manager output
    is shown as it happens.

    Args:
        cmd: Shell command string.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the command and every
            process it started are killed.  ``None`` waits indefinitely.

    Returns:
        A ``(returncode, detail)`` tuple.  *detail* is empty unless the
        command timed out.

    Raises:
        OSError: If the shell cannot be spawned at all.
    """
    process = await asyncio.create_subprocess_shell(
        cmd,
        cwd=str(cwd) if cwd else None,
        start_new_session=_NEW_SESSION,
    )

    try:
        await asyncio.wait_for(process.wait(), timeout=timeout)
    except asyncio.TimeoutError:
        _kill_process_tree(process)
        await process.wait()
        return (-1, f"Command timed out after {timeout}s: {cmd}")
    finally:
        if process.returncode is None:
            _kill_process_tree(process)
            await process.wait()

    return (process.returncode or 0, "")


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
        format_duration(3661.0) -> "1h 1m 1s"
    """
    if seconds < 0:
        return "0.0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = seconds % 60

    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")

    if hours > 0 or minutes > 0:
        parts.append(f"{int(secs)}s")
    else:
        parts.append(f"{secs:.1f}s")

    return " ".join(parts)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_welcome() -> None:
    """Print the welcome banner shown before the first question."""
    console.print(
        Panel(
            "[bold green]Welcome to headstarter[/bold green]\n"
            "Answer a few questions and get a ready-to-run project skeleton.",
            border_style="green",
        )
    )


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")
