"""Rich progress reporting for plan execution."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.status import Status

from headstarter.utils import console as default_console


class ProgressReporter:
    """Spinner-style task reporter.

    ``start`` shows a spinner for the running task; ``succeed`` and ``fail``
    stop it and leave a permanent line behind.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or default_console
        self._status: Optional[Status] = None

    def start(self, name: str) -> None:
        self.stop()
        self._status = self.console.status(f"Executing: {escape(name)}", spinner="dots")
        self._status.start()

    def succeed(self, name: str) -> None:
        self.stop()
        self.console.print(f"[green]✔[/green] {escape(name)} completed")

    def fail(self, name: str, detail: str = "") -> None:
        self.stop()
        self.console.print(f"[bold red]✖ {escape(name)} failed[/bold red]")
        if detail:
            self.console.print(f"  [red]{escape(detail)}[/red]", highlight=False)

    def note(self, text: str) -> None:
        self.console.print(f"\n[yellow]{escape(text)}[/yellow]\n")

    def stop(self) -> None:
        """Stop the spinner, if one is running."""
        if self._status is not None:
            self._status.stop()
            self._status = None
