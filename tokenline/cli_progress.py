"""Console rendering for the tokenline CLI."""
from __future__ import annotations

import json
from typing import Any, Dict, Optional

from rich.console import Console
from rich.panel import Panel
from rich.status import Status
from rich.syntax import Syntax
from rich.table import Table

console = Console(stderr=True)


def render_configuration_summary(config: Dict[str, Any], out: Optional[Console] = None) -> None:
    """Render startup configuration summary."""
    target = out or console
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")

    for key, value in config.items():
        rendered = "-" if value is None else str(value)
        table.add_row(key, rendered)

    panel = Panel(
        table,
        title="[bold green]tokenline[/bold green]",
        subtitle="[dim]API client CLI[/dim]",
        border_style="blue",
    )
    target.print(panel)


def render_result(data: Any, out: Optional[Console] = None) -> None:
    """Pretty-print a response body as JSON."""
    target = out or Console()
    text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
    target.print(Syntax(text, "json", word_wrap=True))


class RichPresenter:
    """
    Terminal presenter: panels for dialogs, one status line for the spinners.

    The busy toast and the batch overlay are separate channels sharing a
    single rich status (rich allows one live display at a time); the overlay
    title wins while both are up.

    Implements IPresenter protocol.
    """

    def __init__(self, out: Optional[Console] = None):
        self._console = out or console
        self._status: Optional[Status] = None
        self._busy_title: Optional[str] = None
        self._overlay_title: Optional[str] = None

    @property
    def active_title(self) -> Optional[str]:
        """Title currently on screen, or None when nothing spins."""
        return self._overlay_title or self._busy_title

    def show(self, title: str, content: str, dismiss_only: bool = True) -> None:
        self._console.print(
            Panel(content, title=f"[bold red]{title}[/bold red]", border_style="red")
        )

    def show_busy(self, title: str) -> None:
        self._busy_title = title
        self._refresh()

    def hide_busy(self) -> None:
        self._busy_title = None
        self._refresh()

    def show_overlay(self, title: str) -> None:
        self._overlay_title = title
        self._refresh()

    def hide_overlay(self) -> None:
        self._overlay_title = None
        self._refresh()

    def _refresh(self) -> None:
        title = self.active_title
        if title is None:
            if self._status is not None:
                self._status.stop()
                self._status = None
            return
        if self._status is None:
            self._status = self._console.status(f"[bold cyan]{title}...", spinner="dots")
            self._status.start()
        else:
            self._status.update(f"[bold cyan]{title}...")
