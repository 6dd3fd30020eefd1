"""
Rich console interface for ai-commit.
"""

import os
import sys
import select
from typing import List, Optional, Tuple
from rich.console import Console
from rich.prompt import Confirm
from rich.table import Table
from rich.theme import Theme
from rich import box
from rich.markup import escape

from ..config.settings import Settings, UISettings


class AICommitConsole:
    """Console output and prompts for ai-commit."""

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize console with settings."""
        self.ui = settings.ui if settings else UISettings()
        self._setup_styles()
        self.console = Console(
            color_system="auto" if self.ui.use_colors else None,
            theme=self.theme
        )

    def _setup_styles(self) -> None:
        """Setup custom styles for consistent theming."""
        self.styles = {
            "title": "bold blue",
            "success": "bold green",
            "warning": "bold yellow",
            "error": "bold red",
            "info": "blue",
            "muted": "dim",
            "file_added": "green",
            "file_modified": "yellow",
            "file_deleted": "red",
            "commit_hash": "dim cyan",
        }

        self.theme = Theme(self.styles)

    def print_staged_files(self, files: List[Tuple[str, str]]) -> None:
        """Show the staged files as a status table."""
        if not files:
            return

        status_styles = {
            "A": ("Added", "file_added"),
            "M": ("Modified", "file_modified"),
            "D": ("Deleted", "file_deleted"),
            "R": ("Renamed", "file_modified"),
        }

        table = Table(title="Staged Changes", box=box.SIMPLE)
        table.add_column("Status", style="bold")
        table.add_column("File")

        for status, path in files:
            label, style = status_styles.get(status[:1], (status, "muted"))
            table.add_row(f"[{style}]{label}[/{style}]", path)

        self.console.print(table)

    def show_commit_message_preview(self, message: str) -> None:
        """Display the suggested commit message."""
        self.console.print()
        self.console.print("[title]Suggested commit message:[/title]")
        self.console.print(f"  {message}", highlight=False, markup=False)
        self.console.print()

    def show_ai_backend_info(self, base_url: str, model: str) -> None:
        """Display which server and model are used."""
        self.console.print(f"[muted]Server: {base_url} | Model: {model}[/muted]")

    def confirm_action(self, message: str, default: bool = False, timeout: Optional[float] = None) -> bool:
        """Ask a yes/no question; anything but an explicit yes declines.

        Returns False without asking when stdin is not a terminal, and on
        POSIX gives up after `timeout` seconds without input.
        """
        if not sys.stdin.isatty():
            self.print_info("Non-interactive environment detected, aborting.")
            return False

        if timeout and os.name == "posix":
            suffix = "[y/N]" if not default else "[Y/n]"
            self.console.print(f"{escape(message)} [prompt.choices]{escape(suffix)}[/prompt.choices] ", end="")
            ready, _, _ = select.select([sys.stdin], [], [], timeout)
            if not ready:
                self.console.print()
                self.print_warning("Timeout reached. Aborting.")
                return False
            answer = sys.stdin.readline().strip().lower()
            if not answer:
                return default
            return answer in ("y", "yes")

        return Confirm.ask(message, default=default, console=self.console)

    def show_progress_spinner(self, description: str):
        """Create a progress spinner context manager."""
        return self.console.status(f"[blue]{description}...[/blue]", spinner="dots")

    def print_success(self, message: str) -> None:
        """Print success message."""
        self.console.print(f"[success]✓ {escape(message)}[/success]")

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        self.console.print(f"[warning]⚠ {escape(message)}[/warning]")

    def print_info(self, message: str) -> None:
        """Print info message."""
        self.console.print(f"[info]ℹ {escape(message)}[/info]")
