"""Console output with theme support.

Rich formatting for interactive terminals, plain text for pipes, logs and CI.
"""

import os
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn
from rich.text import Text
from rich.theme import Theme


class StatusType(Enum):
    """Standard status types with associated symbols."""
    SUCCESS = ("[✓]", "success", "green")
    ERROR = ("[x]", "error", "red")
    WARNING = ("[!]", "warning", "yellow")


@dataclass
class ThemeColors:
    """Color definitions for a theme."""
    info: str
    warning: str
    error: str
    success: str
    highlight: str
    path: str
    number: str
    dim: str
    heading: str


THEMES = {
    'manhattan': ThemeColors(
        info='cyan',
        warning='yellow',
        error='red',
        success='green',
        highlight='bold bright_cyan',
        path='bright_blue',
        number='bright_white',
        dim='grey50',
        heading='bright_cyan',
    ),
    'green': ThemeColors(
        info='green',
        warning='yellow',
        error='red',
        success='bright_green',
        highlight='bold bright_green',
        path='bright_green',
        number='green',
        dim='green',
        heading='bright_cyan',
    ),
    'sunset': ThemeColors(
        info='orange3',
        warning='yellow',
        error='red3',
        success='green',
        highlight='bold orange1',
        path='wheat1',
        number='orange1',
        dim='grey50',
        heading='dark_orange3',
    ),
}


class ConsoleManager:
    """Console management supporting Rich and plain output."""

    def __init__(self, theme: str = "manhattan", file: Optional[Any] = None,
                 force_plain: bool = False):
        """Initialize console manager.

        Args:
            theme: Theme name from THEMES
            file: Output file (defaults to sys.stdout)
            force_plain: Force plain output even on a terminal
        """
        self.theme_name = theme
        self.theme_colors = THEMES.get(theme, THEMES['manhattan'])
        self.file = file or sys.stdout
        self.use_rich = not force_plain and self._should_use_rich_terminal()

        self.console = Console(
            theme=self._create_rich_theme(),
            file=self.file,
            force_terminal=self.use_rich,
            no_color=not self.use_rich,
            highlight=False,
        )

    def _should_use_rich_terminal(self) -> bool:
        """Terminal detection honouring NO_COLOR and FORCE_COLOR."""
        if os.environ.get('NO_COLOR'):
            return False
        if os.environ.get('FORCE_COLOR'):
            return True
        return hasattr(self.file, 'isatty') and self.file.isatty()

    def _create_rich_theme(self) -> Theme:
        """Create Rich theme from our theme colors."""
        colors = self.theme_colors
        return Theme({
            'info': colors.info,
            'warning': colors.warning,
            'error': colors.error,
            'success': colors.success,
            'highlight': colors.highlight,
            'path': colors.path,
            'number': colors.number,
            'dim': colors.dim,
            'heading': colors.heading,
        })

    def print(self, *args, **kwargs):
        """Print with Rich markup."""
        self.console.print(*args, **kwargs)

    def print_status(self, status: StatusType, message: str, prefix: str = ""):
        """Print a status line with icon."""
        icon, _, color = status.value
        status_text = Text()
        if prefix:
            status_text.append(prefix + " ")
        status_text.append(f"{icon} ", style=color)
        status_text.append(message)
        self.console.print(status_text)

    def print_error(self, message: str):
        """Print an error message."""
        self.print_status(StatusType.ERROR, message)

    def print_success(self, message: str):
        """Print a success message."""
        self.print_status(StatusType.SUCCESS, message)

    def print_warning(self, message: str):
        """Print a warning message."""
        self.print_status(StatusType.WARNING, message)

    def print_separator(self, char: str = "═", width: int = 60):
        """Print a separator line."""
        self.console.print(char * width, style="dim")

    def print_exception(self):
        """Print the current exception traceback."""
        self.console.print_exception()

    def create_progress(self) -> Progress:
        """Progress bar matching the console's output target."""
        return Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
            disable=not self.use_rich,
        )
