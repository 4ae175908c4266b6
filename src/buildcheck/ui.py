from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.text import Text

_T = TypeVar("_T")

console = Console()

RULE_WIDTH = 60


def plain_enabled() -> bool:
    return os.getenv("BUILDCHECK_PLAIN", "0") == "1"


def say(message: str = "", style: str | None = None) -> None:
    """Print one line without interpreting rich markup in tool output."""
    if plain_enabled() or style is None:
        console.print(Text(message), soft_wrap=True)
    else:
        console.print(Text(message, style=style), soft_wrap=True)


def rule(char: str = "=") -> None:
    say(char * RULE_WIDTH, style="dim")


def banner(title: str) -> None:
    say()
    rule()
    say(title, style="bold bright_cyan")
    rule()


@dataclass(frozen=True)
class Spinner:
    message: str

    def run(self, fn: Callable[[], _T]) -> _T:
        if plain_enabled() or not console.is_terminal:
            return fn()

        with Progress(
            SpinnerColumn(style="bright_magenta"),
            TextColumn("[bold bright_cyan]{task.description}[/bold bright_cyan]"),
            transient=True,
            console=console,
        ) as prog:
            task_id = prog.add_task(self.message, total=None)
            try:
                return fn()
            finally:
                prog.update(task_id, completed=1)


def configure_logging(verbose: bool) -> None:
    """Route buildcheck loggers through rich when --verbose is given."""
    level = logging.DEBUG if verbose else logging.WARNING
    root = logging.getLogger("buildcheck")
    root.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        root.addHandler(RichHandler(console=console, show_path=False, markup=False))
