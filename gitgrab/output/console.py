"""Console output for progress lines, warnings and the run summary.

Services receive a `ConsoleProtocol` instead of printing, so the same code
drives the terminal (`RichConsole`) and the test suite (`MockConsole`).
Both are safe to call from the worker threads used by `--jobs`.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Where services send everything the user sees.

    Implementations may print (RichConsole) or record (MockConsole); both
    must accept calls from several threads at once.
    """

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        """Print a message with optional styling.

        Args:
            message: The text to print, shown as-is (no markup)
            style: The style to apply
        """
        ...

    def success(self, message: str) -> None:
        """Print a success line (one finished repository)."""
        ...

    def error(self, message: str) -> None:
        """Print an error line. Does not exit."""
        ...

    def warning(self, message: str) -> None:
        """Print a warning, e.g. a fallback from pull to fetch."""
        ...

    def info(self, message: str) -> None:
        """Print an informational message."""
        ...

    def newline(self) -> None:
        """Print an empty line."""
        ...


class RichConsole:
    """Terminal console backed by Rich.

    Messages are printed with `markup=False` where they carry text from the
    outside world (repository names, git stderr) so brackets are not eaten.
    """

    def __init__(self, *, no_color: bool = False) -> None:
        from rich.console import Console

        self._console = Console(no_color=no_color, highlight=False)
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "cyan",
            Style.DIM: "dim",
        }

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = self._style_map.get(style, "")
        self._console.print(message, style=rich_style or None, markup=False)

    def success(self, message: str) -> None:
        self._console.print(f"  [green]✓[/green] {_escape(message)}")

    def error(self, message: str) -> None:
        self._console.print(f"  [red bold]✗[/red bold] {_escape(message)}")

    def warning(self, message: str) -> None:
        self._console.print(f"  [yellow]warning:[/yellow] {_escape(message)}")

    def info(self, message: str) -> None:
        self._console.print(f"[cyan]{_escape(message)}[/cyan]")

    def newline(self) -> None:
        self._console.print()


def _escape(text: str) -> str:
    from rich.markup import escape

    return escape(text)


@dataclass
class OutputRecord:
    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console that records output for assertions in tests."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def _record(self, message: str, style: Style) -> None:
        with self._lock:
            self.outputs.append(OutputRecord(message, style))

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._record(message, style)

    def success(self, message: str) -> None:
        self._record(f"✓ {message}", Style.SUCCESS)

    def error(self, message: str) -> None:
        self._record(f"✗ {message}", Style.ERROR)

    def warning(self, message: str) -> None:
        self._record(f"warning: {message}", Style.WARNING)

    def info(self, message: str) -> None:
        self._record(message, Style.INFO)

    def newline(self) -> None:
        self._record("", Style.DEFAULT)

    def clear(self) -> None:
        self.outputs.clear()

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style == Style.WARNING for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]

    def count(self, style: Style) -> int:
        return sum(1 for o in self.outputs if o.style == style)
