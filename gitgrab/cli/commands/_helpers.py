"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import NoReturn

import typer

from gitgrab.core.errors import ErrorCode
from gitgrab.output.console import ConsoleProtocol, Style


def fail(
    console: ConsoleProtocol,
    message: str,
    code: ErrorCode,
    *,
    hint: str | None = None,
) -> NoReturn:
    """Print an error (and optional hint) and exit with `code`."""
    console.error(message)
    if hint:
        console.print(f"hint: {hint}", Style.DIM)
    raise typer.Exit(code=int(code))
