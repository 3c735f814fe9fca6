from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from gitgrab.core.config import (
    DEFAULT_CONFIG_FILENAME,
    GrabConfig,
    load_config,
    load_config_or_default,
    token_from_env,
)
from gitgrab.core.errors import ErrorCode
from gitgrab.core.result import Err
from gitgrab.core.types import GitHubToken
from gitgrab.output.console import ConsoleProtocol, RichConsole, Style


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: GrabConfig
    token: GitHubToken
    console: ConsoleProtocol


def build_context(config_path: Path | None = None) -> CLIContext:
    """Load config and token, or exit before any network or git activity.

    An explicit `--config` must exist; the default `gitgrab.toml` in the
    current directory is optional.
    """
    console = RichConsole()

    if config_path is not None:
        config_result = load_config(config_path)
    else:
        config_result = load_config_or_default(Path.cwd() / DEFAULT_CONFIG_FILENAME)
    if isinstance(config_result, Err):
        error = config_result.error
        console.error(error.message)
        code = ErrorCode.IO_ERROR if error.unreadable else ErrorCode.USER_ERROR
        raise typer.Exit(code=int(code))
    config = config_result.value
    for warning in config.warnings:
        console.warning(warning)

    token_result = token_from_env()
    if isinstance(token_result, Err):
        console.error(token_result.error.message)
        if token_result.error.hint:
            console.print(f"hint: {token_result.error.hint}", Style.DIM)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(config=config, token=token_result.value, console=console)
