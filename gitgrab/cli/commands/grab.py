"""Grab command - clone or refresh every repository of an organization."""

from __future__ import annotations

import dataclasses
import shutil
from pathlib import Path

import typer

from gitgrab import __version__
from gitgrab.cli.commands._helpers import fail
from gitgrab.cli.context import build_context
from gitgrab.core.errors import ErrorCode
from gitgrab.core.result import Err, Ok
from gitgrab.core.types import OrganizationName, parse_clone_method
from gitgrab.github.api import user_agent
from gitgrab.github.http import RealHttpClient
from gitgrab.output.console import Style
from gitgrab.platform.process import SubprocessRunner
from gitgrab.services.grab import GrabService, GrabSettings


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


def grab(
    target_dir: Path = typer.Argument(..., help="Directory to clone repositories into."),
    org: str = typer.Option(..., "--org", "-o", help="GitHub organization name."),
    method: str | None = typer.Option(
        None,
        "--method",
        "-m",
        help="Clone method: 'ssh' or 'http' (default: ssh, or [clone] method from the config file).",
    ),
    jobs: int | None = typer.Option(None, "--jobs", "-j", min=1, help="Repositories to sync in parallel."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print actions without running git."),
    config: Path | None = typer.Option(None, "--config", help="Config file (default: ./gitgrab.toml if present)."),
    http_timeout: float | None = typer.Option(None, "--http-timeout", min=0.1, help="Seconds per API request."),
    git_timeout: float | None = typer.Option(None, "--git-timeout", min=1.0, help="Seconds per git command."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Clone all repositories from a GitHub organization into TARGET_DIR.

    Existing clones are refreshed instead: `git pull` when on the default
    branch, `git fetch` otherwise. GITHUB_TOKEN must be set.
    """
    ctx = build_context(config)
    console = ctx.console

    org_result = OrganizationName.parse(org)
    if isinstance(org_result, Err):
        fail(console, str(org_result.error), ErrorCode.USER_ERROR)
    organization = org_result.value

    settings_config = ctx.config
    if method is not None:
        match parse_clone_method(method):
            case Err(e):
                fail(console, e.message, ErrorCode.USER_ERROR)
            case Ok(parsed):
                settings_config = dataclasses.replace(
                    settings_config,
                    clone=dataclasses.replace(settings_config.clone, method=parsed),
                )
    if jobs is not None:
        settings_config = dataclasses.replace(
            settings_config,
            clone=dataclasses.replace(settings_config.clone, jobs=jobs),
        )
    if http_timeout is not None or git_timeout is not None:
        settings_config = dataclasses.replace(
            settings_config,
            timeouts=dataclasses.replace(
                settings_config.timeouts,
                http=http_timeout if http_timeout is not None else settings_config.timeouts.http,
                git=git_timeout if git_timeout is not None else settings_config.timeouts.git,
            ),
        )

    if shutil.which("git") is None:
        fail(console, "git is not installed or not in PATH", ErrorCode.ENV_ERROR)

    try:
        target = target_dir.expanduser().resolve()
        target.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        fail(console, f"cannot create directory {target_dir}: {e}", ErrorCode.ENV_ERROR)

    service = GrabService(
        settings=GrabSettings(
            organization=organization,
            token=ctx.token,
            target_dir=target,
            config=settings_config,
        ),
        console=console,
        http=RealHttpClient(timeout=settings_config.timeouts.http, user_agent=user_agent()),
        runner=SubprocessRunner(timeout=settings_config.timeouts.git),
    )

    match service.run(dry_run=dry_run):
        case Err(e):
            fail(console, f"error fetching repositories: {e.message}", ErrorCode.NETWORK_ERROR, hint=e.hint)
        case Ok(summary):
            if summary.failure:
                console.print(f"{summary.failure} repositories failed", Style.ERROR)
                raise typer.Exit(code=int(ErrorCode.SYNC_ERROR))
