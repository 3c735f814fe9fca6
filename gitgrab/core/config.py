"""Typed configuration for a gitgrab run.

Settings come from three places, lowest precedence first: built-in defaults,
an optional TOML file, and command-line flags (applied by the CLI through
`dataclasses.replace`). The token is never read from the file; it comes from
the `GITHUB_TOKEN` environment variable only.

Example `gitgrab.toml`:

    [github]
    api_url = "https://github.example.com/api/v3"
    host = "github.example.com"
    per_page = 100

    [clone]
    method = "http"
    jobs = 4

    [timeouts]
    http = 30
    git = 600
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeVar

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_float, get_int, get_str, get_table
from .types import CloneMethod, GitHubToken, resolve_clone_method

__all__ = [
    "DEFAULT_API_URL",
    "DEFAULT_CONFIG_FILENAME",
    "DEFAULT_HOST",
    "DEFAULT_PER_PAGE",
    "ConfigError",
    "GitHubConfig",
    "CloneConfig",
    "TimeoutsConfig",
    "GrabConfig",
    "load_config",
    "load_config_or_default",
    "token_from_env",
]

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_HOST = "github.com"
DEFAULT_PER_PAGE = 100
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_GIT_TIMEOUT = 10 * 60.0
DEFAULT_CONFIG_FILENAME = "gitgrab.toml"
TOKEN_ENV_VAR = "GITHUB_TOKEN"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or is missing a required value."""

    message: str
    path: Path | None = None
    hint: str | None = None
    unreadable: bool = False


@dataclass(frozen=True, slots=True)
class GitHubConfig:
    api_url: str = DEFAULT_API_URL
    host: str = DEFAULT_HOST
    per_page: int = DEFAULT_PER_PAGE


@dataclass(frozen=True, slots=True)
class CloneConfig:
    method: CloneMethod = CloneMethod.SSH
    jobs: int = 1


@dataclass(frozen=True, slots=True)
class TimeoutsConfig:
    """Upper bounds, in seconds, for a single HTTP request and a single git call."""

    http: float = DEFAULT_HTTP_TIMEOUT
    git: float = DEFAULT_GIT_TIMEOUT


T = TypeVar("T")


def _or_default(value: T | None, default: T) -> T:
    return default if value is None else value


@dataclass(frozen=True, slots=True)
class GrabConfig:
    """Main configuration container.

    `warnings` holds problems that were tolerated while loading (an unknown
    clone method falls back to ssh); the CLI prints them before starting.
    """

    github: GitHubConfig = field(default_factory=GitHubConfig)
    clone: CloneConfig = field(default_factory=CloneConfig)
    timeouts: TimeoutsConfig = field(default_factory=TimeoutsConfig)
    warnings: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> GrabConfig:
        github: StrDict = get_table(data, "github") or {}
        clone: StrDict = get_table(data, "clone") or {}
        timeouts: StrDict = get_table(data, "timeouts") or {}

        warnings: list[str] = []
        method = CloneMethod.SSH
        if "method" in clone:
            raw_method = clone["method"]
            if not isinstance(raw_method, str):
                raw_method = str(raw_method)
            method, method_error = resolve_clone_method(raw_method)
            if method_error is not None:
                warnings.append(f"{method_error.message}, defaulting to {method_error.fallback}")

        per_page = _or_default(get_int(github, "per_page"), DEFAULT_PER_PAGE)
        if not 1 <= per_page <= 100:
            raise ValueError(f"github.per_page must be between 1 and 100, got {per_page}")

        jobs = _or_default(get_int(clone, "jobs"), 1)
        if jobs < 1:
            raise ValueError(f"clone.jobs must be at least 1, got {jobs}")

        http_timeout = _or_default(get_float(timeouts, "http"), DEFAULT_HTTP_TIMEOUT)
        git_timeout = _or_default(get_float(timeouts, "git"), DEFAULT_GIT_TIMEOUT)
        if http_timeout <= 0 or git_timeout <= 0:
            raise ValueError("timeouts must be positive")

        return cls(
            github=GitHubConfig(
                api_url=(get_str(github, "api_url") or DEFAULT_API_URL).rstrip("/"),
                host=get_str(github, "host") or DEFAULT_HOST,
                per_page=per_page,
            ),
            clone=CloneConfig(method=method, jobs=jobs),
            timeouts=TimeoutsConfig(http=http_timeout, git=git_timeout),
            warnings=tuple(warnings),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path, unreadable=True))
    except OSError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path, unreadable=True))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path, unreadable=True))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[GrabConfig, ConfigError]:
    """Load and validate configuration from a TOML file."""
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(GrabConfig.from_dict(result.value))
    except ValueError as e:
        return Err(ConfigError(f"Invalid config: {e}", path=path))


def load_config_or_default(path: Path) -> Result[GrabConfig, ConfigError]:
    """Like `load_config`, but a missing file yields the defaults."""
    if not path.exists():
        return Ok(GrabConfig())
    return load_config(path)


def token_from_env(environ: Mapping[str, str] | None = None) -> Result[GitHubToken, ConfigError]:
    env = os.environ if environ is None else environ
    parsed = GitHubToken.parse(env.get(TOKEN_ENV_VAR, "").strip())
    if isinstance(parsed, Err):
        return Err(
            ConfigError(
                f"{TOKEN_ENV_VAR} environment variable is required",
                hint=f"export {TOKEN_ENV_VAR}=<personal access token>",
            )
        )
    return parsed
