"""Per-repository sync decision: clone, pull or fetch.

Policy:
- No local path: clone, using the transport URL from `clone_url`.
- Local path present, default branch unknown: fetch (warn).
- Current branch cannot be determined: fetch (warn).
- On the default branch: pull. On any other branch: fetch.

An existing path is never removed or re-cloned, and a failed clone is not
cleaned up. The engine keeps no state between calls; everything it needs is
in the `SyncConfig` it is handed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from gitgrab.core.config import DEFAULT_HOST
from gitgrab.core.result import Err, Ok, Result
from gitgrab.core.types import CloneMethod, GitHubToken, OrganizationName, RepositoryRecord
from gitgrab.git.repository import NETWORK_TIMEOUT_SECONDS, GitError, Repository, clone
from gitgrab.output.console import ConsoleProtocol, Style
from gitgrab.platform.process import ProcessRunner

__all__ = [
    "SyncAction",
    "SyncConfig",
    "SyncEngine",
    "SyncError",
    "clone_url",
]


class SyncAction(str, Enum):
    CLONE = "clone"
    PULL = "pull"
    FETCH = "fetch"

    def __str__(self) -> str:
        return self.value

    @property
    def past_tense(self) -> str:
        return {"clone": "cloned", "pull": "pulled", "fetch": "fetched"}[self.value]


@dataclass(frozen=True, slots=True)
class SyncConfig:
    """Everything needed to sync one repository."""

    repository: RepositoryRecord
    target_dir: Path
    token: GitHubToken
    organization: OrganizationName
    method: CloneMethod = CloneMethod.SSH
    host: str = DEFAULT_HOST

    @property
    def repo_path(self) -> Path:
        return self.target_dir / self.repository.name.value


@dataclass(frozen=True, slots=True)
class SyncError:
    """A clone, pull or fetch failed for one repository.

    `detail` comes from git's stderr with the token masked.
    """

    repository: str
    verb: SyncAction
    detail: str

    def __str__(self) -> str:
        return f"failed to {self.verb} {self.repository}: {self.detail}"


def clone_url(config: SyncConfig) -> str:
    """Transport URL for cloning `config.repository`.

    ssh uses the SSH URL whatever the visibility. http embeds the token only
    for private repositories; public ones use the anonymous clone URL so the
    token does not show up in process arguments for no reason.
    """
    repo = config.repository
    if config.method is CloneMethod.SSH:
        return repo.ssh_url.value
    if repo.private:
        return f"https://{config.token.value}@{config.host}/{config.organization}/{repo.name}.git"
    return repo.clone_url.value


class SyncEngine:
    """Clones missing repositories and refreshes existing ones."""

    def __init__(
        self,
        runner: ProcessRunner,
        console: ConsoleProtocol,
        *,
        git_timeout: float = NETWORK_TIMEOUT_SECONDS,
    ) -> None:
        self._runner = runner
        self._console = console
        self._git_timeout = git_timeout

    def plan(self, config: SyncConfig) -> SyncAction:
        """Decide what `sync` would do, warning when it has to fall back to fetch."""
        name = config.repository.name
        repo = self._repository(config.repo_path)
        if not repo.exists():
            return SyncAction.CLONE

        default_branch = config.repository.default_branch
        if not default_branch.is_known:
            self._console.warning(f"no default branch information for {name}, fetching instead")
            return SyncAction.FETCH

        match repo.current_branch():
            case Err(e):
                self._console.warning(f"could not determine current branch for {name}: {e.message}")
                return SyncAction.FETCH
            case Ok(current):
                if current == default_branch.value:
                    self._console.print(f"  on default branch ({current}), pulling", Style.DIM)
                    return SyncAction.PULL
                self._console.print(f"  on branch {current} (not {default_branch}), fetching", Style.DIM)
                return SyncAction.FETCH

    def sync(self, config: SyncConfig, *, dry_run: bool = False) -> Result[SyncAction, SyncError]:
        """Bring the local copy of one repository up to date.

        Returns:
            Ok with the action performed (or planned, when `dry_run`),
            Err(SyncError) if git failed.
        """
        action = self.plan(config)
        if dry_run:
            if action is SyncAction.CLONE:
                url = config.token.redact(clone_url(config))
                self._console.print(f"  would clone {url} -> {config.repo_path}", Style.DIM)
            else:
                self._console.print(f"  would {action} {config.repo_path}", Style.DIM)
            return Ok(action)

        path = config.repo_path
        result: Result[object, GitError]
        match action:
            case SyncAction.CLONE:
                result = clone(clone_url(config), path, self._runner, timeout=self._git_timeout)
            case SyncAction.PULL:
                result = self._repository(path).pull()
            case SyncAction.FETCH:
                result = self._repository(path).fetch()

        if isinstance(result, Err):
            return Err(
                SyncError(
                    repository=config.repository.name.value,
                    verb=action,
                    detail=config.token.redact(result.error.message),
                )
            )
        return Ok(action)

    def _repository(self, path: Path) -> Repository:
        return Repository(path, self._runner, timeout=self._git_timeout)
