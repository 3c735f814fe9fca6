"""Run a full organization grab: list repositories, sync each, summarize.

Listing failures end the run. Sync failures are recorded per repository and
the run moves on; the summary counts both kinds of outcome.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from gitgrab.core.config import GrabConfig
from gitgrab.core.result import Err, Ok, Result
from gitgrab.core.types import GitHubToken, OrganizationName, RepositoryRecord
from gitgrab.github.api import DecodeError, FetchError, GitHubClient
from gitgrab.github.http import HttpClient
from gitgrab.output.console import ConsoleProtocol, Style
from gitgrab.platform.process import ProcessRunner
from gitgrab.services.sync import SyncAction, SyncConfig, SyncEngine, SyncError

__all__ = [
    "GrabError",
    "GrabService",
    "GrabSettings",
    "GrabSummary",
    "RepoOutcome",
]

_RULE = "-" * 50


@dataclass(frozen=True, slots=True)
class GrabError:
    """The organization listing could not be obtained."""

    kind: Literal["fetch_failed", "decode_failed"]
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class GrabSettings:
    organization: OrganizationName
    token: GitHubToken
    target_dir: Path
    config: GrabConfig = field(default_factory=GrabConfig)


@dataclass(frozen=True, slots=True)
class RepoOutcome:
    """Result of syncing one repository.

    Attributes:
        name: Repository name
        action: What was done (or planned); None if nothing ran
        error: The sync failure, if git failed
        skip_reason: Why the repository was refused without running git
    """

    name: str
    action: SyncAction | None = None
    error: SyncError | None = None
    skip_reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.skip_reason is None

    @property
    def message(self) -> str:
        if self.error is not None:
            return str(self.error)
        if self.skip_reason is not None:
            return f"{self.name}: {self.skip_reason}"
        return f"{self.name}: {self.action}"


@dataclass(frozen=True, slots=True)
class GrabSummary:
    outcomes: tuple[RepoOutcome, ...] = ()

    @property
    def success(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failure(self) -> int:
        return sum(1 for o in self.outcomes if not o.ok)

    @property
    def failed(self) -> list[RepoOutcome]:
        return [o for o in self.outcomes if not o.ok]


def _grab_error(e: FetchError | DecodeError) -> GrabError:
    if isinstance(e, DecodeError):
        return GrabError(kind="decode_failed", message=str(e))
    hint = None
    if e.status in {401, 403}:
        hint = "check that GITHUB_TOKEN is valid and can read the organization"
    elif e.status == 404:
        hint = "check the organization name"
    return GrabError(kind="fetch_failed", message=str(e), hint=hint)


class GrabService:
    """Clone or refresh every repository of one organization."""

    def __init__(
        self,
        *,
        settings: GrabSettings,
        console: ConsoleProtocol,
        http: HttpClient,
        runner: ProcessRunner,
    ) -> None:
        self._settings = settings
        self._console = console
        config = settings.config
        self._client = GitHubClient(
            http,
            settings.token,
            api_url=config.github.api_url,
            per_page=config.github.per_page,
        )
        self._engine = SyncEngine(runner, console, git_timeout=config.timeouts.git)

    def run(self, *, dry_run: bool = False) -> Result[GrabSummary, GrabError]:
        settings = self._settings
        self._console.print(f"Fetching repositories for {settings.organization} organization...")
        self._console.print(f"Target directory: {settings.target_dir}")
        self._console.print(_RULE, Style.DIM)

        listing = self.fetch()
        if isinstance(listing, Err):
            return listing
        repos = listing.value

        if not repos:
            self._console.info(f"No repositories found for {settings.organization} organization")
            return Ok(GrabSummary())

        self._console.print(f"Found {len(repos)} repositories")
        self._console.newline()

        summary = self.sync_all(repos, dry_run=dry_run)
        self._print_summary(summary)
        return Ok(summary)

    def fetch(self) -> Result[list[RepositoryRecord], GrabError]:
        return self._client.fetch_all_repos(self._settings.organization).map_err(_grab_error)

    def sync_all(self, repos: list[RepositoryRecord], *, dry_run: bool = False) -> GrabSummary:
        """Sync `repos`, one outcome per record, in input order.

        With `clone.jobs > 1` repositories are synced concurrently. Two
        records that would land on the same path (names equal ignoring
        case) are never synced; the later one is refused.
        """
        total = len(repos)
        outcomes: list[RepoOutcome | None] = [None] * total
        pending: list[tuple[int, RepositoryRecord]] = []
        seen: set[str] = set()
        for index, repo in enumerate(repos):
            key = repo.name.value.casefold()
            if key in seen:
                outcomes[index] = RepoOutcome(
                    name=repo.name.value,
                    skip_reason="duplicate target path, another repository already uses it",
                )
                continue
            seen.add(key)
            pending.append((index, repo))

        jobs = max(1, self._settings.config.clone.jobs)
        if jobs == 1:
            for index, repo in pending:
                outcomes[index] = self._sync_one(index, total, repo, dry_run=dry_run)
        else:
            with ThreadPoolExecutor(max_workers=jobs) as ex:
                futures = {
                    ex.submit(self._sync_one, index, total, repo, dry_run=dry_run): index
                    for index, repo in pending
                }
                for fut, index in futures.items():
                    outcomes[index] = fut.result()

        return GrabSummary(outcomes=tuple(o for o in outcomes if o is not None))

    def _sync_one(
        self,
        index: int,
        total: int,
        repo: RepositoryRecord,
        *,
        dry_run: bool,
    ) -> RepoOutcome:
        settings = self._settings
        name = repo.name.value
        self._console.print(f"[{index + 1}/{total}] {name}")
        config = SyncConfig(
            repository=repo,
            target_dir=settings.target_dir,
            token=settings.token,
            organization=settings.organization,
            method=settings.config.clone.method,
            host=settings.config.github.host,
        )
        match self._engine.sync(config, dry_run=dry_run):
            case Ok(action):
                if not dry_run:
                    self._console.success(f"{action.past_tense} {name}")
                return RepoOutcome(name=name, action=action)
            case Err(error):
                self._console.error(str(error))
                return RepoOutcome(name=name, action=error.verb, error=error)

    def _print_summary(self, summary: GrabSummary) -> None:
        self._console.print(_RULE, Style.DIM)
        self._console.print(f"Completed! Success: {summary.success}, Failed: {summary.failure}")
        for outcome in summary.failed:
            self._console.print(f"  {outcome.message}", Style.DIM)
