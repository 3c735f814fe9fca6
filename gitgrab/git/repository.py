"""Git operations on a single local clone.

Every call goes through a `ProcessRunner` and returns a Result. Output from
git is captured; callers see it only as `GitError.message`.

Usage:
    repo = Repository(target / "widgets", runner)

    match repo.current_branch():
        case Ok(branch):
            print(f"on {branch}")
        case Err(e):
            print(f"cannot tell: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from gitgrab.core.result import Err, Ok, Result
from gitgrab.platform.process import ProcessError, ProcessRunner

LOCAL_TIMEOUT_SECONDS = 30.0
NETWORK_TIMEOUT_SECONDS = 10 * 60.0

__all__ = [
    "GitError",
    "Repository",
    "clone",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed (e.g. "pull")
        message: Error text from git, or a description of why it did not run
        returncode: Process return code (-1 if git did not run or timed out)
    """

    command: str
    message: str
    returncode: int = 1

    def __str__(self) -> str:
        return f"git {self.command} failed (exit {self.returncode}): {self.message}"


def _git_error(command: str, e: ProcessError, fallback: str) -> GitError:
    return GitError(
        command=command,
        message=e.stderr.strip() or e.stdout.strip() or fallback,
        returncode=e.returncode,
    )


def clone(
    url: str,
    dest: Path,
    runner: ProcessRunner,
    *,
    timeout: float = NETWORK_TIMEOUT_SECONDS,
) -> Result[Repository, GitError]:
    """Run `git clone <url> <dest>` from the parent of `dest`."""
    return (
        runner.run(["git", "clone", url, str(dest)], cwd=dest.parent, timeout=timeout)
        .map(lambda _: Repository(dest, runner, timeout=timeout))
        .map_err(lambda e: _git_error("clone", e, "clone failed"))
    )


class Repository:
    """A local clone at `path`.

    Attributes:
        path: Path to the working tree
        timeout: Bound for network operations (pull, fetch)
    """

    def __init__(
        self,
        path: Path,
        runner: ProcessRunner,
        *,
        timeout: float = NETWORK_TIMEOUT_SECONDS,
    ) -> None:
        self.path = path
        self.timeout = timeout
        self._runner = runner

    def exists(self) -> bool:
        """True if anything exists at `path` (a clone or not)."""
        return self.path.exists()

    def current_branch(self) -> Result[str, GitError]:
        """Name of the checked-out branch.

        Uses `branch --show-current`, which prints nothing on a detached
        HEAD; that case is reported as an error too.
        """
        result = self._run(["branch", "--show-current"], timeout=min(LOCAL_TIMEOUT_SECONDS, self.timeout))
        match result:
            case Err(e):
                return Err(_git_error("branch --show-current", e, "cannot read current branch"))
            case Ok(stdout):
                branch = stdout.strip()
                if not branch:
                    return Err(GitError(command="branch --show-current", message="detached HEAD", returncode=0))
                return Ok(branch)

    def pull(self) -> Result[str, GitError]:
        """Fast-forward or merge the checked-out branch from its upstream."""
        return (
            self._run(["pull"], timeout=self.timeout)
            .map(str.strip)
            .map_err(lambda e: _git_error("pull", e, "pull failed"))
        )

    def fetch(self) -> Result[str, GitError]:
        """Update remote-tracking refs; the working branch is left alone."""
        return (
            self._run(["fetch"], timeout=self.timeout)
            .map(str.strip)
            .map_err(lambda e: _git_error("fetch", e, "fetch failed"))
        )

    def _run(self, args: list[str], *, timeout: float) -> Result[str, ProcessError]:
        return self._runner.run(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)
