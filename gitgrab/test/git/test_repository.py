"""Tests for git/repository.py."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from gitgrab.core.result import Err, Ok
from gitgrab.git.repository import LOCAL_TIMEOUT_SECONDS, GitError, Repository, clone
from gitgrab.platform.process import MockProcessRunner, SubprocessRunner


def _git(cwd: Path, *args: str) -> str:
    result = subprocess.run(["git", *args], cwd=cwd, capture_output=True, text=True, check=False)
    if result.returncode != 0:
        raise RuntimeError(f"git {' '.join(args)} failed: {result.stderr.strip()}")
    return result.stdout.strip()


class TestGitError:
    def test_str(self) -> None:
        error = GitError(command="pull", message="Not possible to fast-forward", returncode=128)
        assert str(error) == "git pull failed (exit 128): Not possible to fast-forward"


class TestRepositoryWithMockRunner:
    def test_current_branch(self, tmp_path: Path) -> None:
        runner = MockProcessRunner()
        runner.set_output(("branch", "--show-current"), "main\n")

        assert Repository(tmp_path, runner).current_branch() == Ok("main")
        assert runner.commands == [("git", "-C", str(tmp_path), "branch", "--show-current")]

    def test_current_branch_uses_short_timeout(self, tmp_path: Path) -> None:
        runner = MockProcessRunner()
        Repository(tmp_path, runner, timeout=900).current_branch()
        assert runner.calls[0].timeout == LOCAL_TIMEOUT_SECONDS

    def test_detached_head_is_error(self, tmp_path: Path) -> None:
        runner = MockProcessRunner()
        runner.set_output(("branch", "--show-current"), "\n")

        result = Repository(tmp_path, runner).current_branch()

        assert isinstance(result, Err)
        assert result.error.message == "detached HEAD"

    def test_current_branch_failure(self, tmp_path: Path) -> None:
        runner = MockProcessRunner()
        runner.set_failure(("branch",), returncode=128, stderr="fatal: not a git repository\n")

        result = Repository(tmp_path, runner).current_branch()

        assert isinstance(result, Err)
        assert result.error.returncode == 128
        assert result.error.message == "fatal: not a git repository"

    def test_pull_and_fetch_use_network_timeout(self, tmp_path: Path) -> None:
        runner = MockProcessRunner()
        repo = Repository(tmp_path, runner, timeout=42.0)

        assert isinstance(repo.pull(), Ok)
        assert isinstance(repo.fetch(), Ok)

        assert runner.commands == [
            ("git", "-C", str(tmp_path), "pull"),
            ("git", "-C", str(tmp_path), "fetch"),
        ]
        assert [c.timeout for c in runner.calls] == [42.0, 42.0]

    def test_pull_failure_message_falls_back(self, tmp_path: Path) -> None:
        runner = MockProcessRunner()
        runner.set_failure(("pull",), returncode=1)

        result = Repository(tmp_path, runner).pull()

        assert isinstance(result, Err)
        assert result.error.command == "pull"
        assert result.error.message == "pull failed"

    def test_clone_command(self, tmp_path: Path) -> None:
        runner = MockProcessRunner()
        dest = tmp_path / "widgets"

        result = clone("git@github.com:acme/widgets.git", dest, runner, timeout=60.0)

        assert isinstance(result, Ok)
        assert result.value.path == dest
        assert runner.calls[0].command == ("git", "clone", "git@github.com:acme/widgets.git", str(dest))
        assert runner.calls[0].cwd == tmp_path
        assert runner.calls[0].timeout == 60.0

    def test_clone_failure_becomes_git_error(self, tmp_path: Path) -> None:
        runner = MockProcessRunner()
        runner.set_failure(("clone",), returncode=128, stderr="fatal: repository not found\n")

        result = clone("git@github.com:acme/gone.git", tmp_path / "gone", runner)

        assert result == Err(GitError(command="clone", message="fatal: repository not found", returncode=128))

    def test_fetch_output_is_stripped(self, tmp_path: Path) -> None:
        runner = MockProcessRunner()
        runner.set_output(("fetch",), "From github.com:acme/widgets\n")

        assert Repository(tmp_path, runner).fetch() == Ok("From github.com:acme/widgets")

    def test_exists(self, tmp_path: Path) -> None:
        assert not Repository(tmp_path / "missing", MockProcessRunner()).exists()
        assert Repository(tmp_path, MockProcessRunner()).exists()


@pytest.mark.skipif(shutil.which("git") is None, reason="git not available")
class TestRepositoryWithGit:
    def _init(self, path: Path, branch: str = "main") -> None:
        path.mkdir()
        _git(path, "init", "-b", branch)
        _git(path, "config", "user.email", "test@example.com")
        _git(path, "config", "user.name", "Test")
        (path / "README").write_text("hi\n", encoding="utf-8")
        _git(path, "add", "README")
        _git(path, "commit", "-m", "init")

    def test_current_branch(self, tmp_path: Path) -> None:
        repo_dir = tmp_path / "repo"
        self._init(repo_dir, branch="trunk")

        assert Repository(repo_dir, SubprocessRunner()).current_branch() == Ok("trunk")

    def test_current_branch_outside_repo(self, tmp_path: Path) -> None:
        plain = tmp_path / "plain"
        plain.mkdir()
        # Keep git from walking up into an enclosing repository.
        runner = SubprocessRunner(env_overrides={"GIT_CEILING_DIRECTORIES": str(tmp_path)})

        assert isinstance(Repository(plain, runner).current_branch(), Err)

    def test_clone_bad_url(self, tmp_path: Path) -> None:
        result = clone((tmp_path / "nope.git").as_uri(), tmp_path / "dest", SubprocessRunner())

        assert isinstance(result, Err)
        assert result.error.command == "clone"
        assert result.error.message
