"""Subprocess execution with Result-based error handling.

Output is always captured: git's own progress and error text never reaches
the terminal directly, only through the error values built from it.

The sync engine talks to a `ProcessRunner` rather than to `subprocess`, so
its decisions can be tested with `MockProcessRunner` and no git binary.

Usage:
    runner = SubprocessRunner(timeout=600)
    match runner.run(["git", "-C", str(path), "fetch"], cwd=path):
        case Ok(stdout):
            ...
        case Err(error):
            print(f"Failed: {error.stderr}")
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable

from gitgrab.core.result import Err, Ok, Result

__all__ = [
    "MockProcessRunner",
    "ProcessError",
    "ProcessRunner",
    "SubprocessRunner",
    "run",
]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: Exit code, or -1 when the process could not run or timed out.
        stdout: Standard output (may be empty).
        stderr: Standard error, or a description of why the process did not run.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        # Only the program and subcommand: later arguments can hold credentials.
        cmd_str = " ".join(self.command[:2])
        if len(self.command) > 2:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"


def run(
    cmd: Sequence[str],
    cwd: Path,
    env: Mapping[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and return its stdout.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Full environment for the child (inherits ours if None).
        timeout: Maximum seconds to wait (None for no limit).

    Returns:
        Ok(stdout) on exit code 0, Err(ProcessError) otherwise.
    """
    command = tuple(cmd)
    try:
        proc = subprocess.run(
            command,
            cwd=str(cwd),
            env=dict(env) if env is not None else None,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        stdout = e.stdout if isinstance(e.stdout, str) else ""
        return Err(
            ProcessError(
                command=command,
                returncode=-1,
                stdout=stdout,
                stderr=f"Command timed out after {timeout}s",
            )
        )
    except OSError as e:
        return Err(ProcessError(command=command, returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=command,
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(proc.stdout)


@runtime_checkable
class ProcessRunner(Protocol):
    """Capability to run an external command."""

    def run(
        self,
        cmd: Sequence[str],
        cwd: Path,
        *,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        """Run `cmd` in `cwd` and return its captured stdout.

        Args:
            cmd: Command and arguments
            cwd: Working directory
            timeout: Seconds before the process is killed (None: runner default)

        Returns:
            Ok(stdout) on exit code 0, Err(ProcessError) otherwise.
        """
        ...


class SubprocessRunner:
    """Runs commands for real.

    `GIT_TERMINAL_PROMPT=0` is set for every child so a repository that
    needs credentials fails instead of waiting on a prompt nobody sees.
    """

    def __init__(
        self,
        timeout: float | None = None,
        env_overrides: Mapping[str, str] | None = None,
    ) -> None:
        self.timeout = timeout
        self._env_overrides = {"GIT_TERMINAL_PROMPT": "0", **(env_overrides or {})}

    def run(
        self,
        cmd: Sequence[str],
        cwd: Path,
        *,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        env = {**os.environ, **self._env_overrides}
        return run(cmd, cwd, env, timeout=timeout if timeout is not None else self.timeout)


def _contains(cmd: tuple[str, ...], needle: tuple[str, ...]) -> bool:
    n = len(needle)
    return any(cmd[i : i + n] == needle for i in range(len(cmd) - n + 1))


@dataclass(frozen=True, slots=True)
class RecordedCall:
    command: tuple[str, ...]
    cwd: Path
    timeout: float | None


def _empty_calls() -> list[RecordedCall]:
    return []


@dataclass
class MockProcessRunner:
    """Runner with scripted results, for tests.

    A response is selected by the first registered argument sequence that
    appears contiguously in the command; unmatched commands succeed with
    empty output.

    Usage:
        runner = MockProcessRunner()
        runner.set_output(("branch", "--show-current"), "main\\n")
        runner.set_failure(("pull",), stderr="conflict")
    """

    calls: list[RecordedCall] = field(default_factory=_empty_calls)
    _responses: list[tuple[tuple[str, ...], str | ProcessError]] = field(default_factory=list)

    def set_output(self, match: tuple[str, ...], stdout: str) -> None:
        self._responses.append((match, stdout))

    def set_failure(self, match: tuple[str, ...], *, returncode: int = 1, stderr: str = "") -> None:
        error = ProcessError(command=match, returncode=returncode, stdout="", stderr=stderr)
        self._responses.append((match, error))

    def run(
        self,
        cmd: Sequence[str],
        cwd: Path,
        *,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        command = tuple(cmd)
        self.calls.append(RecordedCall(command=command, cwd=cwd, timeout=timeout))
        for match, response in self._responses:
            if not _contains(command, match):
                continue
            if isinstance(response, ProcessError):
                return Err(
                    ProcessError(
                        command=command,
                        returncode=response.returncode,
                        stdout=response.stdout,
                        stderr=response.stderr,
                    )
                )
            return Ok(response)
        return Ok("")

    @property
    def commands(self) -> list[tuple[str, ...]]:
        return [c.command for c in self.calls]

    def ran(self, *match: str) -> bool:
        """True if any recorded command contains `match`."""
        return any(_contains(c, match) for c in self.commands)
