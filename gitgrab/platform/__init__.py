"""Platform abstraction layer."""

from .process import (
    MockProcessRunner,
    ProcessError,
    ProcessRunner,
    SubprocessRunner,
    run,
)

__all__ = [
    "MockProcessRunner",
    "ProcessError",
    "ProcessRunner",
    "SubprocessRunner",
    "run",
]
