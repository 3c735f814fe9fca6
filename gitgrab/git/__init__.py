"""Git operations module.

Usage:
    from gitgrab.git import Repository, clone

    repo = Repository(path, runner)
    if repo.current_branch() == Ok("main"):
        repo.pull()
"""

from gitgrab.git.repository import (
    GitError,
    Repository,
    clone,
)

__all__ = [
    "GitError",
    "Repository",
    "clone",
]
