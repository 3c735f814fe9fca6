"""Application services: the per-repository sync engine and the org-wide run."""

from gitgrab.services.grab import GrabError, GrabService, GrabSettings, GrabSummary, RepoOutcome
from gitgrab.services.sync import SyncAction, SyncConfig, SyncEngine, SyncError, clone_url

__all__ = [
    "GrabError",
    "GrabService",
    "GrabSettings",
    "GrabSummary",
    "RepoOutcome",
    "SyncAction",
    "SyncConfig",
    "SyncEngine",
    "SyncError",
    "clone_url",
]
