"""Core domain types and logic."""

from .config import GrabConfig, ConfigError, load_config, load_config_or_default
from .errors import ErrorCode
from .result import Err, Ok, Result
from .types import (
    BranchName,
    CloneMethod,
    CloneMethodError,
    GitHubToken,
    OrganizationName,
    RepositoryName,
    RepositoryRecord,
    parse_clone_method,
)

__all__ = [
    # config
    "GrabConfig",
    "ConfigError",
    "load_config",
    "load_config_or_default",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    # types
    "BranchName",
    "CloneMethod",
    "CloneMethodError",
    "GitHubToken",
    "OrganizationName",
    "RepositoryName",
    "RepositoryRecord",
    "parse_clone_method",
]
