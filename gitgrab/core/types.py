"""Value types for the identifiers gitgrab passes around.

Tokens, organization names, repository names, branches and URLs are all
strings on the wire. Wrapping each in its own frozen type keeps a token from
being passed where an org name is expected, and lets each type own the one
predicate that makes it valid.

Name types validate at construction (`ValueError`). Boundaries that ingest
raw input (JSON decode, CLI flags) use `parse()` instead, which returns a
Result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .result import Err, Ok, Result

__all__ = [
    "BranchName",
    "CloneMethod",
    "CloneMethodError",
    "GitHubToken",
    "HttpUrl",
    "OrganizationName",
    "RepositoryName",
    "RepositoryRecord",
    "SshUrl",
    "ValidationError",
    "is_valid_name",
    "parse_clone_method",
    "resolve_clone_method",
]


@dataclass(frozen=True, slots=True)
class ValidationError:
    """A raw value failed its type's shape check."""

    kind: str
    value: str
    message: str

    def __str__(self) -> str:
        return f"invalid {self.kind} {self.value!r}: {self.message}"


def is_valid_name(value: str) -> bool:
    """Non-empty, no whitespace, no path separators, not a relative path component."""
    if not value or value in {".", ".."}:
        return False
    return not any(c.isspace() or c in "/\\" for c in value)


def _name_problem(value: str) -> str:
    if not value:
        return "must not be empty"
    if value in {".", ".."}:
        return "must not be a relative path component"
    return "must not contain whitespace, '/' or '\\'"


@dataclass(frozen=True, slots=True)
class OrganizationName:
    value: str

    def __post_init__(self) -> None:
        if not is_valid_name(self.value):
            raise ValueError(str(ValidationError("organization", self.value, _name_problem(self.value))))

    @classmethod
    def parse(cls, raw: str) -> Result[OrganizationName, ValidationError]:
        if not is_valid_name(raw):
            return Err(ValidationError("organization", raw, _name_problem(raw)))
        return Ok(cls(raw))

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class RepositoryName:
    """Repository name; safe to join onto the target directory."""

    value: str

    def __post_init__(self) -> None:
        if not is_valid_name(self.value):
            raise ValueError(str(ValidationError("repository name", self.value, _name_problem(self.value))))

    @classmethod
    def parse(cls, raw: str) -> Result[RepositoryName, ValidationError]:
        if not is_valid_name(raw):
            return Err(ValidationError("repository name", raw, _name_problem(raw)))
        return Ok(cls(raw))

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True, repr=False)
class GitHubToken:
    """Personal access token. The format is opaque; only emptiness is checked.

    `repr()` and `str()` are masked so a token never lands in console output
    by accident. Use `.value` where the secret is actually needed.
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("GitHub token must not be empty")

    @classmethod
    def parse(cls, raw: str | None) -> Result[GitHubToken, ValidationError]:
        if not raw:
            return Err(ValidationError("token", "", "must not be empty"))
        return Ok(cls(raw))

    def auth_header(self) -> str:
        return f"token {self.value}"

    def redact(self, text: str) -> str:
        """Replace every occurrence of the token in `text`."""
        return text.replace(self.value, "***")

    def __repr__(self) -> str:
        return "GitHubToken(***)"

    def __str__(self) -> str:
        return "***"


@dataclass(frozen=True, slots=True)
class BranchName:
    """Branch name as reported by the API or by git. Empty means unknown."""

    value: str = ""

    @property
    def is_known(self) -> bool:
        return bool(self.value)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class HttpUrl:
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class SshUrl:
    value: str

    def __str__(self) -> str:
        return self.value


class CloneMethod(str, Enum):
    """Transport used for `git clone`."""

    SSH = "ssh"
    HTTP = "http"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class CloneMethodError:
    value: str
    fallback: CloneMethod = CloneMethod.SSH

    @property
    def message(self) -> str:
        return f"invalid clone method: {self.value!r} (expected 'ssh' or 'http')"

    def __str__(self) -> str:
        return self.message


def parse_clone_method(raw: str) -> Result[CloneMethod, CloneMethodError]:
    """Case-insensitive exact match on "ssh" / "http"."""
    match raw.lower():
        case "ssh":
            return Ok(CloneMethod.SSH)
        case "http":
            return Ok(CloneMethod.HTTP)
        case _:
            return Err(CloneMethodError(raw))


def resolve_clone_method(raw: str) -> tuple[CloneMethod, CloneMethodError | None]:
    """Parse `raw`, falling back to ssh on an unknown value.

    The error is returned alongside the fallback so the caller can report it.
    Only contexts that document the fallback (the config file) use this.
    """
    result = parse_clone_method(raw)
    if isinstance(result, Err):
        return (result.error.fallback, result.error)
    return (result.value, None)


@dataclass(frozen=True, slots=True)
class RepositoryRecord:
    """One repository as listed by the organization API."""

    name: RepositoryName
    clone_url: HttpUrl
    ssh_url: SshUrl
    private: bool = False
    default_branch: BranchName = field(default_factory=BranchName)
