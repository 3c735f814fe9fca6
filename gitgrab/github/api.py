"""Organization repository listing.

`GitHubClient.fetch_all_repos` pages through `GET /orgs/{org}/repos` until
the API returns an empty page. The listing is all-or-nothing: any failed
page or undecodable body discards what was collected so far, because acting
on half an organization is worse than not acting.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING

from gitgrab import __version__
from gitgrab.core.config import DEFAULT_API_URL, DEFAULT_PER_PAGE
from gitgrab.core.result import Err, Ok, Result
from gitgrab.core.structured import as_obj_list, as_str_dict
from gitgrab.core.types import (
    BranchName,
    GitHubToken,
    HttpUrl,
    OrganizationName,
    RepositoryName,
    RepositoryRecord,
    SshUrl,
)

if TYPE_CHECKING:
    from gitgrab.github.http import HttpClient, HttpError

__all__ = [
    "ACCEPT_HEADER",
    "DecodeError",
    "FetchError",
    "GitHubClient",
    "decode_repositories",
    "user_agent",
]

ACCEPT_HEADER = "application/vnd.github.v3+json"


def user_agent() -> str:
    return f"gitgrab/{__version__}"


@dataclass(frozen=True, slots=True)
class FetchError:
    """A listing request did not return 200.

    `status` is 0 when no HTTP response was received at all.
    """

    url: str
    status: int
    body: str
    message: str = ""

    def __str__(self) -> str:
        if self.status:
            detail = self.body.strip() or self.message
            return f"API request failed: {self.status} - {detail}"
        return f"API request failed: {self.message}"


@dataclass(frozen=True, slots=True)
class DecodeError:
    """A listing response was not the expected JSON shape."""

    url: str
    message: str

    def __str__(self) -> str:
        return f"failed to decode response from {self.url}: {self.message}"


def _fetch_error(e: HttpError) -> FetchError:
    return FetchError(url=e.url, status=e.status, body=e.body, message=e.message)


def _decode_record(index: int, item: object) -> Result[RepositoryRecord, str]:
    obj = as_str_dict(item)
    if obj is None:
        return Err(f"item {index} is not an object")

    name = obj.get("name")
    clone_url = obj.get("clone_url")
    ssh_url = obj.get("ssh_url")
    private = obj.get("private", False)
    default_branch = obj.get("default_branch")

    if not isinstance(name, str):
        return Err(f"item {index}: missing 'name'")
    if not isinstance(clone_url, str):
        return Err(f"item {index} ({name}): missing 'clone_url'")
    if not isinstance(ssh_url, str):
        return Err(f"item {index} ({name}): missing 'ssh_url'")
    if not isinstance(private, bool):
        return Err(f"item {index} ({name}): 'private' must be a boolean")
    if default_branch is not None and not isinstance(default_branch, str):
        return Err(f"item {index} ({name}): 'default_branch' must be a string")

    parsed_name = RepositoryName.parse(name)
    if isinstance(parsed_name, Err):
        return Err(f"item {index}: {parsed_name.error}")

    return Ok(
        RepositoryRecord(
            name=parsed_name.value,
            clone_url=HttpUrl(clone_url),
            ssh_url=SshUrl(ssh_url),
            private=private,
            default_branch=BranchName(default_branch or ""),
        )
    )


def decode_repositories(text: str, *, url: str = "") -> Result[list[RepositoryRecord], DecodeError]:
    """Decode one page of the listing API.

    The body must be a JSON array of repository objects; unknown fields are
    ignored. A repository name that could escape the target directory is a
    decode error, not something to skip.
    """
    try:
        data: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(DecodeError(url=url, message=f"invalid JSON: {e}"))

    items = as_obj_list(data)
    if items is None:
        return Err(DecodeError(url=url, message="expected a JSON array"))

    records: list[RepositoryRecord] = []
    for index, item in enumerate(items):
        match _decode_record(index, item):
            case Ok(record):
                records.append(record)
            case Err(message):
                return Err(DecodeError(url=url, message=message))
    return Ok(records)


class GitHubClient:
    """Read-only client for the organization listing endpoint."""

    def __init__(
        self,
        http: HttpClient,
        token: GitHubToken,
        *,
        api_url: str = DEFAULT_API_URL,
        per_page: int = DEFAULT_PER_PAGE,
    ) -> None:
        self._http = http
        self._token = token
        self.api_url = api_url.rstrip("/")
        self.per_page = per_page

    def request_headers(self) -> dict[str, str]:
        return {
            "Authorization": self._token.auth_header(),
            "Accept": ACCEPT_HEADER,
            "User-Agent": user_agent(),
        }

    def repos_url(self, org: OrganizationName, page: int) -> str:
        return f"{self.api_url}/orgs/{org}/repos?page={page}&per_page={self.per_page}&type=all"

    def fetch_all_repos(
        self,
        org: OrganizationName,
    ) -> Result[list[RepositoryRecord], FetchError | DecodeError]:
        """List every repository of `org`, in API order.

        Returns:
            Ok with all records (possibly empty), or the first error hit.
        """
        records: list[RepositoryRecord] = []
        page = 1
        while True:
            url = self.repos_url(org, page)
            response = self._http.get_text(url, headers=self.request_headers()).map_err(_fetch_error)
            if isinstance(response, Err):
                return response

            decoded = decode_repositories(response.value, url=url)
            if isinstance(decoded, Err):
                return decoded

            if not decoded.value:
                return Ok(records)

            records.extend(decoded.value)
            page += 1
