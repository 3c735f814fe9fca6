"""GitHub REST API access.

Usage:
    from gitgrab.github import GitHubClient, RealHttpClient

    client = GitHubClient(RealHttpClient(timeout=30), token)
    match client.fetch_all_repos(OrganizationName("acme")):
        case Ok(repos):
            ...
"""

from gitgrab.github.api import (
    DecodeError,
    FetchError,
    GitHubClient,
    decode_repositories,
)
from gitgrab.github.http import (
    HttpClient,
    HttpError,
    MockHttpClient,
    RealHttpClient,
)

__all__ = [
    # api
    "DecodeError",
    "FetchError",
    "GitHubClient",
    "decode_repositories",
    # http
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
]
