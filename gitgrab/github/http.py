"""HTTP client abstraction for the GitHub REST API.

This module provides:
- HttpClient: Protocol for GET requests (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing
"""

from __future__ import annotations

import http.client
import ssl
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from gitgrab.core.result import Err, Ok, Result

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
]

_MAX_ERROR_BODY = 4096


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Reason phrase or network error description
        body: Response body, truncated, when the server sent one
    """

    url: str
    status: int
    message: str
    body: str = ""

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP GET requests returning text."""

    def get_text(
        self,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> Result[str, HttpError]:
        """Fetch `url` and return the body decoded as UTF-8.

        Any status other than 200 is an error.
        """
        ...


def _read_body(e: urllib.error.HTTPError) -> str:
    try:
        raw = e.read(_MAX_ERROR_BODY)
    except OSError:
        return ""
    return raw.decode("utf-8", errors="replace")


class RealHttpClient:
    """HTTP client using urllib with system certificates and a hard timeout."""

    def __init__(self, timeout: float = 30.0, user_agent: str = "gitgrab") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def get_text(
        self,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> Result[str, HttpError]:
        req = urllib.request.Request(
            url,
            headers={"User-Agent": self.user_agent, **(headers or {})},
            method="GET",
        )
        try:
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                status: int = response.status
                raw: bytes = response.read()
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason), body=_read_body(e)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message=f"Request timed out after {self.timeout}s"))
        except (http.client.HTTPException, ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e) or type(e).__name__))

        text = raw.decode("utf-8", errors="replace")
        if status != 200:
            return Err(HttpError(url=url, status=status, message="unexpected status", body=text[:_MAX_ERROR_BODY]))
        return Ok(text)


class MockHttpClient:
    """Mock HTTP client for testing.

    Usage:
        client = MockHttpClient()
        client.set_text("https://api.github.com/orgs/acme/repos?page=1", "[]")
        result = client.get_text("https://api.github.com/orgs/acme/repos?page=1")
    """

    def __init__(self) -> None:
        self._responses: dict[str, str | HttpError] = {}
        self.calls: list[tuple[str, dict[str, str]]] = []

    def set_text(self, url: str, response: str | HttpError) -> None:
        self._responses[url] = response

    def get_text(
        self,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> Result[str, HttpError]:
        self.calls.append((url, dict(headers or {})))

        if url not in self._responses:
            return Err(HttpError(url=url, status=404, message="Not Found", body='{"message": "Not Found"}'))

        response = self._responses[url]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    @property
    def urls(self) -> list[str]:
        return [url for url, _ in self.calls]
