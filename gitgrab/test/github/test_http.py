"""Tests for github/http.py - HTTP client abstraction."""

from __future__ import annotations

import http.client
import urllib.error
import urllib.request
from email.message import Message
from io import BytesIO
from typing import Any

import pytest

from gitgrab.core.result import Err, Ok
from gitgrab.github.http import HttpClient, HttpError, MockHttpClient, RealHttpClient


class _FakeResponse:
    def __init__(self, body: bytes, status: int = 200) -> None:
        self.status = status
        self._body = body

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> _FakeResponse:
        return self

    def __exit__(self, *exc: object) -> None:
        return None


class _TruncatedResponse(_FakeResponse):
    def read(self) -> bytes:
        raise http.client.IncompleteRead(b"[{\"name\": ", 2048)


class TestHttpError:
    def test_str_with_status(self) -> None:
        error = HttpError(url="https://api.github.com/x", status=500, message="Internal Error")
        assert str(error) == "HTTP 500: Internal Error (https://api.github.com/x)"

    def test_str_without_status(self) -> None:
        error = HttpError(url="https://api.github.com/x", status=0, message="timed out")
        assert str(error) == "timed out (https://api.github.com/x)"

    def test_body_defaults_empty(self) -> None:
        assert HttpError(url="u", status=404, message="Not Found").body == ""


class TestMockHttpClient:
    def test_isinstance_check(self) -> None:
        assert isinstance(MockHttpClient(), HttpClient)

    def test_get_text_success_records_headers(self) -> None:
        client = MockHttpClient()
        client.set_text("https://api.example.com/a", "[]")

        result = client.get_text("https://api.example.com/a", headers={"Accept": "x"})

        assert result == Ok("[]")
        assert client.calls == [("https://api.example.com/a", {"Accept": "x"})]

    def test_unknown_url_is_404(self) -> None:
        result = MockHttpClient().get_text("https://api.example.com/missing")
        assert isinstance(result, Err)
        assert result.error.status == 404

    def test_scripted_error(self) -> None:
        client = MockHttpClient()
        client.set_text("u", HttpError(url="u", status=401, message="Unauthorized", body="Bad credentials"))

        result = client.get_text("u")

        assert isinstance(result, Err)
        assert result.error.body == "Bad credentials"


class TestRealHttpClient:
    def test_isinstance_check(self) -> None:
        assert isinstance(RealHttpClient(), HttpClient)

    def test_sends_headers_and_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        seen: dict[str, Any] = {}

        def fake_urlopen(req: urllib.request.Request, timeout: float, context: object) -> _FakeResponse:
            seen["headers"] = dict(req.header_items())
            seen["timeout"] = timeout
            return _FakeResponse(b'[{"name": "a"}]')

        monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)
        client = RealHttpClient(timeout=7.5, user_agent="gitgrab/test")

        result = client.get_text("https://api.github.com/orgs/acme/repos", headers={"Accept": "application/json"})

        assert result == Ok('[{"name": "a"}]')
        assert seen["timeout"] == 7.5
        assert seen["headers"]["User-agent"] == "gitgrab/test"
        assert seen["headers"]["Accept"] == "application/json"

    def test_http_error_keeps_status_and_body(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def fake_urlopen(req: urllib.request.Request, timeout: float, context: object) -> _FakeResponse:
            raise urllib.error.HTTPError(
                req.full_url, 404, "Not Found", Message(), BytesIO(b'{"message": "Not Found"}')
            )

        monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)

        result = RealHttpClient().get_text("https://api.github.com/orgs/nope/repos")

        assert isinstance(result, Err)
        assert result.error.status == 404
        assert result.error.message == "Not Found"
        assert "Not Found" in result.error.body

    def test_network_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def fake_urlopen(req: urllib.request.Request, timeout: float, context: object) -> _FakeResponse:
            raise urllib.error.URLError("connection refused")

        monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)

        result = RealHttpClient().get_text("https://api.github.com/x")

        assert isinstance(result, Err)
        assert result.error.status == 0
        assert "connection refused" in result.error.message

    def test_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def fake_urlopen(req: urllib.request.Request, timeout: float, context: object) -> _FakeResponse:
            raise TimeoutError()

        monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)

        result = RealHttpClient(timeout=2.0).get_text("https://api.github.com/x")

        assert isinstance(result, Err)
        assert "timed out" in result.error.message

    def test_non_200_success_status_is_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def fake_urlopen(req: urllib.request.Request, timeout: float, context: object) -> _FakeResponse:
            return _FakeResponse(b"", status=204)

        monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)

        result = RealHttpClient().get_text("https://api.github.com/x")

        assert isinstance(result, Err)
        assert result.error.status == 204

    def test_truncated_body_is_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def fake_urlopen(req: urllib.request.Request, timeout: float, context: object) -> _FakeResponse:
            return _TruncatedResponse(b"")

        monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)

        result = RealHttpClient().get_text("https://api.github.com/orgs/acme/repos?page=1")

        assert isinstance(result, Err)
        assert result.error.status == 0
        assert "IncompleteRead" in result.error.message
