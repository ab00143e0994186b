# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the requests-backed fetch layer."""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
import requests

from gapi_lint.constants import USER_AGENT
from gapi_lint.errors import ProvisioningError
from gapi_lint.http import HttpClient


def _response(status: int, body: bytes, url: str = "https://example.test/x") -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content = body
    response._content_consumed = True
    response.encoding = "utf-8"
    response.url = url
    return response


class BrokenStream(requests.Response):
    def iter_content(self, chunk_size: int | None = 1, decode_unicode: bool = False) -> Iterator[bytes]:
        yield b"partial"
        raise requests.ConnectionError("connection reset")


class FakeSession(requests.Session):
    def __init__(self, outcome: requests.Response | Exception) -> None:
        super().__init__()
        self.outcome = outcome
        self.requests: list[tuple[str, dict[str, Any]]] = []

    def get(self, url: str, **kwargs: Any) -> requests.Response:  # type: ignore[override]
        self.requests.append((url, kwargs))
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


def test_client_configures_session() -> None:
    session = FakeSession(_response(200, b"{}"))

    HttpClient(session=session, max_redirects=3)

    assert session.max_redirects == 3
    assert session.headers["User-Agent"] == USER_AGENT


def test_get_json_decodes_body() -> None:
    session = FakeSession(_response(200, b'{"tag_name": "v1.67.2"}'))

    with HttpClient(session=session, timeout=5) as client:
        payload = asyncio.run(client.get_json("https://api.github.test/latest"))

    assert payload == {"tag_name": "v1.67.2"}
    assert session.requests == [("https://api.github.test/latest", {"timeout": 5, "stream": False})]


def test_get_json_rejects_invalid_json() -> None:
    client = HttpClient(session=FakeSession(_response(200, b"<html>rate limited</html>")))

    with pytest.raises(ProvisioningError, match="Failed to parse JSON"):
        asyncio.run(client.get_json("https://api.github.test/latest"))


def test_non_success_status_raises_with_snippet() -> None:
    client = HttpClient(session=FakeSession(_response(404, b"Not Found")))

    with pytest.raises(ProvisioningError, match="HTTP 404 from https://linter.test/rule: Not Found") as excinfo:
        asyncio.run(client.get_text("https://linter.test/rule"))

    assert excinfo.value.target == "https://linter.test/rule"


@pytest.mark.parametrize(
    ("error", "message"),
    [
        (requests.TooManyRedirects("loop"), "Too many redirects"),
        (requests.ConnectionError("refused"), "Request to https://linter.test/rule failed"),
    ],
)
def test_transport_failures_raise_provisioning_error(error: Exception, message: str) -> None:
    client = HttpClient(session=FakeSession(error))

    with pytest.raises(ProvisioningError, match=message):
        asyncio.run(client.get_text("https://linter.test/rule"))


def test_download_streams_to_destination(tmp_path: Path) -> None:
    client = HttpClient(session=FakeSession(_response(200, b"archive-bytes")))
    destination = tmp_path / "nested" / "api-linter.tar.gz"

    written = asyncio.run(client.download("https://github.test/release.tar.gz", destination))

    assert written == destination
    assert destination.read_bytes() == b"archive-bytes"


def test_download_failure_removes_partial_file(tmp_path: Path) -> None:
    response = BrokenStream()
    response.status_code = 200
    response._content_consumed = True
    client = HttpClient(session=FakeSession(response))
    destination = tmp_path / "api-linter.tar.gz"

    with pytest.raises(ProvisioningError, match="Failed to download"):
        asyncio.run(client.download("https://github.test/release.tar.gz", destination))

    assert not destination.exists()
