# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""HTTP fetch layer used for release metadata, archives, and rule documentation."""

from __future__ import annotations

import asyncio
from pathlib import Path
from types import TracebackType
from typing import Any, Protocol

import requests

from .constants import DEFAULT_HTTP_TIMEOUT, DEFAULT_MAX_REDIRECTS, DOWNLOAD_CHUNK_SIZE, USER_AGENT
from .errors import ProvisioningError
from .filesystem import best_effort_cleanup
from .logging import get_logger

_LOGGER = get_logger(__name__)
_ERROR_SNIPPET = 200


class Fetcher(Protocol):
    """Fetch operations consumed by provisioning and documentation lookups."""

    async def get_json(self, url: str) -> Any:
        """Return the decoded JSON body served at ``url``."""

    async def get_text(self, url: str) -> str:
        """Return the text body served at ``url``."""

    async def download(self, url: str, destination: Path) -> Path:
        """Stream ``url`` into ``destination``."""


class HttpClient:
    """Thin async facade over a :class:`requests.Session`.

    Redirects are followed by ``requests`` itself; ``max_redirects`` bounds the
    chain. Every public coroutine is a single suspend point that performs the
    blocking request on a worker thread.
    """

    def __init__(
        self,
        *,
        user_agent: str = USER_AGENT,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        session: requests.Session | None = None,
    ) -> None:
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.max_redirects = max_redirects
        self._session.headers["User-Agent"] = user_agent

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Release pooled connections."""

        self._session.close()

    async def get_json(self, url: str) -> Any:
        """Return the decoded JSON body served at ``url``.

        Raises:
            ProvisioningError: On transport failure, non-2xx status, or invalid JSON.
        """

        return await asyncio.to_thread(self._get_json, url)

    async def get_text(self, url: str) -> str:
        """Return the text body served at ``url``.

        Raises:
            ProvisioningError: On transport failure or non-2xx status.
        """

        return await asyncio.to_thread(self._get_text, url)

    async def download(self, url: str, destination: Path) -> Path:
        """Stream ``url`` into ``destination`` and return the written path.

        Raises:
            ProvisioningError: On transport or write failure; the partial file is removed.
        """

        return await asyncio.to_thread(self._download, url, destination)

    def _request(self, url: str, *, stream: bool = False) -> requests.Response:
        try:
            response = self._session.get(url, timeout=self._timeout, stream=stream)
        except requests.TooManyRedirects as exc:
            raise ProvisioningError(f"Too many redirects while fetching {url}", target=url) from exc
        except requests.RequestException as exc:
            raise ProvisioningError(f"Request to {url} failed: {exc}", target=url) from exc
        if not response.ok:
            message = f"HTTP {response.status_code} from {url}"
            if not stream and response.text:
                message = f"{message}: {response.text[:_ERROR_SNIPPET]}"
            response.close()
            raise ProvisioningError(message, target=url)
        return response

    def _get_json(self, url: str) -> Any:
        response = self._request(url)
        try:
            return response.json()
        except ValueError as exc:
            raise ProvisioningError(
                f"Failed to parse JSON from {url}. First {_ERROR_SNIPPET} chars: {response.text[:_ERROR_SNIPPET]}",
                target=url,
            ) from exc

    def _get_text(self, url: str) -> str:
        return self._request(url).text

    def _download(self, url: str, destination: Path) -> Path:
        destination.parent.mkdir(parents=True, exist_ok=True)
        _LOGGER.info("Downloading %s -> %s", url, destination)
        response = self._request(url, stream=True)
        try:
            with response, destination.open("wb") as handle:
                for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    if chunk:
                        handle.write(chunk)
        except (requests.RequestException, OSError) as exc:
            best_effort_cleanup(destination)
            raise ProvisioningError(f"Failed to download {url}: {exc}", target=url) from exc
        return destination


__all__ = ["Fetcher", "HttpClient"]
