# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Per-session memoisation of rule documentation guidance."""

from __future__ import annotations

from dataclasses import dataclass

from ..constants import GUIDANCE_PLACEHOLDER
from ..errors import EnrichmentError, ProvisioningError
from ..http import Fetcher
from ..logging import get_logger
from .html import extract_guidance

_LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class GuidanceText:
    """Formatted guidance for one rule documentation page."""

    rule_doc_uri: str
    formatted_body: str

    @property
    def is_placeholder(self) -> bool:
        """Return ``True`` when no documentation content could be extracted."""

        return self.formatted_body == GUIDANCE_PLACEHOLDER


class GuidanceCache:
    """Fetch rule pages at most once per URI for the lifetime of the cache.

    Successful extractions, including pages that yielded only the placeholder,
    are memoised. Fetch failures are not, so a later lookup retries.
    """

    def __init__(self, http: Fetcher) -> None:
        self._http = http
        self._entries: dict[str, GuidanceText] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, uri: object) -> bool:
        return uri in self._entries

    async def lookup(self, uri: str) -> GuidanceText:
        """Return the :class:`GuidanceText` for ``uri``."""

        cached = self._entries.get(uri)
        if cached is not None:
            return cached
        try:
            html = await self._fetch(uri)
        except EnrichmentError as exc:
            _LOGGER.warning("%s", exc)
            return GuidanceText(rule_doc_uri=uri, formatted_body=GUIDANCE_PLACEHOLDER)
        entry = GuidanceText(rule_doc_uri=uri, formatted_body=extract_guidance(html))
        self._entries[uri] = entry
        return entry

    async def guidance_for(self, uri: str) -> str:
        """Return markdown guidance for the rule documented at ``uri``."""

        return (await self.lookup(uri)).formatted_body

    def clear(self) -> None:
        """Forget every memoised entry."""

        self._entries.clear()

    async def _fetch(self, uri: str) -> str:
        try:
            return await self._http.get_text(uri)
        except ProvisioningError as exc:
            raise EnrichmentError(f"Failed to fetch guidance from {uri}: {exc}") from exc


__all__ = ["GuidanceCache", "GuidanceText"]
