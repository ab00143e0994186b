# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Update offers raised when a newer api-linter release is published."""

from __future__ import annotations

from dataclasses import dataclass

from packaging.version import InvalidVersion, Version

from ..assets import AssetKind


@dataclass(frozen=True, slots=True)
class UpdateOffer:
    """Describe an available upgrade that the caller may accept or decline.

    Attributes:
        kind: Asset the offer applies to.
        installed: Version recorded for the installed copy, ``None`` when unknown.
        latest: Latest published release tag.
    """

    kind: AssetKind
    installed: str | None
    latest: str

    def describe(self) -> str:
        """Return a one-line human-readable summary of the offer."""

        current = self.installed or "unknown"
        return f"New version of {self.kind.value} available: {self.latest} (current: {current})"


def is_newer(installed: str | None, latest: str) -> bool:
    """Return ``True`` when ``latest`` should replace ``installed``.

    Tags are compared as PEP 440 versions after dropping a leading ``v``;
    tags that do not parse fall back to plain inequality.
    """

    if installed is None:
        return True
    try:
        return Version(latest.removeprefix("v")) > Version(installed.removeprefix("v"))
    except InvalidVersion:
        return installed != latest


__all__ = ["UpdateOffer", "is_newer"]
