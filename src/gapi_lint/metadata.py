# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""JSON sidecar files recording what is installed and when it was last checked."""

from __future__ import annotations

import json
import time
from collections.abc import Callable
from datetime import timedelta
from pathlib import Path

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from .assets import ASSET_SPECS, AssetKind
from .filesystem import atomic_write_text
from .logging import get_logger

_LOGGER = get_logger(__name__)
_MS_PER_SECOND = 1000


class AssetMetadata(BaseModel):
    """Persisted state of one managed asset.

    ``last_checked`` is stored as epoch milliseconds under ``lastChecked``.
    Corpus records store their source ref under ``commit``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    identifier: AssetKind
    version: str = Field(validation_alias=AliasChoices("version", "commit"))
    last_checked: float = Field(validation_alias=AliasChoices("last_checked", "lastChecked"), ge=0)
    path: str
    source: str | None = None

    def to_json(self) -> str:
        """Serialise the record in the sidecar layout for its asset kind."""

        payload: dict[str, object]
        if self.identifier.is_corpus:
            payload = {
                "lastChecked": self.last_checked,
                "source": self.source,
                "path": self.path,
                "commit": self.version,
            }
        else:
            payload = {"version": self.version, "lastChecked": self.last_checked, "path": self.path}
        return json.dumps(payload, indent=2)


def now_ms(clock: Callable[[], float] = time.time) -> float:
    """Return ``clock()`` expressed in epoch milliseconds."""

    return clock() * _MS_PER_SECOND


def is_check_due(metadata: AssetMetadata | None, interval: timedelta, now: float) -> bool:
    """Return ``True`` when ``metadata`` is older than ``interval``.

    Args:
        metadata: Stored record, ``None`` when missing or unreadable.
        interval: Freshness interval.
        now: Current time in epoch milliseconds.

    Returns:
        bool: ``True`` when a re-check should run.
    """

    if metadata is None:
        return True
    return now - metadata.last_checked > interval.total_seconds() * _MS_PER_SECOND


class MetadataStore:
    """Read and write the per-asset sidecar files under ``data_dir``."""

    def __init__(self, data_dir: Path, *, clock: Callable[[], float] = time.time) -> None:
        self.data_dir = data_dir
        self._clock = clock

    def path_for(self, kind: AssetKind) -> Path:
        """Return the sidecar location for ``kind``."""

        return self.data_dir / ASSET_SPECS[kind].metadata_file

    def load(self, kind: AssetKind) -> AssetMetadata | None:
        """Return the stored record for ``kind``; missing or corrupt files yield ``None``."""

        path = self.path_for(kind)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as exc:
            _LOGGER.warning("Ignoring unreadable metadata %s: %s", path, exc)
            return None
        if not isinstance(raw, dict):
            _LOGGER.warning("Ignoring malformed metadata %s", path)
            return None
        try:
            return AssetMetadata.model_validate({**raw, "identifier": kind})
        except ValidationError as exc:
            _LOGGER.warning("Ignoring invalid metadata %s: %s", path, exc)
            return None

    def save(self, metadata: AssetMetadata) -> None:
        """Persist ``metadata`` with a write-temp-then-rename."""

        atomic_write_text(self.path_for(metadata.identifier), metadata.to_json())

    def record(self, kind: AssetKind, *, version: str, path: Path, source: str | None = None) -> AssetMetadata:
        """Store a fresh check for ``kind`` and return the saved record.

        The timestamp never moves backwards relative to the stored one.
        """

        previous = self.load(kind)
        checked = now_ms(self._clock)
        if previous is not None:
            checked = max(checked, previous.last_checked)
        metadata = AssetMetadata(
            identifier=kind,
            version=version,
            last_checked=checked,
            path=str(path),
            source=source,
        )
        self.save(metadata)
        return metadata


__all__ = ["AssetMetadata", "MetadataStore", "is_check_due", "now_ms"]
