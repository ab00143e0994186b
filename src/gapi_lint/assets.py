# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Identifiers and static descriptions of managed assets."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Final

from .constants import (
    EXECUTABLE_METADATA_FILE,
    EXECUTABLE_NAME,
    GOOGLEAPIS_DIR_NAME,
    GOOGLEAPIS_METADATA_FILE,
    GOOGLEAPIS_REF,
    GOOGLEAPIS_SOURCE,
    PROTOBUF_DIR_NAME,
    PROTOBUF_METADATA_FILE,
    PROTOBUF_REF,
    PROTOBUF_SOURCE,
)


class AssetKind(StrEnum):
    """Enumerate the managed assets."""

    EXECUTABLE = "api-linter"
    GOOGLEAPIS = "googleapis"
    PROTOBUF = "protobuf"

    @property
    def is_corpus(self) -> bool:
        """Return ``True`` for the proto source trees used as import paths."""

        return self is not AssetKind.EXECUTABLE


@dataclass(frozen=True, slots=True)
class AssetSpec:
    """Static layout of one managed asset inside the data directory.

    Attributes:
        kind: Asset identifier.
        install_name: File or directory name under the data directory.
        metadata_file: Sidecar JSON file name under the data directory.
        source: Repository URL the asset is fetched from.
        ref: Branch used for source snapshots; ``None`` for versioned releases.
    """

    kind: AssetKind
    install_name: str
    metadata_file: str
    source: str | None = None
    ref: str | None = None


ASSET_SPECS: Final[Mapping[AssetKind, AssetSpec]] = {
    AssetKind.EXECUTABLE: AssetSpec(
        kind=AssetKind.EXECUTABLE,
        install_name=EXECUTABLE_NAME,
        metadata_file=EXECUTABLE_METADATA_FILE,
    ),
    AssetKind.GOOGLEAPIS: AssetSpec(
        kind=AssetKind.GOOGLEAPIS,
        install_name=GOOGLEAPIS_DIR_NAME,
        metadata_file=GOOGLEAPIS_METADATA_FILE,
        source=GOOGLEAPIS_SOURCE,
        ref=GOOGLEAPIS_REF,
    ),
    AssetKind.PROTOBUF: AssetSpec(
        kind=AssetKind.PROTOBUF,
        install_name=PROTOBUF_DIR_NAME,
        metadata_file=PROTOBUF_METADATA_FILE,
        source=PROTOBUF_SOURCE,
        ref=PROTOBUF_REF,
    ),
}


__all__ = ["ASSET_SPECS", "AssetKind", "AssetSpec"]
