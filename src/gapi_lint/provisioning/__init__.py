# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Provisioning of the api-linter binary and the proto reference corpora."""

from __future__ import annotations

from ..assets import AssetKind
from .locking import AssetLock
from .provisioner import DependencyProvisioner, UpdateCallback
from .updates import UpdateOffer, is_newer

__all__ = [
    "AssetKind",
    "AssetLock",
    "DependencyProvisioner",
    "UpdateCallback",
    "UpdateOffer",
    "is_newer",
]
