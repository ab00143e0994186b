# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rule documentation lookup and markdown extraction."""

from __future__ import annotations

from .cache import GuidanceCache, GuidanceText
from .html import extract_guidance

__all__ = ["GuidanceCache", "GuidanceText", "extract_guidance"]
