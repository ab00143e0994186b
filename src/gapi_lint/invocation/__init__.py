# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Build api-linter command lines and run the executable."""

from __future__ import annotations

from .arguments import InvocationPlan, build_arguments, substitute_workspace
from .runner import run_linter

__all__ = ["InvocationPlan", "build_arguments", "run_linter", "substitute_workspace"]
