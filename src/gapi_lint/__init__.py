# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Provision, run, and interpret Google's ``api-linter`` for protobuf sources."""

from __future__ import annotations

from .config import InvocationOptions, LinterSettings, ProvisionConfig
from .decoding import decode
from .diagnostics import DiagnosticRecord, SourceRange
from .errors import (
    DecodeError,
    EnrichmentError,
    ExecutableNotFoundError,
    GapiLintError,
    InvocationError,
    ProcessExitError,
    ProvisioningError,
    SpawnError,
)
from .guidance import GuidanceCache
from .invocation import InvocationPlan, build_arguments, run_linter
from .provisioning import AssetKind, DependencyProvisioner, UpdateOffer
from .session import LintBatch, LintSession

__all__ = [
    "AssetKind",
    "DecodeError",
    "DependencyProvisioner",
    "DiagnosticRecord",
    "EnrichmentError",
    "ExecutableNotFoundError",
    "GapiLintError",
    "GuidanceCache",
    "InvocationError",
    "InvocationOptions",
    "InvocationPlan",
    "LintBatch",
    "LintSession",
    "LinterSettings",
    "ProcessExitError",
    "ProvisionConfig",
    "ProvisioningError",
    "SourceRange",
    "SpawnError",
    "UpdateOffer",
    "build_arguments",
    "decode",
    "run_linter",
]
