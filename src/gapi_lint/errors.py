# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy shared across the provisioning and lint pipeline.

Only :class:`ProvisioningError` and :class:`InvocationError` escape a lint
request. :class:`DecodeError` and :class:`EnrichmentError` are raised and
absorbed locally so that a bad payload or a missing documentation page never
hides the diagnostics themselves.
"""

from __future__ import annotations

from pathlib import Path


class GapiLintError(RuntimeError):
    """Base class for every error raised by gapi-lint."""


class ConfigError(GapiLintError):
    """Raised when settings supplied by the caller fail validation."""


class ProvisioningError(GapiLintError):
    """Raised when acquiring or refreshing a managed asset fails.

    Attributes:
        target: URL or filesystem path involved in the failure, when known.
    """

    def __init__(self, message: str, *, target: str | Path | None = None) -> None:
        super().__init__(message)
        self.target = str(target) if target is not None else None


class InvocationError(GapiLintError):
    """Raised when the linter executable cannot be run to completion.

    Attributes:
        executable: Resolved path of the executable that was invoked.
    """

    def __init__(self, message: str, *, executable: str | Path) -> None:
        super().__init__(message)
        self.executable = str(executable)


class ExecutableNotFoundError(InvocationError):
    """Raised when the OS reports the executable as missing or not runnable."""

    def __init__(self, executable: str | Path) -> None:
        super().__init__(
            f"api-linter binary not found at: {executable}. "
            "Install it or configure the correct binary path.",
            executable=executable,
        )


class ProcessExitError(InvocationError):
    """Raised when the executable exits with a status other than 0 or 1."""

    def __init__(self, executable: str | Path, exit_code: int, stderr: str | None = None) -> None:
        super().__init__(f"api-linter exited with code {exit_code}", executable=executable)
        self.exit_code = exit_code
        self.stderr = stderr


class SpawnError(InvocationError):
    """Raised for OS-level spawn failures other than a missing executable."""


class DecodeError(GapiLintError):
    """Raised internally when tool output cannot be decoded into diagnostics."""


class EnrichmentError(GapiLintError):
    """Raised internally when rule documentation cannot be fetched or parsed."""


__all__ = [
    "ConfigError",
    "DecodeError",
    "EnrichmentError",
    "ExecutableNotFoundError",
    "GapiLintError",
    "InvocationError",
    "ProcessExitError",
    "ProvisioningError",
    "SpawnError",
]
