# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Host platform resolution for release downloads."""

from __future__ import annotations

import platform as _platform
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final

from .errors import ProvisioningError

_OS_ALIASES: Final[Mapping[str, str]] = {
    "darwin": "darwin",
    "linux": "linux",
    "windows": "windows",
    "win32": "windows",
}

_ARCH_ALIASES: Final[Mapping[str, str]] = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "x64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
}

# Targets published on the api-linter release page.
SUPPORTED_TARGETS: Final[frozenset[tuple[str, str]]] = frozenset(
    {
        ("darwin", "amd64"),
        ("darwin", "arm64"),
        ("linux", "amd64"),
        ("linux", "arm64"),
        ("windows", "amd64"),
    }
)

# Hosts without a native build run the listed substitute under emulation.
FALLBACK_TARGETS: Final[Mapping[tuple[str, str], tuple[str, str]]] = {
    ("windows", "arm64"): ("windows", "amd64"),
}


@dataclass(frozen=True, slots=True)
class PlatformTarget:
    """Normalised OS/architecture pair used in download URLs."""

    os: str
    arch: str

    @property
    def executable_suffix(self) -> str:
        """Return the file suffix executables carry on this OS."""

        return ".exe" if self.os == "windows" else ""


def normalize_os(system: str) -> str:
    """Return the release OS identifier for ``system``.

    Raises:
        ProvisioningError: If the OS has no api-linter build.
    """

    try:
        return _OS_ALIASES[system.lower()]
    except KeyError:
        raise ProvisioningError(f"Unsupported platform: {system}") from None


def normalize_arch(machine: str) -> str:
    """Return the release architecture identifier for ``machine``.

    Raises:
        ProvisioningError: If the architecture has no api-linter build.
    """

    try:
        return _ARCH_ALIASES[machine.lower()]
    except KeyError:
        raise ProvisioningError(f"Unsupported architecture: {machine}") from None


def resolve_target(system: str | None = None, machine: str | None = None) -> PlatformTarget:
    """Return the download target for the given (or current) host.

    Args:
        system: OS name as reported by :func:`platform.system`; defaults to the host.
        machine: Architecture as reported by :func:`platform.machine`; defaults to the host.

    Returns:
        PlatformTarget: Supported target, after applying :data:`FALLBACK_TARGETS`.

    Raises:
        ProvisioningError: If neither the host nor its fallback is supported.
    """

    key = (
        normalize_os(system if system is not None else _platform.system()),
        normalize_arch(machine if machine is not None else _platform.machine()),
    )
    if key not in SUPPORTED_TARGETS:
        key = FALLBACK_TARGETS.get(key, key)
    if key not in SUPPORTED_TARGETS:
        raise ProvisioningError(f"No api-linter build available for {key[0]}/{key[1]}")
    return PlatformTarget(os=key[0], arch=key[1])


__all__ = [
    "FALLBACK_TARGETS",
    "PlatformTarget",
    "SUPPORTED_TARGETS",
    "normalize_arch",
    "normalize_os",
    "resolve_target",
]
