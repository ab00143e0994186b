# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared wiring for CLI commands: settings, HTTP client, and provisioner."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from ..config import LinterSettings
from ..errors import ConfigError
from ..http import HttpClient
from ..logging import detect_tty, fail, get_console_manager
from ..provisioning import DependencyProvisioner, UpdateCallback


def load_settings(raw: Mapping[str, Any], *, use_emoji: bool) -> LinterSettings:
    """Validate CLI-supplied settings, exiting with status 2 on failure."""

    try:
        return LinterSettings.from_mapping({key: value for key, value in raw.items() if value is not None})
    except ConfigError as exc:
        fail(f"Invalid settings: {exc}", use_emoji=use_emoji)
        raise typer.Exit(code=2) from exc


@contextmanager
def open_provisioner(
    settings: LinterSettings,
    *,
    on_update: UpdateCallback | None = None,
) -> Iterator[tuple[HttpClient, DependencyProvisioner]]:
    """Yield an HTTP client and a provisioner bound to it."""

    with HttpClient(timeout=settings.provision.http_timeout) as http:
        yield http, DependencyProvisioner(settings.provision, http=http, on_update=on_update)


def console_for(*, use_emoji: bool) -> Console:
    """Return the shared console honouring the terminal's colour support."""

    return get_console_manager().get(color=detect_tty(), emoji=use_emoji)


def display_path(path: Path, root: Path) -> str:
    """Return ``path`` relative to ``root`` when it lives below it."""

    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)


__all__ = ["console_for", "display_path", "load_settings", "open_provisioner"]
