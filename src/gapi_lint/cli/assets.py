# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Implementation of the asset management commands."""

from __future__ import annotations

import asyncio
from datetime import datetime

import typer
from rich import box
from rich.table import Table

from ..errors import ProvisioningError
from ..logging import fail, info, ok
from ..provisioning import AssetKind
from ._runtime import console_for, load_settings, open_provisioner

_MS_PER_SECOND = 1000


def install_command(
    force: bool = typer.Option(False, "--force", "-f", help="Reinstall assets that are already present."),
    emoji: bool = typer.Option(True, "--emoji/--no-emoji", help="Toggle emoji in CLI output."),
) -> None:
    """Install the api-linter binary and the googleapis and protobuf corpora."""
    settings = load_settings({}, use_emoji=emoji)
    info(f"Provisioning assets in {settings.provision.data_dir}", use_emoji=emoji)
    with open_provisioner(settings) as (_, provisioner):
        try:
            paths = asyncio.run(provisioner.ensure_all(force=force))
        except ProvisioningError as exc:
            fail(str(exc), use_emoji=emoji)
            raise typer.Exit(code=2) from exc
    for kind, path in paths.items():
        ok(f"{kind.value}: {path}", use_emoji=emoji)


def status_command(
    emoji: bool = typer.Option(True, "--emoji/--no-emoji", help="Toggle emoji in CLI output."),
) -> None:
    """Show the installed version and last check time of each asset."""
    settings = load_settings({}, use_emoji=emoji)
    table = Table(title=f"Assets in {settings.provision.data_dir}", box=box.SIMPLE, expand=True)
    table.add_column("Asset", style="bold")
    table.add_column("Installed")
    table.add_column("Version")
    table.add_column("Last checked")
    table.add_column("Path", overflow="fold")
    with open_provisioner(settings) as (_, provisioner):
        for kind in AssetKind:
            metadata = provisioner.store.load(kind)
            installed = provisioner.is_installed(kind)
            checked = (
                datetime.fromtimestamp(metadata.last_checked / _MS_PER_SECOND).isoformat(timespec="seconds")
                if metadata is not None
                else "-"
            )
            table.add_row(
                kind.value,
                "[green]yes[/]" if installed else "[red]no[/]",
                metadata.version if metadata is not None else "-",
                checked,
                str(provisioner.install_path(kind)),
            )
    console_for(use_emoji=emoji).print(table)


def check_update_command(
    yes: bool = typer.Option(False, "--yes", "-y", help="Apply an available update without prompting."),
    emoji: bool = typer.Option(True, "--emoji/--no-emoji", help="Toggle emoji in CLI output."),
) -> None:
    """Check for a newer api-linter release and optionally install it."""
    settings = load_settings({}, use_emoji=emoji)
    with open_provisioner(settings) as (_, provisioner):
        try:
            offer = asyncio.run(provisioner.check_for_update(AssetKind.EXECUTABLE))
        except ProvisioningError as exc:
            fail(f"Update check failed: {exc}", use_emoji=emoji)
            raise typer.Exit(code=2) from exc
        if offer is None:
            ok("api-linter is up to date.", use_emoji=emoji)
            return
        info(offer.describe(), use_emoji=emoji)
        if not (yes or typer.confirm("Install it now?", default=True)):
            provisioner.decline_update(offer)
            info("Update skipped until the next check interval.", use_emoji=emoji)
            return
        try:
            path = asyncio.run(provisioner.apply_update(offer))
        except ProvisioningError as exc:
            fail(f"Update failed: {exc}", use_emoji=emoji)
            raise typer.Exit(code=2) from exc
    ok(f"Installed api-linter {offer.latest} at {path}", use_emoji=emoji)


__all__ = ["check_update_command", "install_command", "status_command"]
