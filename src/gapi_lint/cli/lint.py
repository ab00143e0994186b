# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Implementation of the `gapi-lint lint` command."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich import box
from rich.markdown import Markdown
from rich.table import Table

from ..config import LinterSettings
from ..diagnostics import DiagnosticRecord
from ..errors import GapiLintError
from ..guidance import GuidanceCache
from ..logging import fail, info, ok, section, warn
from ..session import LintBatch, LintSession, find_proto_files
from ._runtime import console_for, display_path, load_settings, open_provisioner


def _collect_targets(paths: list[Path]) -> list[Path]:
    targets: dict[Path, None] = {}
    for path in paths:
        resolved = path.expanduser().resolve()
        if resolved.is_dir():
            for proto in find_proto_files(resolved):
                targets.setdefault(proto, None)
        else:
            targets.setdefault(resolved, None)
    return list(targets)


async def _lint(
    settings: LinterSettings,
    targets: list[Path],
    *,
    root: Path,
    explain: bool,
    use_emoji: bool,
) -> tuple[LintBatch, list[str]]:
    # The provisioner only calls back once the session below exists.
    with open_provisioner(settings, on_update=lambda offer: session.announce_update(offer)) as (http, provisioner):
        session = LintSession(
            settings,
            provisioner=provisioner,
            guidance=GuidanceCache(http) if explain else None,
            workspace_root=root,
            reporter=lambda message: fail(message, use_emoji=use_emoji),
            notifier=lambda message: warn(message, use_emoji=use_emoji),
        )
        batch = await session.lint_files(targets)
        explanations: list[str] = []
        if explain:
            for records in batch.results.values():
                for record in records:
                    explanations.append(await session.describe(record))
        return batch, explanations


def _render(results: dict[Path, list[DiagnosticRecord]], *, root: Path, use_emoji: bool) -> int:
    console = console_for(use_emoji=use_emoji)
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column("Location", style="cyan", no_wrap=True)
    table.add_column("Rule", style="magenta")
    table.add_column("Message", overflow="fold")
    total = 0
    for path, records in sorted(results.items()):
        for record in records:
            table.add_row(f"{display_path(path, root)}:{record.range}", record.rule_id, record.message)
            total += 1
    if total:
        console.print(table)
    return total


def lint_command(
    paths: list[Path] = typer.Argument(..., exists=True, help="Files or directories to lint."),
    root: Path | None = typer.Option(
        None,
        "--root",
        "-r",
        help="Workspace root used for import paths (defaults to the current directory).",
    ),
    config: str | None = typer.Option(None, "--config", help="api-linter configuration file."),
    proto_path: list[str] | None = typer.Option(None, "--proto-path", "-I", help="Additional import path."),
    disable_rule: list[str] | None = typer.Option(None, "--disable-rule", help="Rule id to disable."),
    enable_rule: list[str] | None = typer.Option(None, "--enable-rule", help="Rule id to enable."),
    descriptor_set_in: list[str] | None = typer.Option(
        None,
        "--descriptor-set-in",
        help="FileDescriptorSet used to resolve imports.",
    ),
    ignore_comment_disables: bool = typer.Option(
        False,
        "--ignore-comment-disables",
        help="Ignore rule disables written in proto comments.",
    ),
    set_exit_status: bool = typer.Option(False, "--set-exit-status", help="Forward --set-exit-status to api-linter."),
    binary_path: str | None = typer.Option(None, "--binary-path", help="Use this api-linter binary instead of a managed one."),
    timeout: float | None = typer.Option(None, "--timeout", help="Seconds before a linter run is aborted."),
    explain: bool = typer.Option(False, "--explain", help="Print rule documentation for every finding."),
    emoji: bool = typer.Option(True, "--emoji/--no-emoji", help="Toggle emoji in CLI output."),
) -> None:
    """Lint .proto files, exiting 1 when problems are found."""
    settings = load_settings(
        {
            "custom_executable_path": binary_path,
            "config_path": config,
            "import_paths": proto_path,
            "disabled_rule_ids": disable_rule,
            "enabled_rule_ids": enable_rule,
            "descriptor_set_paths": descriptor_set_in,
            "ignore_inline_disable_comments": ignore_comment_disables,
            "propagate_exit_status": set_exit_status,
            "timeout": timeout,
        },
        use_emoji=emoji,
    )
    resolved_root = (root or Path.cwd()).expanduser().resolve()
    targets = _collect_targets(paths)
    if not targets:
        info("No .proto files found.", use_emoji=emoji)
        raise typer.Exit(code=0)

    info(f"Linting {len(targets)} proto file(s)...", use_emoji=emoji)
    try:
        batch, explanations = asyncio.run(
            _lint(settings, targets, root=resolved_root, explain=explain, use_emoji=emoji),
        )
    except GapiLintError as exc:
        # The session has already reported the failure.
        raise typer.Exit(code=2) from exc

    total = _render(batch.results, root=resolved_root, use_emoji=emoji)
    if explanations:
        console = console_for(use_emoji=emoji)
        section("Rule documentation", use_color=console.color_system is not None)
        for text in explanations:
            console.print(Markdown(text))
    if batch.errors:
        if total:
            warn(f"Found {total} problem(s).", use_emoji=emoji)
        fail(f"{len(batch.errors)} file(s) could not be linted.", use_emoji=emoji)
        raise typer.Exit(code=2)
    if total:
        warn(f"Found {total} problem(s).", use_emoji=emoji)
        raise typer.Exit(code=1)
    ok("No problems found.", use_emoji=emoji)


__all__ = ["lint_command"]
