# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Implementation of the `gapi-lint explain` command."""

from __future__ import annotations

import asyncio

import typer
from rich.markdown import Markdown

from ..guidance import GuidanceCache
from ._runtime import console_for, load_settings, open_provisioner


def explain_command(
    rule_doc_uri: str = typer.Argument(..., help="Rule documentation URL, e.g. https://linter.aip.dev/131/http-method."),
    emoji: bool = typer.Option(True, "--emoji/--no-emoji", help="Toggle emoji in CLI output."),
) -> None:
    """Print the guidance extracted from a rule documentation page."""
    settings = load_settings({}, use_emoji=emoji)
    with open_provisioner(settings) as (http, _):
        guidance = asyncio.run(GuidanceCache(http).guidance_for(rule_doc_uri))
    console = console_for(use_emoji=emoji)
    console.print(Markdown(guidance))
    console.print(f"Full documentation: {rule_doc_uri}")


__all__ = ["explain_command"]
