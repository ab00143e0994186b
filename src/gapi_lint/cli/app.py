# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring commands and shared options."""

from __future__ import annotations

import logging
import sys

import typer

from .assets import check_update_command, install_command, status_command
from .explain import explain_command
from .lint import lint_command

_PACKAGE_LOGGER = logging.getLogger("gapi_lint")
_HANDLER_NAME = "gapi-lint-cli"

app = typer.Typer(
    name="gapi-lint",
    help="Provision and run Google's api-linter over .proto files.",
    no_args_is_help=True,
    add_completion=False,
)


def _configure_logging(verbose: bool) -> None:
    """Stream package log records to stderr, at debug level when ``verbose``."""

    for handler in list(_PACKAGE_LOGGER.handlers):
        if handler.get_name() == _HANDLER_NAME:
            _PACKAGE_LOGGER.removeHandler(handler)
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    _PACKAGE_LOGGER.addHandler(handler)
    _PACKAGE_LOGGER.setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log internal diagnostics to stderr."),
) -> None:
    """Provision and run Google's api-linter over .proto files."""
    _configure_logging(verbose)


app.command("lint")(lint_command)
app.command("install")(install_command)
app.command("status")(status_command)
app.command("check-update")(check_update_command)
app.command("explain")(explain_command)

__all__ = ["app", "main"]
