# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for spawning the linter executable."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from gapi_lint.errors import ExecutableNotFoundError, InvocationError, ProcessExitError
from gapi_lint.invocation import run_linter


def test_exit_code_zero_returns_stdout(make_script, tmp_path: Path) -> None:
    script = make_script("api-linter", "echo '[]'")

    assert asyncio.run(run_linter(script, [], tmp_path)).strip() == "[]"


def test_exit_code_one_means_findings_not_failure(make_script, tmp_path: Path) -> None:
    script = make_script("api-linter", "echo '[{\"file_path\": \"a.proto\", \"problems\": []}]'\nexit 1")

    stdout = asyncio.run(run_linter(script, [], tmp_path))

    assert "a.proto" in stdout


def test_other_exit_codes_raise(make_script, tmp_path: Path) -> None:
    script = make_script("api-linter", "echo 'bad flag' >&2\nexit 2")

    with pytest.raises(ProcessExitError) as excinfo:
        asyncio.run(run_linter(script, [], tmp_path))

    assert excinfo.value.exit_code == 2
    assert "bad flag" in (excinfo.value.stderr or "")
    assert str(excinfo.value) == "api-linter exited with code 2"
    assert excinfo.value.executable == str(script)


def test_arguments_and_working_directory_are_forwarded(make_script, tmp_path: Path) -> None:
    script = make_script("api-linter", 'pwd\nfor arg in "$@"; do echo "$arg"; done')
    work = tmp_path / "protos"
    work.mkdir()

    stdout = asyncio.run(run_linter(script, ["--output-format", "json", "a b.proto"], work))

    lines = stdout.splitlines()
    assert Path(lines[0]).resolve() == work.resolve()
    assert lines[1:] == ["--output-format", "json", "a b.proto"]


def test_missing_executable_names_the_path(tmp_path: Path) -> None:
    missing = tmp_path / "nowhere" / "api-linter"

    with pytest.raises(ExecutableNotFoundError) as excinfo:
        asyncio.run(run_linter(missing, [], tmp_path))

    assert str(excinfo.value).startswith(f"api-linter binary not found at: {missing}")
    assert isinstance(excinfo.value, InvocationError)


def test_timeout_kills_the_process(make_script, tmp_path: Path) -> None:
    script = make_script("api-linter", "exec sleep 5")

    with pytest.raises(ProcessExitError) as excinfo:
        asyncio.run(run_linter(script, [], tmp_path, timeout=0.2))

    assert excinfo.value.exit_code == 124
