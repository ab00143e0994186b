# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI tests for the gapi-lint commands."""

from __future__ import annotations

import io
import json
import logging
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

from gapi_lint.cli import app
from gapi_lint.cli.app import _configure_logging
from gapi_lint.provisioning import AssetKind, DependencyProvisioner, UpdateOffer

FINDING = [
    {
        "file_path": "library.proto",
        "problems": [
            {
                "message": "Use GET.",
                "rule_id": "core::0131::http-method",
                "rule_doc_uri": "https://linter.aip.dev/131/http-method",
                "location": {
                    "start_position": {"line_number": 3, "column_number": 1},
                    "end_position": {"line_number": 3, "column_number": 9},
                },
            }
        ],
    }
]


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    (root / "api").mkdir(parents=True)
    (root / "api" / "library.proto").write_text('syntax = "proto3";\n', encoding="utf-8")
    (root / "node_modules" / "dep").mkdir(parents=True)
    (root / "node_modules" / "dep" / "skip.proto").write_text("", encoding="utf-8")
    return root


def test_lint_reports_findings_and_exits_one(project: Path, data_dir: Path, make_script) -> None:
    script = make_script("api-linter", f"echo '{json.dumps(FINDING)}'\nexit 1")
    runner = CliRunner()

    result = runner.invoke(
        app,
        ["lint", str(project), "--root", str(project), "--binary-path", str(script), "--no-emoji"],
    )

    assert result.exit_code == 1
    assert "Linting 1 proto file(s)" in result.stdout
    assert "core::0131::http-method" in result.stdout
    assert "api/library.proto:3:1" in result.stdout
    assert "Found 1 problem(s)." in result.stdout


def test_lint_clean_run_exits_zero(project: Path, data_dir: Path, make_script) -> None:
    script = make_script("api-linter", "echo '[]'")
    runner = CliRunner()

    result = runner.invoke(
        app,
        ["lint", str(project / "api" / "library.proto"), "--binary-path", str(script), "--no-emoji"],
    )

    assert result.exit_code == 0
    assert "No problems found." in result.stdout


def test_lint_forwards_rule_options(project: Path, data_dir: Path, make_script, tmp_path: Path) -> None:
    log = tmp_path / "argv.txt"
    script = make_script("api-linter", f'printf "%s\\n" "$@" > "{log}"\necho "[]"')
    runner = CliRunner()

    result = runner.invoke(
        app,
        [
            "lint",
            str(project / "api" / "library.proto"),
            "--binary-path",
            str(script),
            "--disable-rule",
            "core::0192",
            "--enable-rule",
            "core::0131",
            "--set-exit-status",
            "--no-emoji",
        ],
    )

    assert result.exit_code == 0
    argv = log.read_text(encoding="utf-8").splitlines()
    assert ["--disable-rule", "core::0192"] == argv[argv.index("--disable-rule") : argv.index("--disable-rule") + 2]
    assert argv[-4:] == ["--set-exit-status", "--output-format", "json", "library.proto"]


def test_lint_missing_binary_exits_two(project: Path, data_dir: Path, tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        app,
        ["lint", str(project), "--binary-path", str(tmp_path / "nope" / "api-linter"), "--no-emoji"],
    )

    assert result.exit_code == 2
    assert "api-linter binary not found at:" in result.stdout


def test_lint_without_proto_files(tmp_path: Path, data_dir: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["lint", str(tmp_path), "--no-emoji"])

    assert result.exit_code == 0
    assert "No .proto files found." in result.stdout


def test_status_lists_every_asset(data_dir: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["status", "--no-emoji"])

    assert result.exit_code == 0
    for kind in AssetKind:
        assert kind.value in result.stdout


def test_install_reports_paths(monkeypatch: pytest.MonkeyPatch, data_dir: Path) -> None:
    forced: list[bool] = []

    async def fake_ensure_all(self: DependencyProvisioner, *, force: bool = False) -> dict[AssetKind, Path]:
        forced.append(force)
        return {kind: self.install_path(kind) for kind in AssetKind}

    monkeypatch.setattr(DependencyProvisioner, "ensure_all", fake_ensure_all)
    runner = CliRunner()

    result = runner.invoke(app, ["install", "--force", "--no-emoji"])

    assert result.exit_code == 0
    assert forced == [True]
    assert "googleapis:" in result.stdout


def test_check_update_up_to_date(monkeypatch: pytest.MonkeyPatch, data_dir: Path) -> None:
    async def fake_check(self: DependencyProvisioner, kind: AssetKind = AssetKind.EXECUTABLE) -> UpdateOffer | None:
        return None

    monkeypatch.setattr(DependencyProvisioner, "check_for_update", fake_check)
    runner = CliRunner()

    result = runner.invoke(app, ["check-update", "--no-emoji"])

    assert result.exit_code == 0
    assert "api-linter is up to date." in result.stdout


def test_check_update_declined_records_check(monkeypatch: pytest.MonkeyPatch, data_dir: Path) -> None:
    offer = UpdateOffer(kind=AssetKind.EXECUTABLE, installed="v1.0.0", latest="v1.1.0")
    declined: list[UpdateOffer] = []

    async def fake_check(self: DependencyProvisioner, kind: AssetKind = AssetKind.EXECUTABLE) -> UpdateOffer | None:
        return offer

    monkeypatch.setattr(DependencyProvisioner, "check_for_update", fake_check)
    monkeypatch.setattr(DependencyProvisioner, "decline_update", lambda self, item: declined.append(item))
    runner = CliRunner()

    result = runner.invoke(app, ["check-update", "--no-emoji"], input="n\n")

    assert result.exit_code == 0
    assert "v1.1.0" in result.stdout
    assert declined == [offer]


def test_explain_prints_guidance(monkeypatch: pytest.MonkeyPatch, data_dir: Path) -> None:
    async def fake_guidance(self, uri: str) -> str:
        return "**Details:**\nGet methods must use GET.\n\n"

    monkeypatch.setattr("gapi_lint.guidance.GuidanceCache.guidance_for", fake_guidance)
    runner = CliRunner()

    result = runner.invoke(app, ["explain", "https://linter.aip.dev/131/http-method", "--no-emoji"])

    assert result.exit_code == 0
    assert "Get methods must use GET." in result.stdout
    assert "https://linter.aip.dev/131/http-method" in result.stdout


def test_lint_prints_healthy_results_when_a_file_fails(project: Path, data_dir: Path, make_script) -> None:
    (project / "api" / "broken.proto").write_text("", encoding="utf-8")
    script = make_script(
        "api-linter",
        f'case "$*" in\n  *broken.proto) exit 2 ;;\nesac\necho \'{json.dumps(FINDING)}\'\nexit 1',
    )
    runner = CliRunner()

    result = runner.invoke(
        app,
        ["lint", str(project), "--root", str(project), "--binary-path", str(script), "--no-emoji"],
    )

    assert result.exit_code == 2
    assert "api/library.proto:3:1" in result.stdout
    assert "api-linter exited with code 2" in result.stdout
    assert "1 file(s) could not be linted." in result.stdout


def test_lint_root_defaults_to_the_invocation_directory(
    project: Path,
    data_dir: Path,
    make_script,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    script = make_script("api-linter", f"echo '{json.dumps(FINDING)}'\nexit 1")
    monkeypatch.chdir(project)
    runner = CliRunner()

    result = runner.invoke(app, ["lint", "api", "--binary-path", str(script), "--no-emoji"])

    assert result.exit_code == 1
    assert "api/library.proto:3:1" in result.stdout


def test_configure_logging_binds_the_current_stderr(monkeypatch: pytest.MonkeyPatch) -> None:
    logger = logging.getLogger("gapi_lint")
    first, second = io.StringIO(), io.StringIO()
    try:
        monkeypatch.setattr(sys, "stderr", first)
        _configure_logging(False)
        monkeypatch.setattr(sys, "stderr", second)
        _configure_logging(True)
        logger.debug("debug record")

        handlers = [handler for handler in logger.handlers if handler.get_name() == "gapi-lint-cli"]
        assert len(handlers) == 1
        assert first.getvalue() == ""
        assert "DEBUG gapi_lint: debug record" in second.getvalue()
    finally:
        for handler in list(logger.handlers):
            if handler.get_name() == "gapi-lint-cli":
                logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
