# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Decode the JSON report printed by ``api-linter --output-format json``."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .diagnostics import DiagnosticRecord, SourceRange
from .errors import DecodeError
from .logging import get_logger

_LOGGER = get_logger(__name__)


class _Position(BaseModel):
    model_config = ConfigDict(extra="ignore")

    line_number: int = 0
    column_number: int = 0


class _Location(BaseModel):
    model_config = ConfigDict(extra="ignore")

    start_position: _Position = Field(default_factory=_Position)
    end_position: _Position = Field(default_factory=_Position)


class _Problem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: str
    rule_id: str
    rule_doc_uri: str = ""
    location: _Location = Field(default_factory=_Location)


class _FileReport(BaseModel):
    model_config = ConfigDict(extra="ignore")

    file_path: str = ""
    problems: list[_Problem] = Field(default_factory=list)

    @field_validator("problems", mode="before")
    @classmethod
    def _null_is_empty(cls, value: Any) -> Any:
        # Go encodes an empty slice as null.
        return [] if value is None else value


def _zero_based(value: int) -> int:
    return max(0, value - 1)


def _to_record(report: _FileReport, problem: _Problem) -> DiagnosticRecord:
    start = problem.location.start_position
    end = problem.location.end_position
    return DiagnosticRecord(
        message=problem.message,
        rule_id=problem.rule_id,
        rule_doc_uri=problem.rule_doc_uri,
        range=SourceRange(
            start_line=_zero_based(start.line_number),
            start_column=_zero_based(start.column_number),
            end_line=_zero_based(end.line_number),
            end_column=_zero_based(end.column_number),
        ),
        file_path=report.file_path,
    )


def _parse(raw: str) -> list[_FileReport]:
    text = raw.strip()
    if not text:
        return []
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end < start:
        raise DecodeError("no JSON array found in linter output")
    try:
        payload = json.loads(text[start : end + 1])
    except ValueError as exc:
        raise DecodeError(f"malformed linter JSON: {exc}") from exc
    if not isinstance(payload, list):
        raise DecodeError("linter output is not a JSON array")
    try:
        return [_FileReport.model_validate(entry) for entry in payload]
    except ValidationError as exc:
        raise DecodeError(f"unexpected linter JSON shape: {exc}") from exc


def decode(raw: str) -> list[DiagnosticRecord]:
    """Convert linter stdout into diagnostic records.

    Text surrounding the outermost JSON array is ignored, so banners or
    warnings printed on stdout do not break decoding. One-based tool
    coordinates are converted to zero-based, clamped at zero.

    Args:
        raw: Complete stdout of one invocation.

    Returns:
        list[DiagnosticRecord]: Records in tool order; empty when the output
        is blank or cannot be decoded (the failure is logged).
    """

    try:
        reports = _parse(raw)
    except DecodeError as exc:
        _LOGGER.error("Failed to parse api-linter output: %s", exc)
        return []
    return [_to_record(report, problem) for report in reports for problem in report.problems]


__all__ = ["decode"]
