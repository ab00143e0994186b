# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Editor-neutral diagnostic records produced from api-linter output."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .constants import DIAGNOSTIC_SOURCE


class SourceRange(BaseModel):
    """Zero-based, end-inclusive-as-reported span inside a source file."""

    model_config = ConfigDict(frozen=True)

    start_line: int = Field(ge=0)
    start_column: int = Field(ge=0)
    end_line: int = Field(ge=0)
    end_column: int = Field(ge=0)

    def __str__(self) -> str:
        return f"{self.start_line + 1}:{self.start_column + 1}"


class DiagnosticRecord(BaseModel):
    """One rule violation reported by the linter.

    Attributes:
        message: Human readable violation text.
        rule_id: Rule identifier such as ``core::0131::http-method``.
        rule_doc_uri: Documentation page for the rule.
        range: Zero-based location of the violation.
        file_path: Path as reported by the tool.
        source: Constant identifying the producing tool.
    """

    model_config = ConfigDict(frozen=True)

    message: str
    rule_id: str
    rule_doc_uri: str
    range: SourceRange
    file_path: str = ""
    source: str = DIAGNOSTIC_SOURCE


__all__ = ["DiagnosticRecord", "SourceRange"]
