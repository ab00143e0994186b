# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared constants for gapi-lint."""

from __future__ import annotations

from typing import Final

USER_AGENT: Final[str] = "gapi-lint (+https://github.com/googleapis/api-linter)"

DATA_DIR_ENV: Final[str] = "GAPI_HOME"
DATA_DIR_NAME: Final[str] = ".gapi"

EXECUTABLE_NAME: Final[str] = "api-linter"
LINTER_RELEASES_API: Final[str] = "https://api.github.com/repos/googleapis/api-linter/releases/latest"
LINTER_DOWNLOAD_URL: Final[str] = (
    "https://github.com/googleapis/api-linter/releases/download/"
    "{tag}/api-linter-{version}-{os}-{arch}.tar.gz"
)

GOOGLEAPIS_DIR_NAME: Final[str] = "googleapis"
GOOGLEAPIS_SOURCE: Final[str] = "https://github.com/googleapis/googleapis"
GOOGLEAPIS_REF: Final[str] = "master"

PROTOBUF_DIR_NAME: Final[str] = "protobuf"
PROTOBUF_SOURCE: Final[str] = "https://github.com/protocolbuffers/protobuf"
PROTOBUF_REF: Final[str] = "main"

SOURCE_ARCHIVE_URL: Final[str] = "{source}/archive/refs/heads/{ref}.zip"

EXECUTABLE_METADATA_FILE: Final[str] = "metadata.json"
GOOGLEAPIS_METADATA_FILE: Final[str] = "googleapis-metadata.json"
PROTOBUF_METADATA_FILE: Final[str] = "protobuf-metadata.json"

DAY_SECONDS: Final[float] = 24 * 60 * 60
DEFAULT_EXECUTABLE_REFRESH_SECONDS: Final[float] = 10 * DAY_SECONDS
DEFAULT_CORPUS_REFRESH_SECONDS: Final[float] = 30 * DAY_SECONDS

DEFAULT_HTTP_TIMEOUT: Final[float] = 60.0
DEFAULT_MAX_REDIRECTS: Final[int] = 10
DOWNLOAD_CHUNK_SIZE: Final[int] = 64 * 1024

PROTO_FILE_SUFFIX: Final[str] = ".proto"
CONFIG_FILE_NAME: Final[str] = ".api-linter.yaml"
DIAGNOSTIC_SOURCE: Final[str] = "google-api-linter"

# api-linter convention: 0 = clean, 1 = findings reported.
SUCCESS_EXIT_CODES: Final[frozenset[int]] = frozenset({0, 1})
TIMEOUT_EXIT_CODE: Final[int] = 124

WORKSPACE_PLACEHOLDERS: Final[tuple[str, ...]] = ("${workspaceFolder}", "${workspaceRoot}")

GUIDANCE_PLACEHOLDER: Final[str] = "**Documentation available at the link below.**"

__all__ = [
    "CONFIG_FILE_NAME",
    "DATA_DIR_ENV",
    "DATA_DIR_NAME",
    "DAY_SECONDS",
    "DEFAULT_CORPUS_REFRESH_SECONDS",
    "DEFAULT_EXECUTABLE_REFRESH_SECONDS",
    "DEFAULT_HTTP_TIMEOUT",
    "DEFAULT_MAX_REDIRECTS",
    "DIAGNOSTIC_SOURCE",
    "DOWNLOAD_CHUNK_SIZE",
    "EXECUTABLE_METADATA_FILE",
    "EXECUTABLE_NAME",
    "GOOGLEAPIS_DIR_NAME",
    "GOOGLEAPIS_METADATA_FILE",
    "GOOGLEAPIS_REF",
    "GOOGLEAPIS_SOURCE",
    "GUIDANCE_PLACEHOLDER",
    "LINTER_DOWNLOAD_URL",
    "LINTER_RELEASES_API",
    "PROTOBUF_DIR_NAME",
    "PROTOBUF_METADATA_FILE",
    "PROTOBUF_REF",
    "PROTOBUF_SOURCE",
    "PROTO_FILE_SUFFIX",
    "SOURCE_ARCHIVE_URL",
    "SUCCESS_EXIT_CODES",
    "TIMEOUT_EXIT_CODE",
    "USER_AGENT",
    "WORKSPACE_PLACEHOLDERS",
]
