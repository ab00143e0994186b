# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Typed settings consumed by the provisioning and invocation layers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import timedelta
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import (
    DEFAULT_CORPUS_REFRESH_SECONDS,
    DEFAULT_EXECUTABLE_REFRESH_SECONDS,
    DEFAULT_HTTP_TIMEOUT,
    EXECUTABLE_NAME,
)
from .errors import ConfigError
from .filesystem import resolve_data_dir


def _unique(values: Iterable[str]) -> tuple[str, ...]:
    """Return non-empty ``values`` stripped and deduplicated, preserving order."""

    seen: dict[str, None] = {}
    for value in values:
        text = str(value).strip()
        if text:
            seen.setdefault(text, None)
    return tuple(seen)


class ProvisionConfig(BaseModel):
    """Settings governing how managed assets are located and refreshed.

    Attributes:
        custom_executable_path: User-supplied binary; bypasses all download logic.
        executable_refresh_interval: Minimum age before the binary is re-checked.
        corpus_refresh_interval: Minimum age before a corpus is re-downloaded.
        data_dir: Per-user directory owning the binary, corpora, and metadata.
        use_file_lock: Serialise installs across processes with a lock file.
        http_timeout: Per-request timeout in seconds.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    custom_executable_path: Path | None = Field(default=None, alias="binaryPath")
    executable_refresh_interval: timedelta = Field(
        default=timedelta(seconds=DEFAULT_EXECUTABLE_REFRESH_SECONDS),
        alias="refreshIntervalExecutable",
    )
    corpus_refresh_interval: timedelta = Field(
        default=timedelta(seconds=DEFAULT_CORPUS_REFRESH_SECONDS),
        alias="refreshIntervalCorpus",
    )
    data_dir: Path = Field(default_factory=resolve_data_dir, alias="dataDir")
    use_file_lock: bool = Field(default=False, alias="useFileLock")
    http_timeout: float = Field(default=DEFAULT_HTTP_TIMEOUT, gt=0, alias="httpTimeout")

    @field_validator("custom_executable_path", mode="before")
    @classmethod
    def _normalise_custom_path(cls, value: Any) -> Any:
        # An empty value or the bare tool name means "let gapi-lint manage it".
        if value is None:
            return None
        text = str(value).strip()
        if not text or text == EXECUTABLE_NAME:
            return None
        return Path(text).expanduser()

    @field_validator("executable_refresh_interval", "corpus_refresh_interval")
    @classmethod
    def _non_negative(cls, value: timedelta) -> timedelta:
        if value < timedelta(0):
            raise ValueError("refresh intervals must not be negative")
        return value


class InvocationOptions(BaseModel):
    """Immutable per-invocation options forwarded to ``api-linter``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    config_path: str | None = Field(default=None, alias="configPath")
    import_paths: tuple[str, ...] = Field(default=(), alias="protoPath")
    disabled_rule_ids: tuple[str, ...] = Field(default=(), alias="disableRules")
    enabled_rule_ids: tuple[str, ...] = Field(default=(), alias="enableRules")
    descriptor_set_paths: tuple[str, ...] = Field(default=(), alias="descriptorSetIn")
    ignore_inline_disable_comments: bool = Field(default=False, alias="ignoreCommentDisables")
    propagate_exit_status: bool = Field(default=False, alias="setExitStatus")

    @field_validator("config_path", mode="before")
    @classmethod
    def _blank_config_is_unset(cls, value: Any) -> Any:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator(
        "import_paths",
        "disabled_rule_ids",
        "enabled_rule_ids",
        "descriptor_set_paths",
        mode="before",
    )
    @classmethod
    def _dedupe(cls, value: Any) -> tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, (str, Path)):
            return _unique([str(value)])
        if not isinstance(value, Iterable):
            raise ValueError("expected a string or a list of strings")
        return _unique(str(item) for item in value)


class LinterSettings(BaseModel):
    """Complete settings surface handed over by the hosting integration."""

    model_config = ConfigDict(frozen=True)

    provision: ProvisionConfig = Field(default_factory=ProvisionConfig)
    invocation: InvocationOptions = Field(default_factory=InvocationOptions)
    timeout: float | None = Field(default=None, gt=0)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> LinterSettings:
        """Validate a flat editor-style settings mapping.

        Keys may use either the attribute names or the camelCase aliases
        (``binaryPath``, ``protoPath``, ``disableRules`` …).

        Args:
            raw: Flat mapping of settings.

        Returns:
            LinterSettings: Validated settings.

        Raises:
            ConfigError: If any value fails validation.
        """

        provision_keys = set(ProvisionConfig.model_fields) | {
            field.alias for field in ProvisionConfig.model_fields.values() if field.alias
        }
        invocation_keys = set(InvocationOptions.model_fields) | {
            field.alias for field in InvocationOptions.model_fields.values() if field.alias
        }
        unknown = set(raw) - provision_keys - invocation_keys - {"timeout"}
        if unknown:
            raise ConfigError(f"unknown settings: {', '.join(sorted(unknown))}")
        try:
            return cls(
                provision=ProvisionConfig.model_validate({k: v for k, v in raw.items() if k in provision_keys}),
                invocation=InvocationOptions.model_validate({k: v for k, v in raw.items() if k in invocation_keys}),
                timeout=raw.get("timeout"),
            )
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc


__all__ = ["InvocationOptions", "LinterSettings", "ProvisionConfig"]
