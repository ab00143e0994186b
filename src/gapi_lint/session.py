# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Lint orchestration: provision, build arguments, run, and decode."""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from .config import LinterSettings
from .constants import DATA_DIR_NAME, PROTO_FILE_SUFFIX
from .decoding import decode
from .diagnostics import DiagnosticRecord
from .errors import GapiLintError, InvocationError, ProvisioningError
from .guidance import GuidanceCache
from .invocation import build_arguments, run_linter
from .logging import get_logger
from .provisioning import AssetKind, DependencyProvisioner, UpdateOffer

_LOGGER = get_logger(__name__)

_SKIPPED_DIRECTORIES: Final[frozenset[str]] = frozenset({"node_modules", DATA_DIR_NAME})

Reporter = Callable[[str], None]


@dataclass(slots=True)
class LintBatch:
    """Outcome of linting several files at once.

    Attributes:
        results: Applied diagnostics per file that completed.
        errors: Failure per file that could not be linted.
    """

    results: dict[Path, list[DiagnosticRecord]] = field(default_factory=dict)
    errors: dict[Path, GapiLintError] = field(default_factory=dict)


class MessageThrottle:
    """Forward each distinct message to ``reporter`` only once."""

    def __init__(self, reporter: Reporter) -> None:
        self._reporter = reporter
        self._seen: set[str] = set()

    def report(self, message: str) -> bool:
        """Report ``message`` unless it was already reported; return whether it was."""

        if message in self._seen:
            _LOGGER.debug("Suppressing repeated message: %s", message)
            return False
        self._seen.add(message)
        self._reporter(message)
        return True

    def reset(self) -> None:
        """Allow every message to be reported again."""

        self._seen.clear()


def find_proto_files(root: Path) -> list[Path]:
    """Return every ``.proto`` file below ``root`` in sorted order.

    Dependency and managed-corpus directories (``node_modules``, ``.gapi``)
    are skipped.
    """

    found: list[Path] = []
    for path in root.rglob(f"*{PROTO_FILE_SUFFIX}"):
        relative = path.relative_to(root)
        if any(part in _SKIPPED_DIRECTORIES for part in relative.parts[:-1]):
            continue
        if path.is_file():
            found.append(path)
    return sorted(found)


class LintSession:
    """Run api-linter over files and keep the most recent result per file.

    Each :meth:`lint_file` call takes a fresh per-file token. When a newer
    request for the same file starts before an older one completes, the
    older completion is discarded so only the latest request's diagnostics
    are applied.

    Args:
        settings: Validated settings.
        provisioner: Supplies the executable path.
        guidance: Documentation cache used by :meth:`describe`.
        workspace_root: Root for placeholder substitution and import paths.
        reporter: Receives user-facing error text, once per distinct message.
        notifier: Receives update notices, once per distinct message; defaults
            to a warning log record.
    """

    def __init__(
        self,
        settings: LinterSettings,
        *,
        provisioner: DependencyProvisioner,
        guidance: GuidanceCache | None = None,
        workspace_root: Path | None = None,
        reporter: Reporter | None = None,
        notifier: Reporter | None = None,
    ) -> None:
        self.settings = settings
        self.workspace_root = workspace_root
        self._provisioner = provisioner
        self._guidance = guidance
        self._throttle = MessageThrottle(reporter or _LOGGER.error)
        self._notices = MessageThrottle(notifier or _LOGGER.warning)
        self._tokens = itertools.count(1)
        self._pending: dict[Path, int] = {}
        self._latest: dict[Path, list[DiagnosticRecord]] = {}

    @property
    def throttle(self) -> MessageThrottle:
        """Return the throttle guarding user-facing error messages."""

        return self._throttle

    def latest(self, path: Path) -> list[DiagnosticRecord] | None:
        """Return the last applied diagnostics for ``path``, if any."""

        return self._latest.get(self._key(path))

    def is_pending(self, path: Path) -> bool:
        """Return whether a lint request for ``path`` is still in flight."""

        return self._key(path) in self._pending

    async def lint_file(self, path: Path) -> list[DiagnosticRecord] | None:
        """Lint one file and apply its diagnostics.

        Args:
            path: File to lint; anything other than a ``.proto`` file yields ``[]``.

        Returns:
            list[DiagnosticRecord] | None: The applied diagnostics, or ``None``
            when a newer request for the same file superseded this one.

        Raises:
            ProvisioningError: If the executable cannot be provisioned.
            InvocationError: If the executable cannot be run to completion.
        """

        if Path(path).suffix != PROTO_FILE_SUFFIX:
            return []
        key = self._key(path)
        token = next(self._tokens)
        self._pending[key] = token
        _LOGGER.info("Starting lint for: %s", key)
        try:
            executable = await self._provisioner.ensure(AssetKind.EXECUTABLE)
            self._report_refresh_errors()
            plan = build_arguments(
                key,
                self.settings.invocation,
                workspace_root=self.workspace_root,
                data_dir=self._provisioner.data_dir,
            )
            stdout = await run_linter(executable, plan.argv, plan.working_directory, timeout=self.settings.timeout)
        except (ProvisioningError, InvocationError) as exc:
            if self._is_current(key, token):
                del self._pending[key]
                self._throttle.report(f"Google API Linter error: {exc}")
            raise
        records = decode(stdout)
        if not self._is_current(key, token):
            _LOGGER.debug("Discarding stale result for %s", key)
            return None
        del self._pending[key]
        self._latest[key] = records
        _LOGGER.info("Found %d diagnostic(s) in %s", len(records), key)
        return records

    async def lint_files(self, paths: Iterable[Path]) -> LintBatch:
        """Lint ``paths`` concurrently.

        The executable is provisioned once up front. Each file then runs
        independently: a failing file lands in :attr:`LintBatch.errors`
        without discarding the results of the others. Superseded results are
        omitted.

        Raises:
            ProvisioningError: If the executable cannot be provisioned at all.
        """

        batch = LintBatch()
        targets = [Path(path) for path in paths]
        if not targets:
            return batch
        try:
            await self._provisioner.ensure(AssetKind.EXECUTABLE)
        except ProvisioningError as exc:
            self._throttle.report(f"Google API Linter error: {exc}")
            raise
        outcomes = await asyncio.gather(*(self.lint_file(path) for path in targets), return_exceptions=True)
        for path, outcome in zip(targets, outcomes, strict=True):
            if isinstance(outcome, GapiLintError):
                batch.errors[path] = outcome
            elif isinstance(outcome, BaseException):
                raise outcome
            elif outcome is not None:
                batch.results[path] = outcome
        return batch

    async def announce_update(self, offer: UpdateOffer) -> bool:
        """Report ``offer`` once through the notifier and decline it.

        Suitable as the provisioner's ``on_update`` callback for hosts that
        apply updates through an explicit command instead of mid-lint.
        """

        self._notices.report(f"{offer.describe()}. Run `gapi-lint check-update` to install it.")
        return False

    async def describe(self, record: DiagnosticRecord) -> str:
        """Return hover-style markdown for ``record``.

        Includes the rule header, the message, extracted guidance when a
        documentation cache is available, and a link to the full page.
        """

        uri = record.rule_doc_uri
        if uri:
            markdown = f"### Rule: [`{record.rule_id}`]({uri})\n\n"
        else:
            markdown = f"### Rule: `{record.rule_id}`\n\n"
        markdown += f"**ERROR:** {record.message}\n\n"
        if uri:
            if self._guidance is not None:
                markdown += await self._guidance.guidance_for(uri)
            markdown += f"\n\n[View Full Documentation]({uri})\n"
        return markdown

    def _report_refresh_errors(self) -> None:
        for kind, error in self._provisioner.refresh_errors.items():
            self._throttle.report(f"Update check for {kind.value} failed: {error}")

    def _is_current(self, key: Path, token: int) -> bool:
        return self._pending.get(key) == token

    @staticmethod
    def _key(path: Path) -> Path:
        return Path(path).expanduser().resolve()


__all__ = ["LintBatch", "LintSession", "MessageThrottle", "Reporter", "find_proto_files"]
