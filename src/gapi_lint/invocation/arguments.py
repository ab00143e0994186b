# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Translate :class:`InvocationOptions` into an api-linter argument vector."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from ..config import InvocationOptions
from ..constants import DATA_DIR_NAME, GOOGLEAPIS_DIR_NAME, WORKSPACE_PLACEHOLDERS
from ..filesystem import resolve_data_dir
from ..logging import get_logger

_LOGGER = get_logger(__name__)
_UNRESOLVED_PLACEHOLDER = re.compile(r"\$\{[^}]*\}")


@dataclass(frozen=True, slots=True)
class InvocationPlan:
    """Everything needed to spawn one api-linter run.

    Attributes:
        argv: Arguments following the executable.
        working_directory: Directory the process runs in (the file's directory).
        file_name: Base name of the linted file, the final positional argument.
    """

    argv: tuple[str, ...]
    working_directory: Path
    file_name: str


def substitute_workspace(raw: str, workspace_root: Path | None) -> Path | None:
    """Resolve workspace placeholders and ``~`` in ``raw``.

    Relative results are anchored at ``workspace_root`` when one is known.

    Args:
        raw: User-supplied path, possibly containing ``${workspaceFolder}``.
        workspace_root: Root substituted for the placeholders.

    Returns:
        Path | None: Absolute path, or ``None`` when a placeholder remains
        unresolved.
    """

    text = raw
    if workspace_root is not None:
        for placeholder in WORKSPACE_PLACEHOLDERS:
            text = text.replace(placeholder, str(workspace_root))
    if _UNRESOLVED_PLACEHOLDER.search(text):
        _LOGGER.debug("Dropping path with unresolved placeholder: %s", raw)
        return None
    path = Path(text).expanduser()
    if not path.is_absolute() and workspace_root is not None:
        path = workspace_root / path
    return path.resolve()


class _ProtoPaths:
    """Ordered, de-duplicated ``--proto-path`` collector."""

    def __init__(self) -> None:
        self._paths: dict[str, None] = {}

    def add(self, path: Path) -> None:
        self._paths.setdefault(str(path), None)

    def add_existing(self, path: Path | None) -> None:
        if path is not None and path.exists():
            self.add(path)

    def flags(self) -> list[str]:
        argv: list[str] = []
        for path in self._paths:
            argv.extend(("--proto-path", path))
        return argv


def build_arguments(
    file_path: Path,
    options: InvocationOptions,
    *,
    workspace_root: Path | None = None,
    data_dir: Path | None = None,
) -> InvocationPlan:
    """Return the invocation plan for linting ``file_path``.

    Import roots are emitted in priority order: the file's directory, the
    workspace root, the workspace-local googleapis copy, the managed
    googleapis corpus, then configured import paths. Optional roots that do
    not exist on disk are skipped.

    Args:
        file_path: File to lint.
        options: Per-invocation options.
        workspace_root: Root used for placeholder substitution and as an import root.
        data_dir: Managed data directory; defaults to :func:`resolve_data_dir`.

    Returns:
        InvocationPlan: Arguments, working directory, and file name.
    """

    absolute = file_path.expanduser().resolve()
    working_directory = absolute.parent
    root = workspace_root.expanduser().resolve() if workspace_root is not None else None
    managed_dir = data_dir if data_dir is not None else resolve_data_dir()

    argv: list[str] = []
    if options.config_path:
        config = substitute_workspace(options.config_path, root)
        if config is not None and config.is_file():
            argv.extend(("--config", str(config)))
        else:
            _LOGGER.debug("Ignoring missing linter config %s", options.config_path)

    proto_paths = _ProtoPaths()
    proto_paths.add(working_directory)
    if root is not None:
        if root != working_directory:
            proto_paths.add_existing(root)
        proto_paths.add_existing(root / DATA_DIR_NAME / GOOGLEAPIS_DIR_NAME)
    proto_paths.add_existing(managed_dir / GOOGLEAPIS_DIR_NAME)
    for raw in options.import_paths:
        proto_paths.add_existing(substitute_workspace(raw, root))
    argv.extend(proto_paths.flags())

    for rule_id in options.disabled_rule_ids:
        argv.extend(("--disable-rule", rule_id))
    for rule_id in options.enabled_rule_ids:
        argv.extend(("--enable-rule", rule_id))
    for raw in options.descriptor_set_paths:
        descriptor = substitute_workspace(raw, root)
        if descriptor is not None:
            argv.extend(("--descriptor-set-in", str(descriptor)))
    if options.ignore_inline_disable_comments:
        argv.append("--ignore-comment-disables")
    if options.propagate_exit_status:
        argv.append("--set-exit-status")
    argv.extend(("--output-format", "json", absolute.name))

    return InvocationPlan(argv=tuple(argv), working_directory=working_directory, file_name=absolute.name)


__all__ = ["InvocationPlan", "build_arguments", "substitute_workspace"]
