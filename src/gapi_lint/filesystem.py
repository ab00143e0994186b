# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Filesystem helpers for the managed data directory.

Everything that replaces a managed asset goes through :func:`atomic_write_text`,
:func:`atomic_replace_file`, or :func:`swap_directory` so that an interrupted
install leaves either the previous or the new copy intact.
"""

from __future__ import annotations

import os
import shutil
import stat
import tempfile
import uuid
from pathlib import Path

from .constants import DATA_DIR_ENV, DATA_DIR_NAME
from .logging import get_logger

_LOGGER = get_logger(__name__)


def resolve_data_dir() -> Path:
    """Return the per-user data directory holding managed assets.

    ``GAPI_HOME`` overrides the default of ``~/.gapi``.

    Returns:
        Path: Absolute data directory path (not created).
    """

    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser().resolve()
    return Path.home() / DATA_DIR_NAME


def best_effort_cleanup(*paths: Path) -> None:
    """Remove ``paths`` if present, logging and discarding any ``OSError``.

    Args:
        *paths: Files or directories to delete.
    """

    for path in paths:
        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            elif path.exists() or path.is_symlink():
                path.unlink()
        except OSError as exc:
            _LOGGER.debug("best-effort cleanup of %s failed: %s", path, exc)


def atomic_write_text(path: Path, content: str) -> None:
    """Write ``content`` to ``path`` through a sibling temp file and ``os.replace``.

    Args:
        path: Destination file.
        content: UTF-8 text to persist.
    """

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        best_effort_cleanup(tmp_path)
        raise


def atomic_replace_file(source: Path, destination: Path) -> None:
    """Move ``source`` onto ``destination`` atomically.

    ``source`` is first copied next to ``destination`` when the two live on
    different filesystems, so the final step is always a same-directory
    ``os.replace``.

    Args:
        source: Fully written file to install.
        destination: Canonical location that receives the file.
    """

    destination.parent.mkdir(parents=True, exist_ok=True)
    staged = destination.with_name(f".{destination.name}.{uuid.uuid4().hex}.tmp")
    try:
        shutil.copy2(source, staged)
        os.replace(staged, destination)
    except BaseException:
        best_effort_cleanup(staged)
        raise


def swap_directory(source: Path, destination: Path) -> None:
    """Install directory ``source`` at ``destination``, replacing any prior copy.

    The previous tree is renamed aside before the new one is renamed into
    place and is deleted only afterwards; when the second rename fails the
    previous tree is restored.

    Args:
        source: Fully extracted directory on the same filesystem as ``destination``.
        destination: Canonical directory location.
    """

    destination.parent.mkdir(parents=True, exist_ok=True)
    backup: Path | None = None
    if destination.exists():
        backup = destination.with_name(f".{destination.name}.old-{uuid.uuid4().hex}")
        os.replace(destination, backup)
    try:
        os.replace(source, destination)
    except OSError:
        if backup is not None:
            os.replace(backup, destination)
        raise
    if backup is not None:
        best_effort_cleanup(backup)


def make_executable(path: Path) -> None:
    """Set executable permissions on ``path`` for user/group/other."""

    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


__all__ = [
    "atomic_replace_file",
    "atomic_write_text",
    "best_effort_cleanup",
    "make_executable",
    "resolve_data_dir",
    "swap_directory",
]
