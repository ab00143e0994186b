# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Archive extraction for downloaded releases and source snapshots."""

from __future__ import annotations

import os
import shutil
import tarfile
import zipfile
from pathlib import Path, PurePosixPath
from typing import Final

from .errors import ProvisioningError

_TAR_SUFFIXES: Final[tuple[str, ...]] = (".tar.gz", ".tgz", ".tar")
_ZIP_SUFFIX: Final[str] = ".zip"
_ZIP_MODE_SHIFT: Final[int] = 16


def extract_archive(archive: Path, destination: Path) -> Path:
    """Extract ``archive`` into ``destination`` and return ``destination``.

    Args:
        archive: ``.tar.gz``/``.tgz``/``.tar`` or ``.zip`` file.
        destination: Directory receiving the archive members.

    Returns:
        Path: The destination directory.

    Raises:
        ProvisioningError: If the archive is unreadable, of an unknown format,
            or contains members escaping ``destination``.
    """

    destination.mkdir(parents=True, exist_ok=True)
    name = archive.name.lower()
    if name.endswith(_ZIP_SUFFIX):
        _extract_zip(archive, destination)
    elif name.endswith(_TAR_SUFFIXES):
        _extract_tar(archive, destination)
    else:
        raise ProvisioningError(f"unsupported archive format for {archive.name}", target=archive)
    return destination


def _extract_tar(archive: Path, destination: Path) -> None:
    try:
        with tarfile.open(archive, mode="r:*") as bundle:
            # The "data" filter rejects absolute paths, traversal, and escaping links.
            bundle.extractall(destination, filter="data")
    except tarfile.FilterError as exc:
        raise ProvisioningError(f"refusing unsafe member in {archive.name}: {exc}", target=archive) from exc
    except (tarfile.TarError, OSError) as exc:
        raise ProvisioningError(f"Failed to extract {archive.name}: {exc}", target=archive) from exc


def _extract_zip(archive: Path, destination: Path) -> None:
    root = destination.resolve()
    try:
        with zipfile.ZipFile(archive) as bundle:
            for info in bundle.infolist():
                relative = _safe_member_path(info.filename, archive=archive)
                if relative is None:
                    continue
                target = root.joinpath(*relative.parts)
                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                with bundle.open(info, "r") as src, target.open("wb") as out:
                    shutil.copyfileobj(src, out)
                mode = (info.external_attr >> _ZIP_MODE_SHIFT) & 0o777
                if mode:
                    os.chmod(target, mode)
    except zipfile.BadZipFile as exc:
        raise ProvisioningError(f"corrupt zip archive {archive.name}", target=archive) from exc
    except OSError as exc:
        raise ProvisioningError(f"Failed to extract {archive.name}: {exc}", target=archive) from exc


def _safe_member_path(member: str, *, archive: Path) -> PurePosixPath | None:
    """Return the normalised relative path of ``member`` or ``None`` for the root entry.

    Raises:
        ProvisioningError: If the member is absolute or traverses upwards.
    """

    normalized = member.replace("\\", "/")
    if normalized.startswith("/") or (len(normalized) > 1 and normalized[1] == ":"):
        raise ProvisioningError(f"archive entry contains an absolute path: {member!r} ({archive.name})", target=archive)
    parts = [part for part in normalized.split("/") if part not in {"", "."}]
    if ".." in parts:
        raise ProvisioningError(f"archive entry attempts path traversal: {member!r} ({archive.name})", target=archive)
    if not parts:
        return None
    return PurePosixPath(*parts)


def single_top_level_directory(root: Path) -> Path:
    """Return the only directory directly under ``root``.

    Source snapshots unpack into one ``<repo>-<ref>`` directory whose name
    depends on the ref; callers relocate it to the canonical corpus path.

    Raises:
        ProvisioningError: If ``root`` holds zero or several directories.
    """

    directories = [entry for entry in root.iterdir() if entry.is_dir()]
    if len(directories) != 1:
        names = ", ".join(sorted(entry.name for entry in directories)) or "none"
        raise ProvisioningError(
            f"expected a single top-level directory in {root}, found: {names}",
            target=root,
        )
    return directories[0]


def locate_executable(root: Path, name: str) -> Path:
    """Return the extracted executable ``name`` below ``root``.

    Checks ``root/name`` and ``root/bin/name`` before searching the tree.

    Raises:
        ProvisioningError: If the executable is absent or ambiguous.
    """

    for candidate in (root / name, root / "bin" / name):
        if candidate.is_file():
            return candidate
    matches = [path for path in root.rglob(name) if path.is_file()]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        raise ProvisioningError(f"archive did not contain {name}", target=root)
    raise ProvisioningError(f"archive contained several copies of {name}", target=root)


__all__ = ["extract_archive", "locate_executable", "single_top_level_directory"]
