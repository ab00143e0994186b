# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Optional cross-process lock serialising installs of one asset."""

from __future__ import annotations

import asyncio
import os
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from ..assets import AssetKind
from ..errors import ProvisioningError
from ..filesystem import best_effort_cleanup
from ..logging import get_logger

_LOGGER = get_logger(__name__)


class AssetLock:
    """Coarse lock file per asset created with ``O_EXCL``.

    A lock file older than ``stale_after`` seconds is assumed to belong to a
    crashed process and is removed.
    """

    def __init__(
        self,
        data_dir: Path,
        *,
        timeout: float = 60.0,
        stale_after: float = 2 * 60 * 60,
        poll_interval: float = 0.2,
    ) -> None:
        self.data_dir = data_dir
        self.timeout = timeout
        self.stale_after = stale_after
        self.poll_interval = poll_interval

    def path_for(self, kind: AssetKind) -> Path:
        """Return the lock file used for ``kind``."""

        return self.data_dir / f".{kind.value}.lock"

    @asynccontextmanager
    async def hold(self, kind: AssetKind) -> AsyncIterator[None]:
        """Hold the lock for ``kind`` for the duration of the ``async with`` block.

        Raises:
            ProvisioningError: If the lock is not acquired within ``timeout`` seconds.
        """

        path = self.path_for(kind)
        fd = await self._acquire(path)
        try:
            yield
        finally:
            os.close(fd)
            best_effort_cleanup(path)

    async def _acquire(self, path: Path) -> int:
        path.parent.mkdir(parents=True, exist_ok=True)
        started = time.monotonic()
        while True:
            try:
                fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
            except FileExistsError:
                try:
                    age = time.time() - path.stat().st_mtime
                except FileNotFoundError:
                    continue
                if age >= self.stale_after:
                    _LOGGER.warning("Removing stale lock %s", path)
                    best_effort_cleanup(path)
                    continue
                if time.monotonic() - started >= self.timeout:
                    raise ProvisioningError(
                        f"timed out waiting for lock {path} (waited {self.timeout:.1f}s)",
                        target=path,
                    ) from None
                await asyncio.sleep(self.poll_interval)
                continue
            os.write(fd, f"pid={os.getpid()} started={time.time():.0f}\n".encode())
            return fd


__all__ = ["AssetLock"]
