# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Ensure the api-linter binary and proto corpora are installed and fresh."""

from __future__ import annotations

import asyncio
import os
import tempfile
import time
from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from contextlib import asynccontextmanager
from datetime import timedelta
from pathlib import Path

from ..archives import extract_archive, locate_executable, single_top_level_directory
from ..assets import ASSET_SPECS, AssetKind
from ..config import ProvisionConfig
from ..constants import EXECUTABLE_NAME, LINTER_DOWNLOAD_URL, LINTER_RELEASES_API, SOURCE_ARCHIVE_URL
from ..errors import ProvisioningError
from ..filesystem import atomic_replace_file, best_effort_cleanup, make_executable, swap_directory
from ..http import Fetcher
from ..logging import get_logger
from ..metadata import MetadataStore, is_check_due, now_ms
from ..platform import PlatformTarget, resolve_target
from .locking import AssetLock
from .updates import UpdateOffer, is_newer

_LOGGER = get_logger(__name__)

UpdateCallback = Callable[[UpdateOffer], Awaitable[bool]]


class DependencyProvisioner:
    """Own the managed data directory and every asset inside it.

    Instances hold all state explicitly (configuration, HTTP client, metadata
    store, clock) so tests can build isolated provisioners over ``tmp_path``.

    Args:
        config: Provisioning settings.
        http: Fetch layer used for release metadata and archives.
        store: Metadata store; defaults to one rooted at ``config.data_dir``.
        clock: Epoch-seconds clock, injectable for freshness tests.
        on_update: Coroutine asked whether to apply a newer executable release.
            Without one, offers are logged and declined.
        target: Download target override; defaults to the host platform.
    """

    def __init__(
        self,
        config: ProvisionConfig,
        *,
        http: Fetcher,
        store: MetadataStore | None = None,
        clock: Callable[[], float] = time.time,
        on_update: UpdateCallback | None = None,
        target: PlatformTarget | None = None,
    ) -> None:
        self.config = config
        self.data_dir = config.data_dir
        self._http = http
        self._clock = clock
        self._store = store or MetadataStore(config.data_dir, clock=clock)
        self._on_update = on_update
        self._target = target
        self._lock = AssetLock(config.data_dir) if config.use_file_lock else None
        self.refresh_errors: dict[AssetKind, ProvisioningError] = {}

    @property
    def store(self) -> MetadataStore:
        """Return the metadata store backing this provisioner."""

        return self._store

    def install_path(self, kind: AssetKind) -> Path:
        """Return the canonical on-disk location of ``kind``."""

        name = ASSET_SPECS[kind].install_name
        if kind is AssetKind.EXECUTABLE:
            if self._target is not None:
                name += self._target.executable_suffix
            elif os.name == "nt":
                name += ".exe"
        return self.data_dir / name

    def is_installed(self, kind: AssetKind) -> bool:
        """Return ``True`` when the asset is physically present on disk."""

        path = self.install_path(kind)
        return path.is_dir() if kind.is_corpus else path.is_file()

    def installed_version(self, kind: AssetKind) -> str | None:
        """Return the recorded version (release tag or source ref) of ``kind``."""

        metadata = self._store.load(kind)
        return metadata.version if metadata is not None else None

    def refresh_interval(self, kind: AssetKind) -> timedelta:
        """Return the freshness interval governing ``kind``."""

        if kind.is_corpus:
            return self.config.corpus_refresh_interval
        return self.config.executable_refresh_interval

    def is_refresh_due(self, kind: AssetKind) -> bool:
        """Return ``True`` when the stored check for ``kind`` is stale or missing."""

        return is_check_due(self._store.load(kind), self.refresh_interval(kind), now_ms(self._clock))

    async def ensure(self, kind: AssetKind, *, force: bool = False) -> Path:
        """Return the path of ``kind``, installing or refreshing it as needed.

        A configured custom executable path is returned unchanged without any
        network or filesystem activity. An asset missing from disk is always
        reinstalled, whatever its metadata says.

        Args:
            kind: Asset to ensure.
            force: Reinstall even when the asset is present.

        Returns:
            Path: Location of the executable or corpus directory.

        Raises:
            ProvisioningError: If a required install fails.
        """

        if kind is AssetKind.EXECUTABLE and self.config.custom_executable_path is not None:
            _LOGGER.info("Using custom binary path: %s", self.config.custom_executable_path)
            return self.config.custom_executable_path

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ProvisioningError(f"Cannot create data directory {self.data_dir}: {exc}", target=self.data_dir) from exc

        async with self._guard(kind):
            path = self.install_path(kind)
            if self.is_installed(kind) and not force:
                if self.is_refresh_due(kind):
                    await self._refresh(kind)
                return path
            _LOGGER.info("%s not found or reinstall requested; installing", kind.value)
            await self._install(kind)
            return path

    async def ensure_all(self, *, force: bool = False) -> dict[AssetKind, Path]:
        """Ensure every managed asset concurrently and return their paths."""

        kinds = tuple(AssetKind)
        paths = await asyncio.gather(*(self.ensure(kind, force=force) for kind in kinds))
        return dict(zip(kinds, paths, strict=True))

    async def check_for_update(self, kind: AssetKind = AssetKind.EXECUTABLE) -> UpdateOffer | None:
        """Compare the installed executable with the latest release.

        When already current, the check timestamp is advanced and ``None``
        returned; otherwise an :class:`UpdateOffer` is returned untouched for
        the caller to accept or decline.

        Raises:
            ProvisioningError: If the release metadata cannot be fetched.
        """

        if kind.is_corpus:
            raise ValueError("corpora track a fixed ref and have no release versions")
        latest = await self._latest_tag()
        installed = self.installed_version(kind)
        if installed is not None and not is_newer(installed, latest):
            _LOGGER.info("%s is up to date (%s)", kind.value, installed)
            self._store.record(kind, version=installed, path=self.install_path(kind))
            return None
        return UpdateOffer(kind=kind, installed=installed, latest=latest)

    async def apply_update(self, offer: UpdateOffer) -> Path:
        """Install the release named by ``offer`` and return the executable path."""

        async with self._guard(offer.kind):
            await self._install_executable(tag=offer.latest)
        return self.install_path(offer.kind)

    def decline_update(self, offer: UpdateOffer) -> None:
        """Advance the check timestamp so ``offer`` is not repeated this interval."""

        self._store.record(
            offer.kind,
            version=offer.installed or "unknown",
            path=self.install_path(offer.kind),
        )

    @asynccontextmanager
    async def _guard(self, kind: AssetKind) -> AsyncIterator[None]:
        if self._lock is None:
            yield
            return
        async with self._lock.hold(kind):
            yield

    async def _refresh(self, kind: AssetKind) -> None:
        """Run a due refresh; failures keep the installed copy and are remembered."""

        try:
            if kind.is_corpus:
                await self._install_corpus(kind)
            else:
                await self._refresh_executable(kind)
        except ProvisioningError as exc:
            _LOGGER.warning("Update check for %s failed: %s", kind.value, exc)
            self.refresh_errors[kind] = exc
        else:
            self.refresh_errors.pop(kind, None)

    async def _refresh_executable(self, kind: AssetKind) -> None:
        offer = await self.check_for_update(kind)
        if offer is None:
            return
        _LOGGER.info(offer.describe())
        accepted = await self._on_update(offer) if self._on_update is not None else False
        if accepted:
            await self._install_executable(tag=offer.latest)
        else:
            self.decline_update(offer)

    async def _install(self, kind: AssetKind) -> None:
        if kind.is_corpus:
            await self._install_corpus(kind)
        else:
            await self._install_executable()

    async def _latest_tag(self) -> str:
        payload = await self._http.get_json(LINTER_RELEASES_API)
        tag = payload.get("tag_name") if isinstance(payload, Mapping) else None
        if not isinstance(tag, str) or not tag.strip():
            raise ProvisioningError("release metadata did not include a tag_name", target=LINTER_RELEASES_API)
        return tag.strip()

    def _download_url(self, tag: str) -> str:
        target = self._target or resolve_target()
        return LINTER_DOWNLOAD_URL.format(
            tag=tag,
            version=tag.removeprefix("v"),
            os=target.os,
            arch=target.arch,
        )

    def _staging_dir(self, kind: AssetKind) -> Path:
        try:
            return Path(tempfile.mkdtemp(prefix=f".{kind.value}-staging-", dir=self.data_dir))
        except OSError as exc:
            raise ProvisioningError(f"Cannot create staging directory in {self.data_dir}: {exc}", target=self.data_dir) from exc

    async def _install_executable(self, *, tag: str | None = None) -> None:
        kind = AssetKind.EXECUTABLE
        tag = tag or await self._latest_tag()
        url = self._download_url(tag)
        destination = self.install_path(kind)
        staging = self._staging_dir(kind)
        try:
            archive = await self._http.download(url, staging / f"{EXECUTABLE_NAME}.tar.gz")
            extracted = await asyncio.to_thread(extract_archive, archive, staging / "extracted")
            binary = locate_executable(extracted, destination.name)
            try:
                make_executable(binary)
                await asyncio.to_thread(atomic_replace_file, binary, destination)
            except OSError as exc:
                raise ProvisioningError(f"Failed to install {destination}: {exc}", target=destination) from exc
        finally:
            best_effort_cleanup(staging)
        self._store.record(kind, version=tag, path=destination)
        _LOGGER.info("Installed %s %s at %s", kind.value, tag, destination)

    async def _install_corpus(self, kind: AssetKind) -> None:
        spec = ASSET_SPECS[kind]
        if spec.source is None or spec.ref is None:
            raise ProvisioningError(f"{kind.value} has no source archive configured")
        url = SOURCE_ARCHIVE_URL.format(source=spec.source, ref=spec.ref)
        destination = self.install_path(kind)
        staging = self._staging_dir(kind)
        try:
            archive = await self._http.download(url, staging / f"{spec.install_name}.zip")
            extracted = await asyncio.to_thread(extract_archive, archive, staging / "extracted")
            tree = single_top_level_directory(extracted)
            try:
                await asyncio.to_thread(swap_directory, tree, destination)
            except OSError as exc:
                raise ProvisioningError(f"Failed to install {destination}: {exc}", target=destination) from exc
        finally:
            best_effort_cleanup(staging)
        self._store.record(kind, version=spec.ref, path=destination, source=spec.source)
        _LOGGER.info("Installed %s (%s) at %s", kind.value, spec.ref, destination)


__all__ = ["DependencyProvisioner", "UpdateCallback"]
