# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import io
import os
import stat
import tarfile
import zipfile
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import pytest

from gapi_lint.errors import ProvisioningError


class FakeFetcher:
    """In-memory stand-in for :class:`gapi_lint.http.HttpClient`."""

    def __init__(self) -> None:
        self.json: dict[str, Any] = {}
        self.text: dict[str, str] = {}
        self.files: dict[str, bytes] = {}
        self.calls: list[tuple[str, str]] = []

    async def get_json(self, url: str) -> Any:
        self.calls.append(("json", url))
        if url not in self.json:
            raise ProvisioningError(f"HTTP 404 from {url}", target=url)
        return self.json[url]

    async def get_text(self, url: str) -> str:
        self.calls.append(("text", url))
        if url not in self.text:
            raise ProvisioningError(f"HTTP 404 from {url}", target=url)
        return self.text[url]

    async def download(self, url: str, destination: Path) -> Path:
        self.calls.append(("download", url))
        if url not in self.files:
            raise ProvisioningError(f"HTTP 404 from {url}", target=url)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(self.files[url])
        return destination

    def urls(self, kind: str) -> list[str]:
        return [url for call_kind, url in self.calls if call_kind == kind]


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ``GAPI_HOME`` at an isolated directory."""

    path = tmp_path / "gapi-home"
    monkeypatch.setenv("GAPI_HOME", str(path))
    return path


def build_tar_gz(members: Mapping[str, tuple[bytes, int]]) -> bytes:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as bundle:
        for name, (payload, mode) in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(payload)
            info.mode = mode
            bundle.addfile(info, io.BytesIO(payload))
    return buffer.getvalue()


def build_zip(members: Mapping[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, mode="w") as bundle:
        for name, payload in members.items():
            bundle.writestr(name, payload)
    return buffer.getvalue()


@pytest.fixture
def tar_gz() -> Callable[[Mapping[str, tuple[bytes, int]]], bytes]:
    return build_tar_gz


@pytest.fixture
def zip_bytes() -> Callable[[Mapping[str, bytes]], bytes]:
    return build_zip


@pytest.fixture
def make_script(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a factory writing executable ``/bin/sh`` scripts."""

    if os.name == "nt":
        pytest.skip("shell script stand-ins require a POSIX shell")

    def factory(name: str, body: str) -> Path:
        path = tmp_path / "bin" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return factory
