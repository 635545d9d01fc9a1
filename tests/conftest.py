import io
import os
import sys
import tarfile
import zipfile
from pathlib import Path
from typing import Dict, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from mcp_istio.types import Host

ISTIOCTL_SCRIPT = b"#!/bin/sh\necho istioctl\n"

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="needs POSIX exec bits")


def build_tar_gz(files: Dict[str, bytes], dirs: tuple = ()) -> bytes:
    """Build a tar.gz archive in memory; directories are written first."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tf:
        for name in dirs:
            info = tarfile.TarInfo(name)
            info.type = tarfile.DIRTYPE
            info.mode = 0o755
            tf.addfile(info)
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o755
            tf.addfile(info, io.BytesIO(data))
    return buf.getvalue()


def build_zip(files: Dict[str, bytes], dirs: tuple = ()) -> bytes:
    """Build a zip archive in memory with unix mode bits set."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for name in dirs:
            info = zipfile.ZipInfo(name.rstrip("/") + "/")
            info.external_attr = (0o40755 << 16) | 0x10
            zf.writestr(info, b"")
        for name, data in files.items():
            info = zipfile.ZipInfo(name)
            info.external_attr = 0o100755 << 16
            zf.writestr(info, data)
    return buf.getvalue()


class FakeContent:
    def __init__(self, data: bytes, error: Optional[Exception] = None):
        self.data = data
        self.error = error

    async def iter_chunked(self, size: int):
        for start in range(0, len(self.data), size):
            yield self.data[start:start + size]
        if self.error:
            raise self.error


class FakeResponse:
    """Stand-in for aiohttp.ClientResponse counting close/release calls."""

    def __init__(self, data: bytes = b"", status: int = 200, reason: str = "OK",
                 url: str = "https://example.invalid/archive", error: Optional[Exception] = None):
        self.status = status
        self.reason = reason
        self.url = url
        self.content = FakeContent(data, error)
        self.close_calls = 0
        self.release_calls = 0

    def close(self):
        self.close_calls += 1

    def release(self):
        self.release_calls += 1


def fake_session(response: FakeResponse) -> MagicMock:
    session = MagicMock()
    session.get = AsyncMock(return_value=response)
    return session


def make_executable(directory: Path, name: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_bytes(ISTIOCTL_SCRIPT)
    path.chmod(0o755)
    return path


@pytest.fixture
def search_dir(tmp_path: Path) -> Path:
    """An empty directory used as the whole search path"""
    path = tmp_path / "path"
    path.mkdir()
    return path


@pytest.fixture
def linux_host(tmp_path: Path, search_dir: Path) -> Host:
    """Linux amd64 host with an isolated search path and root"""
    return Host(
        root_path=tmp_path / "root",
        os_name="linux",
        arch="amd64",
        search_path=str(search_dir),
    )


@pytest.fixture
def release_archive() -> bytes:
    """Linux release archive as published: istioctl at the archive root"""
    return build_tar_gz({"istioctl": ISTIOCTL_SCRIPT})


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path: Path):
    """Keep tests away from the real config root"""
    for key in list(os.environ):
        if key.startswith("MCP_ISTIO_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("MCP_ISTIO_ROOT", str(tmp_path / "config-root"))
