"""Tests for archive extraction."""
import io
import os
import stat
import tarfile
from pathlib import Path

import pytest

from mcp_istio.binaries.archives import extract_archive, extract_tar_gz, extract_zip
from mcp_istio.errors import ArchiveError

from conftest import build_tar_gz, build_zip, posix_only

CONTENT = b"\x7fELF fake istioctl binary\x00\x01\x02"


def snapshot(root: Path) -> dict:
    """Map relative paths to file bytes, or None for directories."""
    return {
        str(p.relative_to(root)): (None if p.is_dir() else p.read_bytes())
        for p in sorted(root.rglob("*"))
    }


def test_extract_tar_gz(tmp_path):
    archive = build_tar_gz({"istio-1.18.0/istioctl": CONTENT}, dirs=("istio-1.18.0",))

    extract_tar_gz(tmp_path, io.BytesIO(archive))

    assert snapshot(tmp_path) == {
        "istio-1.18.0": None,
        os.path.join("istio-1.18.0", "istioctl"): CONTENT,
    }


@posix_only
def test_extract_tar_gz_directory_mode(tmp_path):
    archive = build_tar_gz({}, dirs=("bin",))

    extract_tar_gz(tmp_path, io.BytesIO(archive))

    mode = stat.S_IMODE((tmp_path / "bin").stat().st_mode)
    assert mode & ~0o750 == 0


def test_extract_zip(tmp_path):
    archive = build_zip({"istio-1.18.0/istioctl.exe": CONTENT}, dirs=("istio-1.18.0",))

    extract_zip(tmp_path, io.BytesIO(archive))

    assert (tmp_path / "istio-1.18.0").is_dir()
    assert (tmp_path / "istio-1.18.0" / "istioctl.exe").read_bytes() == CONTENT


@posix_only
def test_extract_zip_keeps_entry_mode(tmp_path):
    archive = build_zip({"istioctl": CONTENT})

    extract_zip(tmp_path, io.BytesIO(archive))

    assert os.access(tmp_path / "istioctl", os.X_OK)


def test_tar_and_zip_produce_the_same_tree(tmp_path):
    files = {"pkg/istioctl": CONTENT}
    tar_root = tmp_path / "tar"
    zip_root = tmp_path / "zip"
    tar_root.mkdir()
    zip_root.mkdir()

    extract_archive("tar.gz", tar_root, io.BytesIO(build_tar_gz(files, dirs=("pkg",))))
    extract_archive("zip", zip_root, io.BytesIO(build_zip(files, dirs=("pkg",))))

    assert snapshot(tar_root) == snapshot(zip_root)
    assert len(snapshot(tar_root)) == 2


def test_extract_tar_gz_overwrites_existing_file(tmp_path):
    (tmp_path / "istioctl").write_bytes(b"old and much longer content than the new one")

    extract_tar_gz(tmp_path, io.BytesIO(build_tar_gz({"istioctl": b"new"})))

    assert (tmp_path / "istioctl").read_bytes() == b"new"


def test_extract_tar_gz_rejects_links(tmp_path):
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tf:
        info = tarfile.TarInfo("istioctl-link")
        info.type = tarfile.SYMTYPE
        info.linkname = "istioctl"
        tf.addfile(info)

    with pytest.raises(ArchiveError, match="unsupported entry type") as exc_info:
        extract_tar_gz(tmp_path, io.BytesIO(buf.getvalue()))

    assert exc_info.value.step == "entry"
    assert not (tmp_path / "istioctl-link").exists()


def test_extract_tar_gz_not_gzip(tmp_path):
    with pytest.raises(ArchiveError) as exc_info:
        extract_tar_gz(tmp_path, io.BytesIO(b"definitely not a gzip stream"))

    assert exc_info.value.step == "decompress"
    assert exc_info.value.details["format"] == "tar.gz"


def test_extract_tar_gz_missing_parent_is_write_failure(tmp_path):
    archive = build_tar_gz({"missing/istioctl": CONTENT})

    with pytest.raises(ArchiveError) as exc_info:
        extract_tar_gz(tmp_path, io.BytesIO(archive))

    assert exc_info.value.step == "write"


def test_extract_zip_not_a_zip(tmp_path):
    with pytest.raises(ArchiveError) as exc_info:
        extract_zip(tmp_path, io.BytesIO(b"PK but not really"))

    assert exc_info.value.step == "decompress"
    assert exc_info.value.details["format"] == "zip"


def test_extract_archive_unknown_format(tmp_path):
    with pytest.raises(ArchiveError, match="unsupported archive format"):
        extract_archive("rar", tmp_path, io.BytesIO(b""))
