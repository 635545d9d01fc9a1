"""Archive extraction for release downloads.

Entry names are trusted: archives come from istio's own releases, so names
are joined to the destination without traversal checks. Revisit before
extracting archives from any other source.
"""
import io
import os
import tarfile
import zipfile
import zlib
from pathlib import Path
from typing import BinaryIO, Callable, Dict

from mcp_istio.errors import ArchiveError
from mcp_istio.logging import get_logger

logger = get_logger(__name__)

CHUNK_SIZE = 64 * 1024
DIR_MODE = 0o750

READ_ERRORS = (tarfile.TarError, zipfile.BadZipFile, zlib.error, EOFError, OSError)


def _copy_entry(archive_format: str, source: BinaryIO, out: BinaryIO) -> int:
    """Copy one entry, telling read failures apart from write failures."""
    copied = 0
    while True:
        try:
            chunk = source.read(CHUNK_SIZE)
        except READ_ERRORS as e:
            raise ArchiveError(archive_format, "read", str(e)) from e
        if not chunk:
            return copied
        try:
            out.write(chunk)
        except OSError as e:
            raise ArchiveError(archive_format, "write", str(e)) from e
        copied += len(chunk)


def _make_dir(archive_format: str, target: Path, mode: int) -> None:
    try:
        os.makedirs(target, mode, exist_ok=True)
    except OSError as e:
        raise ArchiveError(archive_format, "write", str(e)) from e


def extract_tar_gz(location: Path, stream: BinaryIO) -> None:
    """Unpack a gzip compressed tar stream under location, entry by entry."""
    try:
        archive = tarfile.open(fileobj=stream, mode="r|gz")
    except (tarfile.TarError, EOFError, OSError) as e:
        raise ArchiveError("tar.gz", "decompress", str(e)) from e

    with archive:
        while True:
            try:
                member = archive.next()
            except (tarfile.TarError, EOFError, zlib.error, OSError) as e:
                raise ArchiveError("tar.gz", "read", str(e)) from e
            if member is None:
                break

            target = Path(location) / member.name

            if member.isdir():
                _make_dir("tar.gz", target, DIR_MODE)
            elif member.isreg():
                source = archive.extractfile(member)
                try:
                    out = open(target, "wb")
                except OSError as e:
                    raise ArchiveError("tar.gz", "write", str(e)) from e
                with out:
                    _copy_entry("tar.gz", source, out)
            else:
                raise ArchiveError(
                    "tar.gz",
                    "entry",
                    f"unsupported entry type {member.type!r} for {member.name}",
                )

            logger.debug({"event": "tar_entry_extracted", "entry": member.name})


def _zip_mode(info: zipfile.ZipInfo) -> int:
    mode = (info.external_attr >> 16) & 0o777
    if mode:
        return mode
    # Archives built on Windows carry no unix mode bits
    return 0o777 if info.is_dir() else 0o666


def extract_zip(location: Path, stream: BinaryIO) -> None:
    """Unpack a zip stream under location.

    The whole archive is read into memory first since zip needs random access.
    """
    try:
        data = stream.read()
    except OSError as e:
        raise ArchiveError("zip", "read", str(e)) from e

    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except (zipfile.BadZipFile, OSError) as e:
        raise ArchiveError("zip", "decompress", str(e)) from e

    with archive:
        for info in archive.infolist():
            target = Path(location) / info.filename
            mode = _zip_mode(info)

            if info.is_dir():
                _make_dir("zip", target, mode)
                continue

            try:
                source = archive.open(info)
            except (zipfile.BadZipFile, NotImplementedError, RuntimeError) as e:
                raise ArchiveError("zip", "read", str(e)) from e

            with source:
                try:
                    fd = os.open(
                        target,
                        os.O_WRONLY | os.O_CREAT | os.O_TRUNC | getattr(os, "O_BINARY", 0),
                        mode,
                    )
                except OSError as e:
                    raise ArchiveError("zip", "write", str(e)) from e
                with os.fdopen(fd, "wb") as out:
                    _copy_entry("zip", source, out)

            logger.debug({"event": "zip_entry_extracted", "entry": info.filename})


ARCHIVE_HANDLERS: Dict[str, Callable[[Path, BinaryIO], None]] = {
    "tar.gz": extract_tar_gz,
    "zip": extract_zip,
}


def extract_archive(archive_format: str, location: Path, stream: BinaryIO) -> None:
    """Dispatch extraction on the archive format."""
    handler = ARCHIVE_HANDLERS.get(archive_format)
    if not handler:
        raise ArchiveError(archive_format, "decompress", "unsupported archive format")

    logger.debug(
        {"event": "extract_archive", "format": archive_format, "dest": str(location)}
    )
    handler(location, stream)
