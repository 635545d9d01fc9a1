"""Installing a downloaded istioctl release."""
import os
import shutil
import tempfile
from pathlib import Path

import aiohttp

from mcp_istio.binaries.archives import DIR_MODE, extract_archive
from mcp_istio.binaries.platforms import BINARY_NAME, PlatformSpec
from mcp_istio.errors import ArchiveError, DownloadError, InstallBinaryError
from mcp_istio.logging import get_logger

logger = get_logger(__name__)

CHUNK_SIZE = 8192


async def install_binary(
    location: Path, spec: PlatformSpec, response: aiohttp.ClientResponse
) -> None:
    """Unpack a release archive response into location.

    The response is closed on every path out of this function. A partially
    unpacked location is removed when the download or extraction fails.

    Raises:
        InstallBinaryError: If location cannot be created or extraction fails
        DownloadError: If the response body breaks off while being read
    """
    try:
        try:
            os.makedirs(location, DIR_MODE, exist_ok=True)
        except OSError as e:
            raise InstallBinaryError(str(location), str(e)) from e

        try:
            with tempfile.TemporaryFile() as spool:
                try:
                    async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                        spool.write(chunk)
                except aiohttp.ClientError as e:
                    raise DownloadError(f"network error: {e}", str(response.url)) from e
                spool.seek(0)

                logger.debug(
                    {
                        "event": "archive_downloaded",
                        "location": str(location),
                        "size": os.fstat(spool.fileno()).st_size,
                    }
                )
                extract_archive(spec.archive_format, location, spool)
        except (DownloadError, ArchiveError) as e:
            logger.error({"event": "install_binary_failed", "location": str(location), "error": str(e)})
            shutil.rmtree(location, ignore_errors=True)
            if isinstance(e, ArchiveError):
                raise InstallBinaryError(str(location), str(e)) from e
            raise
    finally:
        response.close()


def extract_and_clean(location: Path, bin_name: str, spec: PlatformSpec) -> Path:
    """Turn location/bin_name/istioctl into the executable location/bin_name.

    Filesystem errors propagate unchanged.
    """
    location = Path(location)
    packaged_name = spec.executable_name(BINARY_NAME)
    extracted_dir = location / bin_name

    (extracted_dir / packaged_name).replace(location / packaged_name)
    shutil.rmtree(extracted_dir)

    final_path = location / spec.executable_name(bin_name)
    (location / packaged_name).replace(final_path)

    if spec.executable_mode is not None:
        final_path.chmod(spec.executable_mode)

    logger.info({"event": "binary_installed", "path": str(final_path)})
    return final_path
