"""Release URLs and downloads for istioctl."""
import aiohttp

from mcp_istio.binaries.platforms import PlatformSpec
from mcp_istio.config import DEFAULT_RELEASE_URL
from mcp_istio.errors import DownloadError
from mcp_istio.logging import get_logger

logger = get_logger(__name__)

# GitHub API constants
GITHUB_API_BASE = "https://api.github.com"
ISTIO_OWNER = "istio"
ISTIO_REPO = "istio"


def build_release_url(
    spec: PlatformSpec, arch: str, version: str, base_url: str = DEFAULT_RELEASE_URL
) -> str:
    """Build the release archive URL for a platform, architecture and version."""
    return f"{base_url.rstrip('/')}/{version}/{spec.archive_name(version, arch)}"


async def download_release(
    session: aiohttp.ClientSession, url: str
) -> aiohttp.ClientResponse:
    """GET a release archive.

    The caller owns the returned response and must close it.

    Raises:
        DownloadError: On network failure or a non-200 status
    """
    logger.info({"event": "release_download_start", "url": url})

    try:
        response = await session.get(url)
    except aiohttp.ClientError as e:
        logger.error({"event": "release_download_failed", "url": url, "error": str(e)})
        raise DownloadError(f"network error: {e}", url) from e

    if response.status != 200:
        response.release()
        logger.error(
            {
                "event": "release_download_failed",
                "url": url,
                "status": response.status,
                "reason": response.reason,
            }
        )
        raise DownloadError(f"bad status: {response.status} {response.reason}", url)

    return response


async def get_latest_release(session: aiohttp.ClientSession) -> str:
    """Fetch the latest istio release version."""
    url = f"{GITHUB_API_BASE}/repos/{ISTIO_OWNER}/{ISTIO_REPO}/releases/latest"
    try:
        async with session.get(url) as response:
            response.raise_for_status()
            data = await response.json()
    except aiohttp.ClientError as e:
        raise DownloadError(f"latest release lookup failed: {e}", url) from e

    try:
        version = data["tag_name"].lstrip("v")
    except (KeyError, TypeError, AttributeError) as e:
        raise DownloadError("latest release payload has no tag_name", url) from e
    logger.debug({"event": "latest_release_resolved", "version": version})
    return version
