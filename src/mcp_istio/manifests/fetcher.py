"""Producing istio manifests with istioctl."""
from typing import List, Optional

import aiohttp

from mcp_istio.binaries.releases import get_latest_release
from mcp_istio.binaries.resolver import get_executable
from mcp_istio.config import DEFAULT_RELEASE_URL
from mcp_istio.errors import FetchManifestError, IstioAdapterError
from mcp_istio.logging import get_logger
from mcp_istio.types import Host
from mcp_istio.utils.process import CommandRunner, run_command

logger = get_logger(__name__)

INSTALL_ARGS = ["install", "--set", "profile=demo", "-y"]
UNINSTALL_ARGS = ["x", "uninstall", "--purge", "-y"]

LATEST = "latest"


def manifest_args(delete: bool) -> List[str]:
    return list(UNINSTALL_ARGS if delete else INSTALL_ARGS)


async def resolve_release(version: str, session: Optional[aiohttp.ClientSession]) -> str:
    """Turn the ``latest`` keyword into a concrete release version."""
    if version != LATEST:
        return version
    if session is not None:
        return await get_latest_release(session)
    async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=None)) as session:
        return await get_latest_release(session)


async def fetch_manifest(
    version: str,
    delete: bool,
    host: Host,
    run: CommandRunner = run_command,
    session: Optional[aiohttp.ClientSession] = None,
    base_url: str = DEFAULT_RELEASE_URL,
) -> str:
    """Run istioctl for the version and return its stdout as the manifest.

    Raises:
        FetchManifestError: If no executable can be resolved, it cannot be
            launched, or it exits non-zero
    """
    if not version:
        raise FetchManifestError("empty release version")

    try:
        release = await resolve_release(version, session)
        executable = await get_executable(release, host, session=session, base_url=base_url)
    except (IstioAdapterError, OSError) as e:
        raise FetchManifestError(str(e)) from e

    args = manifest_args(delete)
    logger.info({"event": "fetching_manifest", "executable": str(executable), "args": args})

    try:
        returncode, stdout, stderr = await run(str(executable), *args)
    except OSError as e:
        raise FetchManifestError(f"failed to launch {executable}: {e}") from e

    if returncode != 0:
        logger.error({"event": "fetch_manifest_failed", "returncode": returncode, "stderr": stderr})
        raise FetchManifestError(f"istioctl exited with code {returncode}", stderr)

    return stdout
