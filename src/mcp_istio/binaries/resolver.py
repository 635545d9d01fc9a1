"""Locating or acquiring a usable istioctl executable."""
import os
import shutil
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import aiohttp

from mcp_istio.binaries.installer import extract_and_clean, install_binary
from mcp_istio.binaries.platforms import (
    BINARY_NAME,
    PLATFORM_SPECS,
    get_platform_info,
    get_platform_spec,
)
from mcp_istio.binaries.releases import build_release_url, download_release
from mcp_istio.config import DEFAULT_RELEASE_URL, AdapterConfig
from mcp_istio.logging import get_logger
from mcp_istio.types import Host

logger = get_logger(__name__)

Lookup = Callable[[], Optional[Path]]


def host_from_config(config: AdapterConfig) -> Host:
    """Describe the current host for the resolver."""
    os_name, arch = get_platform_info()
    return Host(
        root_path=config.root_path,
        os_name=os_name,
        arch=arch,
        search_path=os.environ.get("PATH"),
    )


def versioned_name(release: str) -> str:
    return f"{BINARY_NAME}-{release}"


def find_on_search_path(name: str, search_path: Optional[str]) -> Optional[Path]:
    """Look a command up on a PATH style search path."""
    found = shutil.which(name, path=search_path)
    return Path(found) if found else None


def find_in_directory(directory: Path, name: str) -> Optional[Path]:
    candidate = directory / name
    return candidate if candidate.is_file() else None


def lookup_chain(release: str, host: Host) -> List[Tuple[str, Lookup]]:
    """Ordered lookups for an existing executable; the first hit wins."""
    spec = PLATFORM_SPECS.get(host.os_name)
    local_name = spec.executable_name(versioned_name(release)) if spec else versioned_name(release)

    return [
        ("search_path", lambda: find_on_search_path(BINARY_NAME, host.search_path)),
        (
            "search_path_versioned",
            lambda: find_on_search_path(versioned_name(release), host.search_path),
        ),
        ("root_bin", lambda: find_in_directory(host.bin_path, local_name)),
    ]


async def acquire_executable(
    release: str,
    host: Host,
    session: aiohttp.ClientSession,
    base_url: str = DEFAULT_RELEASE_URL,
) -> Path:
    """Download and install a release into the host's bin directory."""
    spec = get_platform_spec(host.os_name, host.arch)
    bin_name = versioned_name(release)
    url = build_release_url(spec, host.arch, release, base_url)

    response = await download_release(session, url)

    logger.info({"event": "installing_binary", "bin_path": str(host.bin_path), "release": release})
    await install_binary(host.bin_path / bin_name, spec, response)
    return extract_and_clean(host.bin_path, bin_name, spec)


async def get_executable(
    release: str,
    host: Host,
    session: Optional[aiohttp.ClientSession] = None,
    base_url: str = DEFAULT_RELEASE_URL,
) -> Path:
    """Return a path to istioctl for the release, downloading it if needed.

    Looks for the executable in:
    1. the search path, as ``istioctl``
    2. the search path, as ``istioctl-<release>``
    3. the root config path's ``bin`` directory

    If none of them has it, the release is downloaded from the release host
    and installed in the root config path's ``bin`` directory.

    Raises:
        DownloadError: If the release archive cannot be fetched
        InstallBinaryError: If the archive cannot be unpacked
        OSError: If the unpacked tree cannot be normalized
    """
    for source, lookup in lookup_chain(release, host):
        executable = lookup()
        if executable is not None:
            logger.info({"event": "executable_found", "source": source, "path": str(executable)})
            return executable

    logger.info({"event": "executable_not_found", "release": release, "action": "downloading"})

    if session is not None:
        return await acquire_executable(release, host, session, base_url)

    async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=None)) as session:
        return await acquire_executable(release, host, session, base_url)
