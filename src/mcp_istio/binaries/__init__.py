"""istioctl binary management."""
from mcp_istio.binaries.resolver import get_executable, host_from_config
from mcp_istio.binaries.releases import build_release_url, download_release
from mcp_istio.binaries.installer import install_binary, extract_and_clean
from mcp_istio.binaries.archives import extract_archive, extract_tar_gz, extract_zip

__all__ = [
    "get_executable",
    "host_from_config",
    "build_release_url",
    "download_release",
    "install_binary",
    "extract_and_clean",
    "extract_archive",
    "extract_tar_gz",
    "extract_zip",
]
