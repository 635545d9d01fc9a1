"""MCP server managing istio through istioctl."""

from mcp_istio.types import ApplyOptions, Host, OperationResult, Status
from mcp_istio.install import install_istio, apply_sample_app
from mcp_istio.errors import (
    IstioAdapterError,
    MeshConfigError,
    DownloadError,
    ArchiveError,
    InstallBinaryError,
    FetchManifestError,
    InstallIstioError,
)

__version__ = "0.1.0"

__all__ = [
    # Types
    "ApplyOptions",
    "Host",
    "OperationResult",
    "Status",

    # Operations
    "install_istio",
    "apply_sample_app",

    # Error types
    "IstioAdapterError",
    "MeshConfigError",
    "DownloadError",
    "ArchiveError",
    "InstallBinaryError",
    "FetchManifestError",
    "InstallIstioError",
]
