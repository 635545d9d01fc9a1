"""Adapter configuration."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

import appdirs

from mcp_istio.errors import MeshConfigError

APP_NAME = "mcp-istio"
DEFAULT_RELEASE_URL = "https://github.com/istio/istio/releases/download"

ENV_ROOT = "MCP_ISTIO_ROOT"
ENV_RELEASE_URL = "MCP_ISTIO_RELEASE_URL"
ENV_KUBECTL = "MCP_ISTIO_KUBECTL"
ENV_LOG_LEVEL = "MCP_ISTIO_LOG_LEVEL"


@dataclass(frozen=True)
class AdapterConfig:
    """Adapter configuration"""
    root_path: Path
    release_base_url: str = DEFAULT_RELEASE_URL
    kubectl_binary: str = "kubectl"
    log_level: str = "INFO"

    @property
    def bin_path(self) -> Path:
        return self.root_path / "bin"


def default_root_path() -> Path:
    return Path(appdirs.user_config_dir(APP_NAME))


def load_config(env: Optional[Mapping[str, str]] = None) -> AdapterConfig:
    """Build the adapter configuration from environment variables.

    Raises:
        MeshConfigError: If a value is present but unusable
    """
    env = os.environ if env is None else env

    root = env.get(ENV_ROOT) or ""
    root_path = Path(root).expanduser() if root else default_root_path()

    release_url = (env.get(ENV_RELEASE_URL) or DEFAULT_RELEASE_URL).rstrip("/")
    if not release_url.startswith(("http://", "https://")):
        raise MeshConfigError(f"{ENV_RELEASE_URL} must be an http(s) URL: {release_url}")

    log_level = (env.get(ENV_LOG_LEVEL) or "INFO").upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise MeshConfigError(f"unknown log level: {log_level}")

    return AdapterConfig(
        root_path=root_path,
        release_base_url=release_url,
        kubectl_binary=env.get(ENV_KUBECTL) or "kubectl",
        log_level=log_level,
    )
