"""Install and uninstall requests for istio."""
from typing import Optional

import aiohttp

from mcp_istio.binaries.resolver import host_from_config
from mcp_istio.config import AdapterConfig, load_config
from mcp_istio.errors import (
    FetchManifestError,
    InstallIstioError,
    IstioAdapterError,
    MeshConfigError,
    log_error,
)
from mcp_istio.logging import get_logger
from mcp_istio.manifests.applier import ClusterClient, KubectlClient, apply_manifest
from mcp_istio.manifests.fetcher import fetch_manifest
from mcp_istio.manifests.samples import read_sample_manifest
from mcp_istio.types import Host, OperationResult, Status
from mcp_istio.utils.process import CommandRunner, run_command

logger = get_logger(__name__)


def _failed(status: Status, stage: str, error: Exception) -> OperationResult:
    wrapped = InstallIstioError(stage, error)
    log_error(wrapped, {"status": status.value}, logger)
    return OperationResult(status=status, error=wrapped)


async def install_istio(
    delete: bool,
    version: str,
    namespace: str,
    *,
    config: Optional[AdapterConfig] = None,
    cluster: Optional[ClusterClient] = None,
    host: Optional[Host] = None,
    run: CommandRunner = run_command,
    session: Optional[aiohttp.ClientSession] = None,
) -> OperationResult:
    """Install or remove istio.

    Fetches the manifest from istioctl, then hands it to the cluster client.
    On failure the result keeps the initial status and carries the error.
    """
    logger.info(
        {
            "event": "istio_operation_requested",
            "version": version,
            "delete": delete,
            "namespace": namespace,
        }
    )

    # istio's default topology cannot be moved to a custom namespace
    namespace = ""
    logger.debug({"event": "namespace_overridden", "namespace": namespace})

    status = Status.REMOVING if delete else Status.INSTALLING

    try:
        config = config or load_config()
    except MeshConfigError as e:
        return _failed(status, "config", e)

    host = host or host_from_config(config)
    cluster = cluster or KubectlClient(config.kubectl_binary, run)

    try:
        manifest = await fetch_manifest(
            version,
            delete,
            host,
            run=run,
            session=session,
            base_url=config.release_base_url,
        )
    except FetchManifestError as e:
        return _failed(status, "fetch", e)

    try:
        await apply_manifest(manifest.encode(), delete, namespace, cluster)
    except Exception as e:
        return _failed(status, "apply", e)

    return OperationResult(status=Status.REMOVED if delete else Status.INSTALLED)


async def apply_sample_app(
    name: str,
    delete: bool,
    namespace: str,
    *,
    config: Optional[AdapterConfig] = None,
    cluster: Optional[ClusterClient] = None,
) -> OperationResult:
    """Install or remove a bundled sample application in a namespace."""
    status = Status.REMOVING if delete else Status.INSTALLING

    try:
        manifest = read_sample_manifest(name)
    except IstioAdapterError as e:
        return _failed(status, "sample", e)

    if cluster is None:
        try:
            config = config or load_config()
        except MeshConfigError as e:
            return _failed(status, "config", e)
        cluster = KubectlClient(config.kubectl_binary)

    try:
        await apply_manifest(manifest, delete, namespace, cluster)
    except Exception as e:
        return _failed(status, "apply", e)

    return OperationResult(status=Status.REMOVED if delete else Status.INSTALLED)
