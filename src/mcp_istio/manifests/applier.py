"""Handing manifests to the cluster."""
from typing import List, Protocol

from mcp_istio.errors import ClusterApplyError
from mcp_istio.logging import get_logger
from mcp_istio.types import ApplyOptions
from mcp_istio.utils.process import CommandRunner, run_command

logger = get_logger(__name__)


class ClusterClient(Protocol):
    """Anything that can apply or delete raw manifests on a cluster."""

    async def apply_manifest(self, contents: bytes, options: ApplyOptions) -> None:
        ...


class KubectlClient:
    """Cluster client piping manifests through kubectl."""

    def __init__(self, kubectl: str = "kubectl", run: CommandRunner = run_command):
        self.kubectl = kubectl
        self.run = run

    def command(self, options: ApplyOptions) -> List[str]:
        if options.delete:
            args = [self.kubectl, "delete", "-f", "-", "--ignore-not-found=true"]
        else:
            args = [self.kubectl, "apply", "-f", "-"]
        if options.namespace:
            args.extend(["-n", options.namespace])
        return args

    async def apply_manifest(self, contents: bytes, options: ApplyOptions) -> None:
        operation = "delete" if options.delete else "apply"
        returncode, stdout, stderr = await self.run(*self.command(options), input=contents)
        if returncode != 0:
            raise ClusterApplyError(operation, stderr.strip())
        logger.debug({"event": "kubectl_output", "operation": operation, "output": stdout})


async def apply_manifest(
    contents: bytes, delete: bool, namespace: str, cluster: ClusterClient
) -> None:
    """Apply, or delete when asked, a manifest through the cluster client."""
    options = ApplyOptions(namespace=namespace, delete=delete)
    logger.info(
        {
            "event": "applying_manifest",
            "delete": delete,
            "namespace": namespace,
            "size": len(contents),
        }
    )
    await cluster.apply_manifest(contents, options)
