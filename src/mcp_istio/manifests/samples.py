"""Bundled sample application manifests."""
from importlib import resources
from typing import Dict

from mcp.types import INVALID_PARAMS

from mcp_istio.errors import IstioAdapterError

SAMPLE_APPS: Dict[str, str] = {
    "imagehub": "imagehub/gateway.yaml",
}


def read_sample_manifest(name: str) -> bytes:
    """Load the manifest of a bundled sample application."""
    template = SAMPLE_APPS.get(name)
    if template is None:
        raise IstioAdapterError(
            f"Unknown sample application: {name}",
            code=INVALID_PARAMS,
            details={"name": name, "available": sorted(SAMPLE_APPS)},
        )

    resource = resources.files("mcp_istio") / "templates"
    for part in template.split("/"):
        resource = resource / part
    return resource.read_bytes()
