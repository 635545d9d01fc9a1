"""Platform detection and mapping."""
import platform
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from mcp_istio.errors import UnsupportedPlatformError

BINARY_NAME = "istioctl"


@dataclass(frozen=True)
class PlatformSpec:
    """Release conventions for one operating system."""
    os_name: str
    archive_template: str
    archive_format: str
    exe_suffix: str = ""
    executable_mode: Optional[int] = 0o750  # None: platform has no exec bits

    def archive_name(self, version: str, arch: str) -> str:
        return self.archive_template.format(
            name=BINARY_NAME, version=version, os=self.os_name, arch=arch
        )

    def executable_name(self, name: str) -> str:
        return f"{name}{self.exe_suffix}"


PLATFORM_SPECS: Dict[str, PlatformSpec] = {
    "darwin": PlatformSpec(
        os_name="darwin",
        archive_template="{name}-{version}-osx.tar.gz",
        archive_format="tar.gz",
    ),
    "linux": PlatformSpec(
        os_name="linux",
        archive_template="{name}-{version}-{os}-{arch}.tar.gz",
        archive_format="tar.gz",
    ),
    "windows": PlatformSpec(
        os_name="windows",
        archive_template="{name}-{version}-win.zip",
        archive_format="zip",
        exe_suffix=".exe",
        executable_mode=None,
    ),
}

# Machine names as reported by the host, mapped to release architecture names
ARCH_MAPPINGS = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "armv7",
    "armv7": "armv7",
}


def get_platform_info() -> Tuple[str, str]:
    """Get (os_name, arch) for the current host."""
    system = platform.system().lower()
    machine = platform.machine().lower()
    return system, ARCH_MAPPINGS.get(machine, machine)


def get_platform_spec(os_name: str, arch: str = "") -> PlatformSpec:
    """Look up release conventions for an operating system."""
    spec = PLATFORM_SPECS.get(os_name)
    if spec is None:
        raise UnsupportedPlatformError(os_name, arch)
    return spec
