"""Core type definitions"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class Status(Enum):
    """Operation status reported to callers"""
    INSTALLING = "installing"
    REMOVING = "removing"
    INSTALLED = "installed"
    REMOVED = "removed"


@dataclass(frozen=True)
class ApplyOptions:
    """Options handed to the cluster client with a manifest"""
    namespace: str = ""
    delete: bool = False


@dataclass(frozen=True)
class OperationResult:
    """Terminal status of a request, or its initial status paired with the error"""
    status: Status
    error: Optional[Exception] = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class Host:
    """Host facts the executable resolver works against.

    ``search_path`` uses the ``os.pathsep`` separated format of ``PATH``;
    ``None`` means the process ``PATH``.
    """
    root_path: Path
    os_name: str
    arch: str
    search_path: Optional[str] = None

    @property
    def bin_path(self) -> Path:
        return self.root_path / "bin"
