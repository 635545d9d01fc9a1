"""Error handling for the istio adapter."""
import logging
from typing import Any, Dict, Optional

from mcp.types import ErrorData, INTERNAL_ERROR, INVALID_PARAMS

from mcp_istio.logging import log_with_data


def log_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Log an error with context."""
    logger = logger or logging.getLogger("mcp_istio.errors")

    error_info: Dict[str, Any] = {
        "error_type": error.__class__.__name__,
        "error_message": str(error),
    }
    if context:
        error_info["context"] = context
    if isinstance(error, IstioAdapterError):
        error_info["code"] = error.code
        error_info["details"] = error.details

    log_with_data(logger, logging.ERROR, "Istio adapter error occurred", error_info)


class IstioAdapterError(Exception):
    """Base error class for the adapter."""

    def __init__(
        self,
        message: str,
        code: int = INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.details = details or {}

    def to_error_data(self) -> ErrorData:
        """Convert to ErrorData format."""
        return ErrorData(code=self.code, message=str(self), data=self.details)


class MeshConfigError(IstioAdapterError):
    """Adapter configuration could not be retrieved."""

    def __init__(self, reason: str):
        super().__init__(
            f"Error retrieving mesh configuration: {reason}",
            code=INVALID_PARAMS,
            details={"reason": reason},
        )


class DownloadError(IstioAdapterError):
    """Release archive could not be downloaded."""

    def __init__(self, reason: str, url: Optional[str] = None):
        message = f"Error downloading istioctl: {reason}"
        if url:
            message += f" ({url})"
        super().__init__(message, details={"url": url, "reason": reason})


class UnsupportedPlatformError(DownloadError):
    """No release archive is published for the host platform."""

    def __init__(self, os_name: str, arch: str):
        super().__init__(f"unsupported platform {os_name}/{arch}")
        self.details.update({"os": os_name, "arch": arch})


class ArchiveError(IstioAdapterError):
    """Archive extraction failed at a given step."""

    def __init__(self, archive_format: str, step: str, reason: str):
        super().__init__(
            f"Error extracting {archive_format} archive ({step}): {reason}",
            details={"format": archive_format, "step": step, "reason": reason},
        )
        self.step = step


class InstallBinaryError(IstioAdapterError):
    """Downloaded binary could not be installed."""

    def __init__(self, location: str, reason: str):
        super().__init__(
            f"Error installing istioctl in {location}: {reason}",
            details={"location": location, "reason": reason},
        )


class FetchManifestError(IstioAdapterError):
    """Manifest could not be produced by istioctl."""

    def __init__(self, reason: str, stderr: str = ""):
        message = f"Error fetching istio manifest: {reason}"
        if stderr:
            message += f"\n{stderr}"
        super().__init__(message, details={"reason": reason, "stderr": stderr})


class ClusterApplyError(IstioAdapterError):
    """Cluster client rejected a manifest."""

    def __init__(self, operation: str, stderr: str):
        super().__init__(
            f"kubectl {operation} failed: {stderr}",
            details={"operation": operation, "stderr": stderr},
        )


class InstallIstioError(IstioAdapterError):
    """An install or uninstall request failed at a given stage."""

    def __init__(self, stage: str, cause: Exception):
        super().__init__(
            f"Error with istio operation ({stage}): {cause}",
            code=cause.code if isinstance(cause, IstioAdapterError) else INTERNAL_ERROR,
            details={"stage": stage, "cause": cause.__class__.__name__},
        )
        self.stage = stage
        self.__cause__ = cause
