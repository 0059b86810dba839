"""Errors raised by the record audit suite.

    AuditError
    ├── DeviceConnectionError
    │   ├── DeviceNotFoundError
    │   └── InvalidDeviceIdError
    ├── AppNotInstalledError
    ├── LookupFailure
    │   ├── ElementNotFoundError
    │   └── ContainerNotFoundError
    ├── ReferenceDataError
    └── ValidationFailedError

Every error carries a ``details`` mapping that ends up in the JSON report.
"""
from typing import Any, Dict, Optional


class AuditError(Exception):
    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        return {"error": type(self).__name__, "message": self.message, "details": self.details}


class DeviceConnectionError(AuditError):
    """The device could not be reached or no session could be opened."""

    def __init__(self, device_id: str, reason: Optional[str] = None, message: Optional[str] = None):
        if message is None:
            message = f"Cannot connect to {device_id}"
            if reason:
                message = f"{message}: {reason}"
        super().__init__(message, device_id=device_id, reason=reason)
        self.device_id = device_id


class DeviceNotFoundError(DeviceConnectionError):
    def __init__(self, device_id: Optional[str] = None):
        reason = f"{device_id} is not attached" if device_id else "no device attached"
        super().__init__(device_id or "default", reason)


class InvalidDeviceIdError(DeviceConnectionError):
    """Serial rejected before it could reach an adb command line."""

    def __init__(self, device_id: str):
        super().__init__(
            device_id,
            "allowed characters are [a-zA-Z0-9._:-]",
            message=f"Invalid device_id format: {device_id!r}",
        )


class AppNotInstalledError(AuditError):
    def __init__(self, package: str):
        super().__init__(f"{package} is not installed on the device", package=package)
        self.package = package


class LookupFailure(AuditError):
    """Something expected on screen could not be located."""


class ElementNotFoundError(LookupFailure):
    def __init__(self, selector: str, timeout: Optional[float] = None):
        message = f"No displayed element for {selector}"
        if timeout is not None:
            message = f"{message} after {timeout:.1f}s"
        super().__init__(message, selector=selector, timeout=timeout)
        self.selector = selector


class ContainerNotFoundError(LookupFailure):
    def __init__(self, selector: str):
        super().__init__(f"Scroll container missing: {selector}", selector=selector)
        self.selector = selector


class ReferenceDataError(AuditError):
    def __init__(self, url: str, reason: str):
        super().__init__(f"Reference data unavailable from {url}: {reason}", url=url, reason=reason)
        self.url = url


class ValidationFailedError(AuditError):
    """Raised at the end of a run when any record failed reconciliation."""

    def __init__(self, failures: list):
        summary = [
            f"Menu: {f.menu_name} | Record: {f.record_name} | Reasons: {'; '.join(f.reasons)}"
            for f in failures
        ]
        super().__init__(f"{len(failures)} record(s) failed validation", failures=summary)
        self.failures = failures
