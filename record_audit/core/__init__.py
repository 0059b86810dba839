"""Core modules for the record audit suite."""
from .exceptions import (
    AuditError,
    AppNotInstalledError,
    ContainerNotFoundError,
    DeviceConnectionError,
    DeviceNotFoundError,
    ElementNotFoundError,
    InvalidDeviceIdError,
    LookupFailure,
    ReferenceDataError,
    ValidationFailedError,
)
from .driver import AppState, ElementRef, U2Driver, UIDriver, XmlElementRef
from .device_manager import DeviceInfo, DeviceManager, validate_device_id
from .app import prepare_app

__all__ = [
    # Exceptions
    "AuditError",
    "AppNotInstalledError",
    "ContainerNotFoundError",
    "DeviceConnectionError",
    "DeviceNotFoundError",
    "ElementNotFoundError",
    "InvalidDeviceIdError",
    "LookupFailure",
    "ReferenceDataError",
    "ValidationFailedError",
    # Driver boundary
    "AppState",
    "ElementRef",
    "U2Driver",
    "UIDriver",
    "XmlElementRef",
    # Device Manager
    "DeviceInfo",
    "DeviceManager",
    "validate_device_id",
    "prepare_app",
]
