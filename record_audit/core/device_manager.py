"""Device discovery and session creation.

A run drives exactly one device through one uiautomator2 session. The
manager lists what ADB reports, checks serials before they reach a shell
command, and hands back a :class:`U2Driver`.
"""

import logging
import re
import subprocess
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import uiautomator2 as u2

from .driver import U2Driver
from .exceptions import (
    DeviceConnectionError,
    DeviceNotFoundError,
    InvalidDeviceIdError,
)

logger = logging.getLogger(__name__)

SERIAL_RE = re.compile(r"^[a-zA-Z0-9._:-]+$")
MAX_SERIAL_LENGTH = 255
ADB_TIMEOUT = 10


@dataclass
class DeviceInfo:
    """One line of ``adb devices -l``."""

    serial: str
    state: str  # device / offline / unauthorized
    properties: Dict[str, str] = field(default_factory=dict)

    @property
    def model(self) -> Optional[str]:
        return self.properties.get("model")

    @property
    def is_available(self) -> bool:
        return self.state == "device"


def validate_device_id(device_id: Optional[str]) -> bool:
    """Accept None (single attached device) or a shell-safe serial.

    Args:
        device_id: ADB serial, e.g. ``emulator-5554`` or ``10.0.0.5:5555``

    Returns:
        bool: False for empty, overlong or shell-unsafe serials
    """
    if device_id is None:
        return True
    if not device_id.strip() or len(device_id) > MAX_SERIAL_LENGTH:
        return False
    return SERIAL_RE.match(device_id) is not None


def parse_adb_devices(output: str) -> List[DeviceInfo]:
    """Parse ``adb devices -l`` output, skipping the header line."""
    devices = []
    for line in output.strip().splitlines()[1:]:
        parts = line.split()
        if len(parts) < 2:
            continue
        serial, state, *extra = parts
        properties = dict(item.split(":", 1) for item in extra if ":" in item)
        devices.append(DeviceInfo(serial=serial, state=state, properties=properties))
    return devices


class DeviceManager:
    """Lists attached Android devices and opens automation sessions."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def list_devices(self) -> List[DeviceInfo]:
        """Every device ADB reports; empty when ADB is missing or hangs."""
        try:
            result = subprocess.run(
                ["adb", "devices", "-l"],
                capture_output=True,
                text=True,
                timeout=ADB_TIMEOUT,
            )
        except FileNotFoundError:
            self.logger.error("adb executable not found on PATH")
            return []
        except subprocess.TimeoutExpired:
            self.logger.error(f"adb devices did not answer within {ADB_TIMEOUT}s")
            return []
        return parse_adb_devices(result.stdout)

    def get_available_devices(self) -> List[DeviceInfo]:
        return [d for d in self.list_devices() if d.is_available]

    def resolve_device_id(self, device_id: Optional[str]) -> str:
        """Resolve an explicit serial, or the single attached device.

        Raises:
            InvalidDeviceIdError: Malformed serial
            DeviceNotFoundError: Serial not attached, or nothing attached
            DeviceConnectionError: Several devices attached and none chosen
        """
        if not validate_device_id(device_id):
            raise InvalidDeviceIdError(device_id or "")

        serials = [d.serial for d in self.get_available_devices()]
        if device_id is not None:
            if device_id not in serials:
                raise DeviceNotFoundError(device_id)
            return device_id

        if not serials:
            raise DeviceNotFoundError()
        if len(serials) > 1:
            raise DeviceConnectionError(
                "default", f"multiple devices attached ({', '.join(serials)}); pass a device id"
            )
        return serials[0]

    def connect(self, device_id: Optional[str] = None) -> U2Driver:
        """Open a uiautomator2 session on the resolved device.

        Raises:
            DeviceConnectionError: The device did not answer
        """
        serial = self.resolve_device_id(device_id)
        self.logger.info(f"Connecting to device: {serial}")
        try:
            device = u2.connect(serial)
            device.info  # round trip to the on-device agent
        except Exception as e:
            self.logger.error(f"Failed to connect to device {serial}: {e}")
            raise DeviceConnectionError(serial, str(e)) from e
        return U2Driver(device, logger=self.logger)
