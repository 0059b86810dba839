import subprocess

import pytest

from record_audit.core.device_manager import (
    DeviceInfo,
    DeviceManager,
    parse_adb_devices,
    validate_device_id,
)
from record_audit.core.driver import U2Driver
from record_audit.core.exceptions import (
    DeviceConnectionError,
    DeviceNotFoundError,
    InvalidDeviceIdError,
)


ADB_OUTPUT = """List of devices attached
emulator-5554          device product:sdk_gphone64 model:sdk_gphone64_x86_64 transport_id:1
192.168.1.100:5555     offline transport_id:2
R58M123ABC             unauthorized usb:1-1 transport_id:3

"""


class AgentSession:
    """uiautomator2 device whose ``info`` round trip succeeds or raises."""

    def __init__(self, error=None):
        self.error = error

    @property
    def info(self):
        if self.error is not None:
            raise self.error
        return {"productName": "sdk_gphone64"}


@pytest.fixture
def attached(monkeypatch):
    """Build a DeviceManager that sees the given (serial, state) pairs."""

    def build(*pairs):
        manager = DeviceManager()
        devices = [DeviceInfo(serial=serial, state=state) for serial, state in pairs]
        monkeypatch.setattr(manager, "list_devices", lambda: devices)
        return manager

    return build


@pytest.mark.parametrize(
    "device_id",
    [None, "emulator-5554", "192.168.1.100:5555", "R58M123ABC", "adb-R58M.local_tcp"],
)
def test_accepts_serials(device_id):
    assert validate_device_id(device_id) is True


@pytest.mark.parametrize(
    "device_id",
    [
        "",
        "  ",
        "x" * 256,
        "emulator-5554; reboot",
        "emulator-5554 && id",
        "a|b",
        "`id`",
        "$(id)",
        "../secret",
        "emulator-5554\nreboot",
    ],
)
def test_rejects_unsafe_serials(device_id):
    assert validate_device_id(device_id) is False


def test_parse_adb_devices():
    devices = parse_adb_devices(ADB_OUTPUT)

    assert [(d.serial, d.state) for d in devices] == [
        ("emulator-5554", "device"),
        ("192.168.1.100:5555", "offline"),
        ("R58M123ABC", "unauthorized"),
    ]
    assert devices[0].model == "sdk_gphone64_x86_64"
    assert devices[0].properties["transport_id"] == "1"
    assert devices[2].properties["usb"] == "1-1"
    assert devices[1].model is None
    assert [d.is_available for d in devices] == [True, False, False]


def test_parse_adb_devices_with_nothing_attached():
    assert parse_adb_devices("List of devices attached\n\n") == []


@pytest.mark.parametrize(
    "error", [FileNotFoundError("adb"), subprocess.TimeoutExpired(["adb", "devices"], 10)]
)
def test_list_devices_when_adb_unusable(monkeypatch, error):
    def run(*args, **kwargs):
        raise error

    monkeypatch.setattr("record_audit.core.device_manager.subprocess.run", run)
    assert DeviceManager().list_devices() == []


def test_single_available_device_is_chosen(attached):
    manager = attached(("emulator-5554", "device"), ("emulator-5556", "offline"))
    assert manager.resolve_device_id(None) == "emulator-5554"


def test_several_available_devices_need_a_serial(attached):
    manager = attached(("device-1", "device"), ("device-2", "device"))

    with pytest.raises(DeviceConnectionError, match="multiple devices"):
        manager.resolve_device_id(None)
    assert manager.resolve_device_id("device-2") == "device-2"


def test_nothing_attached(attached):
    with pytest.raises(DeviceNotFoundError):
        attached().resolve_device_id(None)


def test_serial_not_attached(attached):
    manager = attached(("emulator-5554", "device"))

    with pytest.raises(DeviceNotFoundError) as exc_info:
        manager.resolve_device_id("emulator-5556")
    assert exc_info.value.device_id == "emulator-5556"


def test_unsafe_serial_never_reaches_adb(monkeypatch):
    manager = DeviceManager()

    def list_devices():
        raise AssertionError("adb queried")

    monkeypatch.setattr(manager, "list_devices", list_devices)

    with pytest.raises(InvalidDeviceIdError, match="Invalid device_id format"):
        manager.resolve_device_id("device; rm -rf /")


def test_connect_opens_session_on_resolved_serial(attached, monkeypatch):
    manager = attached(("emulator-5554", "device"))
    serials = []

    def connect(serial):
        serials.append(serial)
        return AgentSession()

    monkeypatch.setattr("record_audit.core.device_manager.u2.connect", connect)

    assert isinstance(manager.connect(), U2Driver)
    assert serials == ["emulator-5554"]


def test_connect_wraps_agent_failure(attached, monkeypatch):
    manager = attached(("emulator-5554", "device"))
    monkeypatch.setattr(
        "record_audit.core.device_manager.u2.connect",
        lambda serial: AgentSession(ConnectionError("atx-agent not responding")),
    )

    with pytest.raises(DeviceConnectionError, match="atx-agent not responding") as exc_info:
        manager.connect("emulator-5554")
    assert isinstance(exc_info.value.__cause__, ConnectionError)
