"""Tests for the uiautomator2-backed driver and the drag primitive."""
import pytest
from conftest import FakeApp, FakeElement

from record_audit.core.driver import AppState, U2Driver
from record_audit.core.exceptions import ContainerNotFoundError
from record_audit.core.gestures import (
    REVEAL_BELOW,
    REVEAL_LEFT,
    REVEAL_RIGHT,
    drag_points,
    drag_within,
)
from record_audit.core.ui_tree import parse_page_source

MENU_XML = """<hierarchy rotation="0">
  <node class="android.widget.HorizontalScrollView" bounds="[0,200][1080,300]">
    <node class="android.view.ViewGroup" content-desc="All" clickable="true" bounds="[0,200][300,300]" />
    <node class="android.view.ViewGroup" content-desc="HSR" clickable="true" bounds="[300,200][600,300]" />
  </node>
</hierarchy>
"""


class DummyMatch:
    def __init__(self, elem):
        self.elem = elem


class DummySelector:
    def __init__(self, matches):
        self.matches = matches

    def all(self):
        return self.matches


class DummyDevice:
    """Records the uiautomator2 calls U2Driver makes."""

    serial = "emulator-5554"

    def __init__(self, current="com.other.app", running=(), installed=()):
        self.root = parse_page_source(MENU_XML)
        self.current = current
        self.running = list(running)
        self.installed = list(installed)
        self.swipes = []
        self.started = []
        self.stopped = []
        self.info = {"sdkInt": 34, "productName": "sdk_gphone", "displayRotation": 0, "screenOn": True}

    def xpath(self, selector):
        if "ViewGroup" in selector:
            return DummySelector([DummyMatch(n) for n in self.root.iter() if n.attrib.get("content-desc")])
        return DummySelector([])

    def swipe(self, sx, sy, ex, ey, duration=0.5):
        self.swipes.append((sx, sy, ex, ey, duration))

    def window_size(self):
        return (1080, 2400)

    def dump_hierarchy(self):
        return MENU_XML

    def app_current(self):
        return {"package": self.current}

    def app_list_running(self):
        return self.running

    def app_list(self):
        return self.installed

    def app_start(self, package, wait=False):
        self.started.append(package)

    def app_stop(self, package):
        self.stopped.append(package)


class BrokenDevice(DummyDevice):
    def xpath(self, selector):
        raise ConnectionError("uiautomator server died")


# === U2Driver ===


class TestU2Driver:
    """Tests for U2Driver."""

    def test_find_elements_wraps_matches(self):
        driver = U2Driver(DummyDevice())
        elements = driver.find_elements("//android.view.ViewGroup")
        assert [e.get_attribute("content-desc") for e in elements] == ["All", "HSR"]

    def test_find_element_none_when_no_match(self):
        assert U2Driver(DummyDevice()).find_element("//android.widget.ScrollView") is None

    def test_click_uses_device(self):
        device = DummyDevice()
        device.clicks = []
        device.click = lambda x, y: device.clicks.append((x, y))
        U2Driver(device).find_element("//android.view.ViewGroup").click()
        assert device.clicks == [(150, 250)]

    def test_driver_errors_become_runtime_errors(self):
        with pytest.raises(RuntimeError, match="Element lookup failed"):
            U2Driver(BrokenDevice()).find_elements("//any")

    def test_drag_passes_duration(self):
        device = DummyDevice()
        U2Driver(device).drag(1, 2, 3, 4, duration=1.0)
        assert device.swipes == [(1, 2, 3, 4, 1.0)]

    @pytest.mark.parametrize(
        "device,expected",
        [
            (DummyDevice(current="com.bhive.workspace"), AppState.FOREGROUND),
            (DummyDevice(running=["com.bhive.workspace"]), AppState.BACKGROUND),
            (DummyDevice(installed=["com.bhive.workspace"]), AppState.NOT_RUNNING),
            (DummyDevice(), AppState.NOT_INSTALLED),
        ],
    )
    def test_app_state(self, device, expected):
        assert U2Driver(device).app_state("com.bhive.workspace") == expected

    def test_activate_and_terminate(self):
        device = DummyDevice()
        driver = U2Driver(device)
        driver.activate_app("com.bhive.workspace")
        driver.terminate_app("com.bhive.workspace")
        assert device.started == ["com.bhive.workspace"]
        assert device.stopped == ["com.bhive.workspace"]

    def test_device_info(self):
        info = U2Driver(DummyDevice()).device_info()
        assert info["serial"] == "emulator-5554"
        assert info["screen_size"] == {"width": 1080, "height": 2400}
        assert info["sdk_version"] == 34

    def test_page_source(self):
        assert U2Driver(DummyDevice()).page_source().startswith("<hierarchy")


# === Gestures ===


class TestGestures:
    """Tests for bounded drags."""

    container = FakeElement(location=(0, 200), size=(1000, 100))

    def test_reveal_right_drags_right_to_left(self):
        assert drag_points(self.container, REVEAL_RIGHT) == (800, 250, 200, 250)

    def test_reveal_left_drags_left_to_right(self):
        assert drag_points(self.container, REVEAL_LEFT) == (200, 250, 800, 250)

    def test_reveal_below_overlaps(self):
        container = FakeElement(location=(0, 400), size=(1080, 1000))
        assert drag_points(container, REVEAL_BELOW) == (540, 1200, 540, 700)

    def test_drag_within_uses_fresh_container(self, config):
        app = FakeApp({"All": []}, config=config)
        drag_within(app, config.locators.menu_container, REVEAL_RIGHT)
        assert app.drags == [(800, 250, 200, 250)]

    def test_drag_within_missing_container(self, config):
        app = FakeApp({"All": []}, config=config)
        app.has_menu_bar = False
        with pytest.raises(ContainerNotFoundError):
            drag_within(app, config.locators.menu_container, REVEAL_RIGHT)
