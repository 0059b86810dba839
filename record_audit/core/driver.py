"""Automation driver boundary.

Discovery and validation code talks only to :class:`UIDriver` and
:class:`ElementRef`. :class:`U2Driver` is the uiautomator2-backed
implementation; tests substitute scripted fakes.

Element handles are snapshots of one hierarchy dump. They go stale after any
scroll or navigation and must be re-fetched across such boundaries.
"""
import enum
import logging
from typing import Any, Dict, List, Optional, Protocol, Tuple

import uiautomator2 as u2

from ._errors import wrap_errors
from .ui_tree import ElementInfo, is_text_view, iter_texts, unique_in_order

logger = logging.getLogger(__name__)


class AppState(enum.IntEnum):
    """Application state, numbered like the WebDriver queryAppState codes."""

    NOT_INSTALLED = 0
    NOT_RUNNING = 1
    BACKGROUND = 3
    FOREGROUND = 4


class ElementRef(Protocol):
    """Opaque handle to one UI element."""

    def get_text(self) -> str: ...

    def get_attribute(self, name: str) -> Optional[str]: ...

    def is_displayed(self) -> bool: ...

    def is_enabled(self) -> bool: ...

    def is_existing(self) -> bool: ...

    def get_location(self) -> Tuple[int, int]: ...

    def get_size(self) -> Tuple[int, int]: ...

    def click(self) -> None: ...

    def descendant_texts(self) -> List[str]: ...


class UIDriver(Protocol):
    """Operations the audit needs from an automation session."""

    def find_elements(self, selector: str) -> List[ElementRef]: ...

    def find_element(self, selector: str) -> Optional[ElementRef]: ...

    def drag(
        self,
        start_x: int,
        start_y: int,
        end_x: int,
        end_y: int,
        duration: float = 0.5,
    ) -> None: ...

    def page_source(self) -> str: ...

    def window_size(self) -> Tuple[int, int]: ...

    def app_state(self, package: str) -> AppState: ...

    def activate_app(self, package: str) -> None: ...

    def terminate_app(self, package: str) -> None: ...

    def device_info(self) -> Dict[str, Any]: ...


class XmlElementRef:
    """ElementRef over a hierarchy node.

    ``device`` is only needed for :meth:`click`; refs built from a static
    page dump have none.
    """

    def __init__(
        self,
        node,
        device: Optional[u2.Device] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.node = node
        self._device = device
        self.logger = logger or logging.getLogger(__name__)
        self._info = ElementInfo.from_node(node)

    def __repr__(self) -> str:
        return f"XmlElementRef({self._info.class_name!r}, desc={self._info.content_desc!r})"

    def get_text(self) -> str:
        return self._info.text or ""

    def get_attribute(self, name: str) -> Optional[str]:
        return self.node.attrib.get(name)

    def is_displayed(self) -> bool:
        return self._info.displayed

    def is_enabled(self) -> bool:
        return self._info.enabled

    def is_existing(self) -> bool:
        return self.node is not None

    def get_location(self) -> Tuple[int, int]:
        return self._info.location

    def get_size(self) -> Tuple[int, int]:
        return self._info.size

    @wrap_errors("Click failed")
    def click(self) -> None:
        if self._device is None:
            raise RuntimeError("Cannot click an element parsed from a static page source")
        x, y = self._info.center
        self._device.click(x, y)

    def descendant_texts(self) -> List[str]:
        """Texts of every TextView inside this element, first-seen order."""
        return unique_in_order(iter_texts(self.node, is_text_view))


class U2Driver:
    """UIDriver backed by a uiautomator2 device connection.

    Selectors are XPath expressions evaluated by uiautomator2 against the
    current hierarchy dump.
    """

    def __init__(self, device: u2.Device, logger: Optional[logging.Logger] = None):
        self.device = device
        self.logger = logger or logging.getLogger(__name__)

    @wrap_errors("Element lookup failed")
    def find_elements(self, selector: str) -> List[ElementRef]:
        matches = self.device.xpath(selector).all()
        return [XmlElementRef(match.elem, self.device, self.logger) for match in matches]

    def find_element(self, selector: str) -> Optional[ElementRef]:
        matches = self.find_elements(selector)
        return matches[0] if matches else None

    @wrap_errors("Drag failed")
    def drag(
        self,
        start_x: int,
        start_y: int,
        end_x: int,
        end_y: int,
        duration: float = 0.5,
    ) -> None:
        self.device.swipe(start_x, start_y, end_x, end_y, duration=duration)
        self.logger.debug(f"Dragged from ({start_x}, {start_y}) to ({end_x}, {end_y})")

    @wrap_errors("Failed to dump hierarchy")
    def page_source(self) -> str:
        return self.device.dump_hierarchy()

    def window_size(self) -> Tuple[int, int]:
        width, height = self.device.window_size()
        return (width, height)

    @wrap_errors("Failed to query app state")
    def app_state(self, package: str) -> AppState:
        if self.device.app_current().get("package") == package:
            return AppState.FOREGROUND
        if package in self.device.app_list_running():
            return AppState.BACKGROUND
        if package in self.device.app_list():
            return AppState.NOT_RUNNING
        return AppState.NOT_INSTALLED

    @wrap_errors("Failed to start app")
    def activate_app(self, package: str) -> None:
        self.device.app_start(package, wait=True)
        self.logger.info(f"Started app: {package}")

    @wrap_errors("Failed to stop app")
    def terminate_app(self, package: str) -> None:
        self.device.app_stop(package)
        self.logger.info(f"Stopped app: {package}")

    def device_info(self) -> Dict[str, Any]:
        info = self.device.info
        width, height = self.window_size()
        return {
            "serial": self.device.serial,
            "sdk_version": info.get("sdkInt"),
            "product_name": info.get("productName"),
            "screen_size": {"width": width, "height": height},
            "orientation": info.get("displayRotation"),
            "screen_on": info.get("screenOn"),
        }
