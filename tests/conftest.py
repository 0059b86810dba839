"""Shared fixtures: an in-memory app behind the UIDriver interface.

Uses plain dummy classes rather than mocks so that discovery code sees the
same calls it makes against a real device.
"""
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from record_audit.config import AuditConfig
from record_audit.core.driver import AppState


class FakeElement:
    """ElementRef stand-in."""

    def __init__(
        self,
        desc: str = "",
        text: str = "",
        texts: Sequence[str] = (),
        displayed: bool = True,
        location: Tuple[int, int] = (0, 0),
        size: Tuple[int, int] = (100, 100),
        on_click=None,
    ):
        self.desc = desc
        self.text = text
        self.texts = list(texts)
        self.displayed = displayed
        self.location = location
        self.size = size
        self.on_click = on_click
        self.clicks = 0

    def get_text(self):
        return self.text

    def get_attribute(self, name):
        return {"content-desc": self.desc, "name": self.desc, "text": self.text}.get(name)

    def is_displayed(self):
        return self.displayed

    def is_enabled(self):
        return True

    def is_existing(self):
        return True

    def get_location(self):
        return self.location

    def get_size(self):
        return self.size

    def click(self):
        self.clicks += 1
        if self.on_click is not None:
            self.on_click()

    def descendant_texts(self):
        return list(self.texts)


class FakeApp:
    """A menu bar over a record list.

    ``menus`` maps each menu label to its records, given as
    ``(description, texts)`` pairs. Only ``menu_window`` menus and
    ``record_window`` records are on screen at once; each drag moves the
    viewport by ``step`` items.
    """

    MENU_BAR = ((0, 200), (1000, 100))
    RECORD_LIST = ((0, 400), (1000, 1500))

    def __init__(
        self,
        menus: Dict[str, List[Tuple[str, Sequence[str]]]],
        config: Optional[AuditConfig] = None,
        menu_window: int = 3,
        record_window: int = 3,
        step: int = 2,
        selected: Optional[str] = None,
        noise: Sequence[str] = (),
        app_state: AppState = AppState.FOREGROUND,
    ):
        self.menus = menus
        self.labels = list(menus)
        self.locators = (config or AuditConfig()).locators
        self.menu_window = menu_window
        self.record_window = record_window
        self.step = step
        self.selected = selected
        self.noise = list(noise)
        self.state = app_state
        self.menu_offset = 0
        self.record_offset = 0
        self.has_menu_bar = True
        self.drags: List[Tuple[int, int, int, int]] = []
        self.calls: List[str] = []

    # --- viewport helpers ---

    def visible_labels(self) -> List[str]:
        return self.labels[self.menu_offset:self.menu_offset + self.menu_window]

    def visible_records(self) -> List[Tuple[str, Sequence[str]]]:
        records = self.menus.get(self.selected, [])
        return records[self.record_offset:self.record_offset + self.record_window]

    def select(self, label: str) -> None:
        self.selected = label
        self.record_offset = 0

    def _menu_element(self, label: str) -> FakeElement:
        return FakeElement(desc=label, text=label, on_click=lambda: self.select(label))

    # --- UIDriver ---

    def find_elements(self, selector: str) -> List[FakeElement]:
        loc = self.locators
        if selector == loc.menu_container:
            return [FakeElement(location=self.MENU_BAR[0], size=self.MENU_BAR[1])] if self.has_menu_bar else []
        if selector == loc.record_container:
            return [FakeElement(location=self.RECORD_LIST[0], size=self.RECORD_LIST[1])]
        if selector == loc.menu_items:
            return [self._menu_element(label) for label in self.visible_labels()] if self.has_menu_bar else []
        if selector == loc.record_items:
            elements = [FakeElement(desc=desc) for desc in self.noise]
            elements += [FakeElement(desc=desc, texts=texts) for desc, texts in self.visible_records()]
            return elements
        for label in self.visible_labels():
            if selector == loc.menu_item_by_label.format(label=label):
                return [self._menu_element(label)]
        return []

    def find_element(self, selector: str) -> Optional[FakeElement]:
        found = self.find_elements(selector)
        return found[0] if found else None

    def drag(self, start_x, start_y, end_x, end_y, duration=0.5):
        self.drags.append((start_x, start_y, end_x, end_y))
        if abs(end_x - start_x) > abs(end_y - start_y):
            last = max(0, len(self.labels) - self.menu_window)
            if end_x < start_x:
                self.menu_offset = min(self.menu_offset + self.step, last)
            else:
                self.menu_offset = max(self.menu_offset - self.step, 0)
        elif end_y < start_y:
            records = self.menus.get(self.selected, [])
            last = max(0, len(records) - self.record_window)
            self.record_offset = min(self.record_offset + self.step, last)

    def page_source(self):
        return "<hierarchy />"

    def window_size(self):
        return (1080, 2400)

    def app_state(self, package):
        self.calls.append(f"state:{package}")
        return self.state

    def activate_app(self, package):
        self.calls.append(f"activate:{package}")
        self.state = AppState.FOREGROUND

    def terminate_app(self, package):
        self.calls.append(f"terminate:{package}")
        self.state = AppState.NOT_RUNNING

    def device_info(self):
        return {"serial": "emulator-5554"}


def no_sleep(_seconds):
    return None


def priced(description: str, *texts: str) -> Tuple[str, Tuple[str, ...]]:
    """Record entry whose own description is also its first visible text."""
    return description, (description,) + texts


@pytest.fixture
def config():
    return AuditConfig()
