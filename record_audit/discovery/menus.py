"""Horizontal menu bar discovery and selection."""
import logging
import time
from typing import Callable, List, Optional

from ..config import AuditConfig
from ..core.driver import ElementRef, UIDriver
from ..core.gestures import REVEAL_LEFT, REVEAL_RIGHT, DragSpec, drag_within
from ..core.polling import find_displayed
from ..core.strategies import first_successful
from .scanner import ConvergenceScanner

logger = logging.getLogger(__name__)


class MenuDiscovery:
    """Discovers, scrolls to and selects the tabs of the horizontal menu bar."""

    def __init__(
        self,
        driver: UIDriver,
        config: Optional[AuditConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None,
    ):
        self.driver = driver
        self.config = config or AuditConfig()
        self.locators = self.config.locators
        self.sleep = sleep
        self.logger = logger or logging.getLogger(__name__)

    def _label(self, element: ElementRef) -> str:
        return (element.get_attribute(self.locators.label_attribute) or "").strip()

    def visible_menu_elements(self) -> List[ElementRef]:
        """Clickable, displayed menu elements that carry a label."""
        return [
            element
            for element in self.driver.find_elements(self.locators.menu_items)
            if element.is_displayed() and self._label(element)
        ]

    def _swipe(self, spec: DragSpec) -> None:
        drag_within(self.driver, self.locators.menu_container, spec, logger=self.logger)
        self.sleep(self.config.menu_settle_delay)

    def scroll_to_start(self, swipes: Optional[int] = None) -> int:
        """Drive the menu bar to its leftmost extreme.

        Returns the number of swipes performed; stops early if the container
        disappears.
        """
        swipes = self.config.menu_start_swipes if swipes is None else swipes
        done = 0
        for _ in range(swipes):
            if self.driver.find_element(self.locators.menu_container) is None:
                self.logger.warning("[MENU DISCOVERY] Menu bar vanished while scrolling to start")
                break
            self._swipe(REVEAL_LEFT)
            done += 1
        return done

    def discover(self) -> List[str]:
        """Return menu labels in first-seen order, left to right.

        An absent menu bar yields an empty list.
        """
        self.logger.info("[MENU DISCOVERY] Starting horizontal menu discovery...")
        if self.driver.find_element(self.locators.menu_container) is None:
            self.logger.warning(f"[MENU DISCOVERY] Menu bar not found: {self.locators.menu_container}")
            return []

        self.scroll_to_start()

        scanner = ConvergenceScanner(
            settle_delay=self.config.menu_settle_delay,
            sleep=self.sleep,
            logger=self.logger,
            tag="[MENU DISCOVERY]",
        )
        result = scanner.scan(
            extract_items=self.visible_menu_elements,
            identity=self._label,
            advance=lambda: drag_within(
                self.driver, self.locators.menu_container, REVEAL_RIGHT, logger=self.logger
            ),
            max_iterations=self.config.menu_max_iterations,
            max_stale_iterations=self.config.menu_max_stale,
        )

        menus = list(result.keys)
        self.logger.info(f"[MENU DISCOVERY] Total unique menus discovered: {len(menus)}")
        self.logger.info(f"[MENU DISCOVERY] All discovered menus: [{', '.join(menus)}]")
        return menus

    def find_menu(self, label: str) -> Optional[ElementRef]:
        """The displayed menu element for ``label``, if on screen now."""
        by_label = self.locators.menu_item_by_label.format(label=label)
        by_text = self.locators.menu_item_by_text.format(label=label)
        return find_displayed(self.driver, by_label) or find_displayed(self.driver, by_text)

    def _search(self, label: str, spec: DragSpec, swipes: int) -> Optional[ElementRef]:
        for _ in range(swipes):
            element = self.find_menu(label)
            if element is not None:
                return element
            self._swipe(spec)
        return self.find_menu(label)

    def scroll_into_view(self, label: str, swipes: Optional[int] = None) -> Optional[ElementRef]:
        """Bring ``label`` on screen, searching rightwards first, then leftwards."""
        swipes = self.config.menu_select_swipes if swipes is None else swipes
        outcome = first_successful(
            [
                ("visible", lambda: self.find_menu(label)),
                ("scroll right", lambda: self._search(label, REVEAL_RIGHT, swipes)),
                ("scroll left", lambda: self._search(label, REVEAL_LEFT, swipes)),
            ],
            logger=self.logger,
        )
        if not outcome.succeeded:
            self.logger.warning(f"[MENU] Menu '{label}' not found after bidirectional scrolling")
            return None
        self.logger.debug(f"[MENU] Menu '{label}' located via {outcome.name}")
        return outcome.value

    def select(self, label: str) -> bool:
        """Scroll ``label`` into view and tap it."""
        element = self.scroll_into_view(label)
        if element is None:
            return False
        element.click()
        self.logger.info(f"[MENU] Selected menu: {label}")
        self.sleep(self.config.menu_click_delay)
        return True
