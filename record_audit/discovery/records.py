"""Vertical record list discovery."""
import logging
import time
from dataclasses import dataclass, replace
from typing import Callable, List, Optional

from ..config import AuditConfig
from ..core.driver import ElementRef, UIDriver
from ..core.gestures import REVEAL_BELOW, drag_within
from .scanner import ConvergenceScanner

logger = logging.getLogger(__name__)

EXCLUDED_MARKERS = ("Day Pass", "Bulk Day Pass")


def location_name(description: str) -> str:
    """Text before the first comma: "Platinum, Indiranagar" -> "Platinum"."""
    return description.split(",")[0].strip()


def is_valid_description(description: Optional[str]) -> bool:
    """Filter out icons, banners and pass-type tiles that are not records."""
    if not description:
        return False
    trimmed = description.strip()
    if len(trimmed) <= 1:
        return False
    if any(marker in trimmed for marker in EXCLUDED_MARKERS):
        return False
    return len(location_name(trimmed)) > 1


@dataclass(frozen=True)
class Record:
    """One bookable entry of the record list.

    ``element`` is only usable while the entry is still on screen; a scroll
    or navigation invalidates it.
    """

    description: str
    element: Optional[ElementRef] = None

    @property
    def location_name(self) -> str:
        return location_name(self.description)

    def detached(self) -> "Record":
        return replace(self, element=None)


class RecordDiscovery:
    """Collects every record of the currently selected menu."""

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

    def _description(self, element: ElementRef) -> str:
        return (element.get_attribute(self.locators.label_attribute) or "").strip()

    def current_records(self) -> List[Record]:
        """Records present in the list container right now."""
        records = []
        for element in self.driver.find_elements(self.locators.record_items):
            description = self._description(element)
            if is_valid_description(description):
                records.append(Record(description, element))
        return records

    def visible_descriptions(self) -> List[str]:
        """Ordered descriptions of records actually displayed on screen."""
        return [
            record.description
            for record in self.current_records()
            if record.element.is_displayed()
        ]

    def discover(
        self, on_new_record: Optional[Callable[[Record], None]] = None
    ) -> List[Record]:
        """Scroll the list to its end and return unique records, first-seen order.

        ``on_new_record`` runs synchronously for each record as soon as it is
        confirmed unique, while its element is still on screen. When it is
        given, the returned records are detached from their elements.
        """
        scanner = ConvergenceScanner(
            settle_delay=self.config.record_settle_delay,
            # Stale counter only.
            max_unchanged_rounds=None,
            sleep=self.sleep,
            logger=self.logger,
            tag="[RECORDS]",
        )
        result = scanner.scan(
            extract_items=self.current_records,
            identity=lambda record: record.description,
            advance=lambda: drag_within(
                self.driver, self.locators.record_container, REVEAL_BELOW, logger=self.logger
            ),
            max_iterations=self.config.record_max_iterations,
            max_stale_iterations=self.config.record_max_stale,
            on_new_item=on_new_record,
        )

        records = result.ordered_items()
        if on_new_record is not None:
            records = [record.detached() for record in records]
        self.logger.info(f"[RECORDS] Total unique records collected: {len(records)}")
        return records
