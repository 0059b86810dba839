"""Detect that the record list changed after selecting a menu."""
import logging
import time
from typing import Callable, List, Optional, Sequence

from ..core.exceptions import LookupFailure
from ..core.polling import poll_attempts

logger = logging.getLogger(__name__)


class NavigationChangeDetector:
    """Polls the visible record snapshot until it differs from the previous one.

    Args:
        snapshot: Returns the ordered descriptions currently visible
            (not a full scroll of the list)
    """

    def __init__(
        self,
        snapshot: Callable[[], List[str]],
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None,
    ):
        self.snapshot = snapshot
        self.sleep = sleep
        self.logger = logger or logging.getLogger(__name__)

    def await_list_changed(
        self,
        previous_snapshot: Optional[Sequence[str]],
        max_polls: int = 12,
        poll_interval: float = 0.5,
    ) -> Optional[List[str]]:
        """Return the new visible snapshot, or None if nothing changed in time.

        An empty screen never counts as a change: the list is still loading.
        None is not an error; a menu may legitimately show the same records
        as the previous one.
        """
        previous = list(previous_snapshot or [])

        def check():
            try:
                current = self.snapshot()
            except (LookupFailure, RuntimeError) as exc:
                self.logger.debug(f"[NAVIGATION] Snapshot failed, retrying: {exc}")
                return None
            if current and current != previous:
                return current
            return None

        found, current, polls = poll_attempts(max_polls, poll_interval, check, sleep=self.sleep)
        if found:
            self.logger.info(f"[NAVIGATION] Visible records changed after {polls} poll(s): {current}")
            return current

        self.logger.warning("[NAVIGATION] No visible records changed after menu selection")
        return None
