"""Bounded polling helpers.

A hard cap on attempts or elapsed time is the only timeout mechanism; there
is no cancellation signal.
"""
import logging
import time
from typing import Any, Callable, Optional, Tuple

from .driver import ElementRef, UIDriver
from .exceptions import ElementNotFoundError

logger = logging.getLogger(__name__)

Sleep = Callable[[float], None]


def validate_polling(timeout: float, poll_interval: float) -> None:
    """Validate polling configuration."""
    if timeout <= 0:
        raise ValueError("timeout must be greater than 0")
    if poll_interval <= 0:
        raise ValueError("poll_interval must be greater than 0")


def poll_until(
    timeout: float,
    poll_interval: float,
    check: Callable[[], Any],
    sleep: Sleep = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> Tuple[bool, Any, float]:
    """Poll until check returns a non-None result or timeout."""
    start_time = clock()
    while clock() - start_time < timeout:
        result = check()
        if result is not None:
            return True, result, clock() - start_time
        sleep(poll_interval)
    return False, None, clock() - start_time


def poll_attempts(
    max_polls: int,
    poll_interval: float,
    check: Callable[[], Any],
    sleep: Sleep = time.sleep,
) -> Tuple[bool, Any, int]:
    """Call check up to max_polls times, sleeping between attempts.

    Returns (found, result, attempts_used).
    """
    if max_polls <= 0:
        raise ValueError("max_polls must be greater than 0")
    for attempt in range(1, max_polls + 1):
        result = check()
        if result is not None:
            return True, result, attempt
        if attempt < max_polls:
            sleep(poll_interval)
    return False, None, max_polls


def find_displayed(driver: UIDriver, selector: str) -> Optional[ElementRef]:
    """First element matching ``selector`` that is currently displayed."""
    for element in driver.find_elements(selector):
        if element.is_displayed():
            return element
    return None


def wait_for_element(
    driver: UIDriver,
    selector: str,
    timeout: float = 10.0,
    poll_interval: float = 0.5,
    required: bool = False,
    sleep: Sleep = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> Optional[ElementRef]:
    """Wait for a displayed element.

    Returns None on timeout, or raises ElementNotFoundError when ``required``.
    """
    validate_polling(timeout, poll_interval)

    found, element, waited = poll_until(
        timeout,
        poll_interval,
        lambda: find_displayed(driver, selector),
        sleep=sleep,
        clock=clock,
    )
    if found:
        logger.debug(f"Element found after {waited:.2f}s: {selector}")
        return element

    logger.info(f"Element not found after {waited:.2f}s timeout: {selector}")
    if required:
        raise ElementNotFoundError(selector, timeout)
    return None
