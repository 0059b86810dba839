"""App lifecycle preparation before a run."""
import logging
import time
from typing import Callable, Optional

from .driver import AppState, UIDriver
from .exceptions import AppNotInstalledError

logger = logging.getLogger(__name__)


def prepare_app(
    driver: UIDriver,
    package: str,
    settle_delay: float = 2.0,
    sleep: Callable[[float], None] = time.sleep,
    logger: Optional[logging.Logger] = None,
) -> AppState:
    """Bring ``package`` to a clean foreground state.

    A foreground app is restarted so discovery starts from its launch
    screen; anything else is simply activated.

    Returns:
        The state observed before preparation

    Raises:
        AppNotInstalledError: The package is not installed
    """
    log = logger or logging.getLogger(__name__)
    try:
        state = driver.app_state(package)
    except RuntimeError as e:
        log.warning(f"[APP] Could not query app state, assuming not running: {e}")
        state = AppState.NOT_RUNNING
    log.info(f"[APP] {package} state: {state.name}")

    if state == AppState.NOT_INSTALLED:
        raise AppNotInstalledError(package)

    if state == AppState.FOREGROUND:
        log.info("[APP] App is in the foreground, restarting...")
        driver.terminate_app(package)
    else:
        log.info("[APP] Activating app...")
    driver.activate_app(package)

    sleep(settle_delay)
    return state
