"""Directional drags bounded by a scroll container."""
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .driver import ElementRef, UIDriver
from .exceptions import ContainerNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DragSpec:
    """A drag expressed as fractions of the container's width and height."""

    start: Tuple[float, float]
    end: Tuple[float, float]
    duration: float = 0.5


# Content moves opposite to the finger: dragging right-to-left reveals items on the right.
REVEAL_RIGHT = DragSpec(start=(0.8, 0.5), end=(0.2, 0.5), duration=0.5)
REVEAL_LEFT = DragSpec(start=(0.2, 0.5), end=(0.8, 0.5), duration=0.5)
# 80% -> 30% keeps an overlap between consecutive viewports.
REVEAL_BELOW = DragSpec(start=(0.5, 0.8), end=(0.5, 0.3), duration=1.0)


def drag_points(
    container: ElementRef, spec: DragSpec
) -> Tuple[int, int, int, int]:
    """Resolve a DragSpec to absolute (start_x, start_y, end_x, end_y)."""
    x, y = container.get_location()
    width, height = container.get_size()
    return (
        round(x + width * spec.start[0]),
        round(y + height * spec.start[1]),
        round(x + width * spec.end[0]),
        round(y + height * spec.end[1]),
    )


def drag_within(
    driver: UIDriver,
    selector: str,
    spec: DragSpec,
    logger: Optional[logging.Logger] = None,
) -> Tuple[int, int, int, int]:
    """Drag inside the container matched by ``selector``.

    The container is looked up afresh on every call.

    Raises:
        ContainerNotFoundError: No element matches ``selector``
    """
    log = logger or logging.getLogger(__name__)
    container = driver.find_element(selector)
    if container is None:
        raise ContainerNotFoundError(selector)

    sx, sy, ex, ey = drag_points(container, spec)
    driver.drag(sx, sy, ex, ey, duration=spec.duration)
    log.debug(f"Swiped from ({sx}, {sy}) to ({ex}, {ey}) in {selector}")
    return (sx, sy, ex, ey)
