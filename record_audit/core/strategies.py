"""Ordered fallback strategies.

Each strategy is a ``(name, attempt)`` pair. An attempt succeeds by returning
a non-None value; returning None or raising a lookup/driver error counts as
failure and the next strategy is tried.
"""
import logging
from typing import Callable, Generic, Iterable, Optional, Tuple, TypeVar

from .exceptions import LookupFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")

Strategy = Tuple[str, Callable[[], Optional[T]]]


class StrategyOutcome(Generic[T]):
    """Result of :func:`first_successful`."""

    def __init__(self, name: Optional[str], value: Optional[T], tried: list):
        self.name = name
        self.value = value
        self.tried = tried

    @property
    def succeeded(self) -> bool:
        return self.value is not None

    def __repr__(self) -> str:
        return f"StrategyOutcome(name={self.name!r}, tried={self.tried!r})"


def first_successful(
    strategies: Iterable[Strategy],
    logger: Optional[logging.Logger] = None,
) -> StrategyOutcome:
    """Try strategies in order and return the first success."""
    log = logger or logging.getLogger(__name__)
    tried = []
    for name, attempt in strategies:
        tried.append(name)
        try:
            value = attempt()
        except (LookupFailure, RuntimeError) as exc:
            log.debug(f"Strategy '{name}' failed: {exc}")
            continue
        if value is not None:
            log.debug(f"Strategy '{name}' succeeded")
            return StrategyOutcome(name, value, tried)
        log.debug(f"Strategy '{name}' found nothing")
    return StrategyOutcome(None, None, tried)
