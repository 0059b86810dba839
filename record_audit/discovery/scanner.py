"""Scroll-until-nothing-new convergence scanning.

The scanner repeatedly extracts items from the screen, keeps the ones whose
identity key it has not seen yet, and advances (scrolls) until the stream of
new keys dries up. It is monotonic: a key, once recorded, is never revisited.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Generic, Hashable, Iterable, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)

# Stop reasons
STALE = "stale"
UNCHANGED = "unchanged"
EXHAUSTED = "max_iterations"
ABORTED = "aborted"


@dataclass
class ScanResult(Generic[K, T]):
    """Outcome of one scan: keys in first-seen order and their first items."""

    keys: List[K] = field(default_factory=list)
    items: Dict[K, T] = field(default_factory=dict)
    rounds: int = 0
    stop_reason: str = EXHAUSTED
    error: Optional[BaseException] = None

    @property
    def converged(self) -> bool:
        """True when the scan stopped because nothing new was appearing."""
        return self.stop_reason in (STALE, UNCHANGED)

    def ordered_items(self) -> List[T]:
        return [self.items[key] for key in self.keys]


class ConvergenceScanner:
    """Generic "scroll until no new unique items" loop.

    Args:
        settle_delay: Pause after each advance so the UI can finish animating
        max_unchanged_rounds: Also stop once this many consecutive rounds
            added nothing and extracted exactly as many items as the round
            before; None disables the guard
        sleep: Injected so tests can run without real pauses
        logger: Injected logger
        tag: Prefix for log lines, e.g. "[MENU DISCOVERY]"
    """

    def __init__(
        self,
        settle_delay: float = 0.8,
        max_unchanged_rounds: Optional[int] = 2,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None,
        tag: str = "[SCAN]",
    ):
        self.settle_delay = settle_delay
        self.max_unchanged_rounds = max_unchanged_rounds
        self.sleep = sleep
        self.logger = logger or logging.getLogger(__name__)
        self.tag = tag

    def scan(
        self,
        extract_items: Callable[[], Iterable[T]],
        identity: Callable[[T], K],
        advance: Callable[[], None],
        max_iterations: int,
        max_stale_iterations: int,
        on_new_item: Optional[Callable[[T], None]] = None,
    ) -> ScanResult:
        """Run the scan.

        Extraction or advance failures end the scan early; whatever was
        accumulated so far is returned with ``stop_reason == "aborted"``.
        """
        if max_iterations <= 0:
            raise ValueError("max_iterations must be greater than 0")
        if max_stale_iterations <= 0:
            raise ValueError("max_stale_iterations must be greater than 0")

        result: ScanResult = ScanResult()
        stale = 0
        unchanged = 0
        last_extracted: Optional[int] = None

        for round_no in range(1, max_iterations + 1):
            result.rounds = round_no
            try:
                items = list(extract_items())
            except Exception as exc:
                self.logger.warning(f"{self.tag} Round {round_no}: extraction failed, keeping partial result: {exc}")
                result.stop_reason = ABORTED
                result.error = exc
                return result

            new_keys = []
            for item in items:
                key = identity(item)
                if key in result.items:
                    continue
                result.items[key] = item
                result.keys.append(key)
                new_keys.append(key)
                if on_new_item is not None:
                    on_new_item(item)

            if new_keys:
                stale = 0
                unchanged = 0
                self.logger.info(f"{self.tag} Round {round_no}: new items found: {new_keys}")
            else:
                stale += 1
                unchanged = unchanged + 1 if len(items) == last_extracted else 0
                self.logger.info(f"{self.tag} Round {round_no}: no new items (consecutive: {stale})")
            last_extracted = len(items)

            if stale >= max_stale_iterations:
                self.logger.info(f"{self.tag} Stopping after {stale} consecutive rounds with no new items")
                result.stop_reason = STALE
                return result
            if self.max_unchanged_rounds is not None and unchanged >= self.max_unchanged_rounds:
                self.logger.info(f"{self.tag} Stopping: extraction unchanged for {unchanged} rounds")
                result.stop_reason = UNCHANGED
                return result

            if round_no == max_iterations:
                break

            try:
                advance()
            except Exception as exc:
                self.logger.warning(f"{self.tag} Round {round_no}: advance failed, keeping partial result: {exc}")
                result.stop_reason = ABORTED
                result.error = exc
                return result
            self.sleep(self.settle_delay)

        self.logger.warning(
            f"{self.tag} Reached {max_iterations} rounds without stabilising; "
            f"returning {len(result.keys)} items found so far"
        )
        result.stop_reason = EXHAUSTED
        return result
