"""Tests for the convergence scanner."""
import pytest

from record_audit.core.exceptions import ContainerNotFoundError
from record_audit.discovery.scanner import (
    ABORTED,
    EXHAUSTED,
    STALE,
    UNCHANGED,
    ConvergenceScanner,
)


class ScreenSequence:
    """Serves successive screens; advancing past the last one repeats it."""

    def __init__(self, screens):
        self.screens = screens
        self.position = 0
        self.advances = 0

    def extract(self):
        return list(self.screens[self.position])

    def advance(self):
        self.advances += 1
        self.position = min(self.position + 1, len(self.screens) - 1)


def make_scanner(**kwargs):
    sleeps = []
    scanner = ConvergenceScanner(sleep=sleeps.append, **kwargs)
    return scanner, sleeps


def test_collects_unique_items_in_first_seen_order():
    screens = ScreenSequence([["A", "B", "C"], ["C", "D", "E"], ["E", "F"], ["E", "F"]])
    scanner, _ = make_scanner(max_unchanged_rounds=None)

    result = scanner.scan(screens.extract, lambda x: x, screens.advance, 20, 2)

    assert result.keys == ["A", "B", "C", "D", "E", "F"]
    assert result.stop_reason == STALE
    assert result.converged


def test_stops_after_stale_rounds():
    screens = ScreenSequence([["A"], ["B"], ["B"]])
    scanner, sleeps = make_scanner(settle_delay=0.8, max_unchanged_rounds=None)

    result = scanner.scan(screens.extract, lambda x: x, screens.advance, 50, 3)

    # rounds: A (new), B (new), then three stale rounds
    assert result.rounds == 5
    assert screens.advances == 4
    assert sleeps == [0.8] * 4


def test_identical_screens_are_idempotent():
    """Rescanning an already-converged screen yields the same set."""
    screens = ScreenSequence([["A", "B"]])
    scanner, _ = make_scanner()

    first = scanner.scan(screens.extract, lambda x: x, screens.advance, 10, 1)
    second = scanner.scan(screens.extract, lambda x: x, screens.advance, 10, 1)

    assert first.keys == second.keys == ["A", "B"]


def test_unchanged_count_guard_stops_early():
    screens = ScreenSequence([["A", "B"], ["A", "B"], ["A", "B"], ["A", "B"]])
    scanner, _ = make_scanner(max_unchanged_rounds=2)

    result = scanner.scan(screens.extract, lambda x: x, screens.advance, 10, 5)

    assert result.stop_reason == UNCHANGED
    assert result.rounds == 3


def test_unchanged_guard_ignores_differing_counts():
    screens = ScreenSequence([["A", "B"], ["A"], ["B", "A"], ["A"]])
    scanner, _ = make_scanner(max_unchanged_rounds=2)

    result = scanner.scan(screens.extract, lambda x: x, screens.advance, 10, 3)

    assert result.stop_reason == STALE


def test_duplicates_within_one_screen_are_collapsed():
    screens = ScreenSequence([["A", "A", "B"]])
    scanner, _ = make_scanner()

    result = scanner.scan(screens.extract, lambda x: x, screens.advance, 5, 1)

    assert result.keys == ["A", "B"]


def test_identity_keeps_first_item_for_a_key():
    screens = ScreenSequence([[("a", 1)], [("a", 2), ("b", 3)], [("b", 4)]])
    scanner, _ = make_scanner(max_unchanged_rounds=None)

    result = scanner.scan(screens.extract, lambda item: item[0], screens.advance, 10, 1)

    assert result.ordered_items() == [("a", 1), ("b", 3)]


def test_on_new_item_called_once_per_key_in_order():
    screens = ScreenSequence([["A", "B"], ["B", "C"], ["C"]])
    scanner, _ = make_scanner(max_unchanged_rounds=None)
    seen = []

    scanner.scan(screens.extract, lambda x: x, screens.advance, 10, 1, on_new_item=seen.append)

    assert seen == ["A", "B", "C"]


def test_max_iterations_returns_best_known_set():
    counter = iter(range(1000))
    scanner, sleeps = make_scanner()

    result = scanner.scan(lambda: [next(counter)], lambda x: x, lambda: None, 4, 2)

    assert result.stop_reason == EXHAUSTED
    assert not result.converged
    assert result.keys == [0, 1, 2, 3]
    # no advance after the final round
    assert len(sleeps) == 3


def test_extraction_failure_returns_partial_result():
    calls = {"n": 0}

    def extract():
        calls["n"] += 1
        if calls["n"] == 2:
            raise ContainerNotFoundError("//list")
        return ["A"]

    scanner, _ = make_scanner()
    result = scanner.scan(extract, lambda x: x, lambda: None, 10, 3)

    assert result.stop_reason == ABORTED
    assert result.keys == ["A"]
    assert isinstance(result.error, ContainerNotFoundError)


def test_advance_failure_returns_partial_result():
    def advance():
        raise ContainerNotFoundError("//list")

    scanner, _ = make_scanner()
    result = scanner.scan(lambda: ["A", "B"], lambda x: x, advance, 10, 3)

    assert result.stop_reason == ABORTED
    assert result.keys == ["A", "B"]
    assert result.rounds == 1


@pytest.mark.parametrize("max_iterations,max_stale", [(0, 1), (1, 0)])
def test_rejects_non_positive_limits(max_iterations, max_stale):
    scanner, _ = make_scanner()
    with pytest.raises(ValueError):
        scanner.scan(lambda: [], lambda x: x, lambda: None, max_iterations, max_stale)
