"""Reconcile discovered UI records against reference API data."""
import logging
import re
from typing import List, Optional, Sequence, Tuple

from ..config import AuditConfig
from ..core.driver import ElementRef
from ..core.exceptions import LookupFailure
from ..core.ui_tree import unique_in_order
from ..discovery.records import Record
from .models import FAIL, PASS, SUGGESTION, CenterRecord, CheckResult, ValidationResult

logger = logging.getLogger(__name__)

CLUSTER_MISMATCH = "Cluster name mismatch"
NO_API_MATCH = "No API match"

CAMPAIGN_KEYWORDS = ("festive", "summer", "flat", "amigos", "bulk")


def is_discount_label(text: str) -> bool:
    lower = text.lower()
    if "off" in lower or "discount" in lower:
        return True
    return "%" in lower and any(keyword in lower for keyword in CAMPAIGN_KEYWORDS)


def contains_price(text: str, price_text: str) -> bool:
    """True if ``price_text`` appears in ``text`` not followed by another digit."""
    return re.search(re.escape(price_text) + r"(?!\d)", text) is not None


def record_texts(element: Optional[ElementRef], log: Optional[logging.Logger] = None) -> List[str]:
    """Own text plus every descendant text of a record, de-duplicated in order."""
    log = log or logger
    if element is None:
        return []
    texts = []
    try:
        own = (element.get_text() or "").strip()
        if own:
            texts.append(own)
        texts.extend(element.descendant_texts())
    except (RuntimeError, LookupFailure) as exc:
        log.warning(f"[RECORD] Could not read texts from element: {exc}")
    return unique_in_order(texts)


def match_center(
    description: str,
    menu_label: str,
    reference_data: Sequence[CenterRecord],
    all_menu_label: str = "All",
) -> Tuple[Optional[CenterRecord], Optional[CenterRecord]]:
    """Return (match, same-name center from another cluster).

    For the "All" menu the cluster is ignored. Elsewhere a center must share
    the active menu's cluster; a name-only hit is reported as the second
    element so callers can flag the grouping inconsistency.
    """
    named = [center for center in reference_data if center.name and center.name in description]
    if menu_label == all_menu_label:
        return (named[0] if named else None), None
    for center in named:
        if center.cluster_name == menu_label:
            return center, None
    return None, (named[0] if named else None)


class RecordReconciler:
    """Builds a ValidationResult per record; never raises on mismatches."""

    def __init__(
        self,
        config: Optional[AuditConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config or AuditConfig()
        self.logger = logger or logging.getLogger(__name__)

    def _price(self, amount: int) -> str:
        return f"{self.config.currency_symbol}{amount}"

    def reconcile(
        self,
        record: Record,
        menu_label: str,
        reference_data: Sequence[CenterRecord],
        record_index: int = 1,
        texts: Optional[Sequence[str]] = None,
    ) -> ValidationResult:
        """Validate one record.

        Args:
            texts: Pre-extracted texts; read from ``record.element`` if omitted
        """
        description = record.description
        reasons: List[str] = []
        details: List[str] = []
        checks: List[CheckResult] = []

        center, elsewhere = match_center(
            description, menu_label, reference_data, self.config.all_menu_label
        )

        if center is None:
            if elsewhere is not None:
                details.append(
                    f'[ASSERTION FAILED] UI record "{description}" found in menu "{menu_label}" '
                    f'but API cluster_name is "{elsewhere.cluster_name}"'
                )
                reasons.append(CLUSTER_MISMATCH)
            else:
                details.append(
                    f'[ASSERTION FAILED] No API center found for UI record "{description}" '
                    f'in menu "{menu_label}"'
                )
                reasons.append(NO_API_MATCH)
        else:
            details.append(
                f'[ASSERTION PASSED] UI record "{description}" matched API center '
                f'"{center.name}" in cluster "{center.cluster_name}"'
            )
            if texts is None:
                texts = record_texts(record.element, self.logger)
            self.logger.debug(f'[RECORD] Texts found for "{description}": {list(texts)}')
            checks = self._run_checks(center, menu_label, texts)
            details.extend(check.describe() for check in checks)

            failed = [check.field for check in checks if check.status == FAIL]
            if "Cluster" in failed:
                reasons.append(CLUSTER_MISMATCH)
            if failed:
                reasons.append(f"Failed checks: {', '.join(failed)}")

        status = FAIL if reasons else PASS
        result = ValidationResult(
            menu_name=menu_label,
            record_index=record_index,
            record_name=description,
            status=status,
            reasons=tuple(reasons),
            details=tuple(details),
            checks=tuple(checks),
        )
        self._log_result(result)
        return result

    def _run_checks(
        self, center: CenterRecord, menu_label: str, texts: Sequence[str]
    ) -> List[CheckResult]:
        tier = self.config.discount_tier
        discount = center.discount(tier)
        original = self._price(center.day_pass_price)
        found_original = any(contains_price(t, original) for t in texts)

        checks = [
            CheckResult(
                field="Original Price",
                expected=original,
                actual=original if found_original else "(not found)",
                status=PASS if found_original else FAIL,
            )
        ]

        if discount.value > 0:
            discounted = self._price(center.discounted_price(tier))
            found_discounted = any(contains_price(t, discounted) for t in texts)
            checks.append(
                CheckResult(
                    field="Discounted Price",
                    expected=discounted,
                    actual=discounted if found_discounted else "(not found)",
                    status=PASS if found_discounted else FAIL,
                )
            )

            expected_label = center.discount_label(tier)
            labels = [t for t in texts if is_discount_label(t)]
            if expected_label in labels:
                checks.append(CheckResult("Discount Label", expected_label, expected_label, PASS))
            elif labels:
                # Label shown, worded differently.
                checks.append(CheckResult("Discount Label", expected_label, labels[-1], SUGGESTION))
            else:
                checks.append(CheckResult("Discount Label", expected_label, "(not found)", FAIL))

        if menu_label != self.config.all_menu_label:
            checks.append(
                CheckResult(
                    field="Cluster",
                    expected=menu_label,
                    actual=center.cluster_name,
                    status=PASS if center.cluster_name == menu_label else FAIL,
                )
            )
        return checks

    def _log_result(self, result: ValidationResult) -> None:
        self.logger.info(
            f"Menu: {result.menu_name} | Record Index: {result.record_index} "
            f"| Record Name: {result.record_name}"
        )
        for line in result.details:
            self.logger.info(f"  {line}")
        suffix = f" (Reason: {'; '.join(result.reasons)})" if result.reasons else ""
        self.logger.info(f"  status: {result.status}{suffix}")
