"""Reference data and validation result types."""
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

PASS = "PASS"
FAIL = "FAIL"
SUGGESTION = "SUGGESTION"


@dataclass(frozen=True)
class DiscountTier:
    """One entry of ``day_pass_discounts_percentage``."""

    value: float = 0
    message: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "DiscountTier":
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise TypeError(f"discount tier must be an object, got {type(data).__name__}")
        return cls(value=float(data.get("value") or 0), message=data.get("message") or None)


@dataclass(frozen=True)
class CenterRecord:
    """A bookable center as returned by the reference API."""

    name: str
    cluster_name: str
    day_pass_price: int
    day_pass_discounts_percentage: Dict[str, DiscountTier] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CenterRecord":
        discounts = data.get("day_pass_discounts_percentage") or {}
        if not isinstance(discounts, dict):
            raise TypeError("day_pass_discounts_percentage must be an object")
        return cls(
            name=data["name"],
            cluster_name=data.get("cluster_name") or "",
            day_pass_price=int(data.get("day_pass_price") or 0),
            day_pass_discounts_percentage={
                str(key): DiscountTier.from_dict(value) for key, value in discounts.items()
            },
        )

    def discount(self, tier: str = "1") -> DiscountTier:
        return self.day_pass_discounts_percentage.get(tier, DiscountTier())

    def discounted_price(self, tier: str = "1") -> int:
        """floor(price * (1 - value/100)); 299 at 20% -> 239."""
        value = self.discount(tier).value
        return math.floor(self.day_pass_price * (100 - value) / 100)

    def discount_label(self, tier: str = "1") -> str:
        """Label the app is expected to show, e.g. "20% Discount"."""
        discount = self.discount(tier)
        if discount.message:
            return discount.message
        if discount.value > 0:
            return f"{_format_percent(discount.value)}% Discount"
        return ""


def _format_percent(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


@dataclass(frozen=True)
class CheckResult:
    """One field-level comparison between the UI and the reference data."""

    field: str
    expected: str
    actual: str
    status: str

    def describe(self) -> str:
        return (
            f"[CHECK] Field: {self.field} | Expected: {self.expected} "
            f"| Actual: {self.actual} | Status: {self.status}"
        )

    def to_dict(self) -> dict:
        return {
            "field": self.field,
            "expected": self.expected,
            "actual": self.actual,
            "status": self.status,
        }


@dataclass(frozen=True)
class ValidationResult:
    """Reconciliation outcome for one record."""

    menu_name: str
    record_index: int
    record_name: str
    status: str
    reasons: Tuple[str, ...] = ()
    details: Tuple[str, ...] = ()
    checks: Tuple[CheckResult, ...] = ()

    @property
    def passed(self) -> bool:
        return self.status == PASS

    @property
    def suggestions(self) -> List[CheckResult]:
        return [check for check in self.checks if check.status == SUGGESTION]

    def to_dict(self) -> dict:
        return {
            "menuName": self.menu_name,
            "recordIndex": self.record_index,
            "recordName": self.record_name,
            "status": self.status,
            "reasons": list(self.reasons),
            "details": list(self.details),
            "checks": [check.to_dict() for check in self.checks],
        }
