"""Reference data access and record reconciliation."""
from .models import (
    FAIL,
    PASS,
    SUGGESTION,
    CenterRecord,
    CheckResult,
    DiscountTier,
    ValidationResult,
)
from .api import CentersClient
from .reconciler import RecordReconciler, match_center, record_texts

__all__ = [
    "FAIL",
    "PASS",
    "SUGGESTION",
    "CenterRecord",
    "CheckResult",
    "DiscountTier",
    "ValidationResult",
    "CentersClient",
    "RecordReconciler",
    "match_center",
    "record_texts",
]
