"""
Record Audit - end-to-end UI audit of a menu/record screen on Android.

Discovers the horizontal menu bar and the vertical record list of the app
under test through uiautomator2, and reconciles every record against the
centers API.
"""

__version__ = "0.1.0"

from .config import AuditConfig, Locators
from .report import AuditReporter
from .runner import MenuSurvey, RecordValidationRun, RunOutcome, SurveyResult, main

__all__ = [
    "AuditConfig",
    "Locators",
    "AuditReporter",
    "MenuSurvey",
    "RecordValidationRun",
    "RunOutcome",
    "SurveyResult",
    "main",
]
