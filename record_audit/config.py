"""
Record Audit - Default Configuration

Centralized configuration for a run. Values can be overridden via
environment variables prefixed with ``RECORD_AUDIT_``.

Usage:
    from record_audit.config import AuditConfig
    config = AuditConfig.from_env()
"""

import os
from dataclasses import dataclass, field, replace
from typing import Dict


@dataclass(frozen=True)
class Locators:
    """XPath selectors for the menu bar and the record list."""

    menu_container: str
    menu_items: str
    menu_item_by_label: str  # formatted with label=
    menu_item_by_text: str  # formatted with label=
    record_container: str
    record_items: str
    label_attribute: str = "content-desc"

    @classmethod
    def for_platform(cls, platform: str) -> "Locators":
        try:
            return _PLATFORM_LOCATORS[platform.lower()]
        except KeyError:
            raise ValueError(f"Unsupported platform: {platform}. Use 'android' or 'ios'")


_PLATFORM_LOCATORS: Dict[str, Locators] = {
    "android": Locators(
        menu_container="//android.widget.HorizontalScrollView",
        menu_items='//android.widget.HorizontalScrollView//android.view.ViewGroup[@clickable="true"]',
        menu_item_by_label=(
            '//android.widget.HorizontalScrollView//android.view.ViewGroup'
            '[@clickable="true" and @content-desc="{label}"]'
        ),
        menu_item_by_text='//*[@text="{label}"]',
        record_container="//android.widget.ScrollView",
        record_items=(
            '//android.widget.ScrollView//android.view.ViewGroup'
            '[@clickable="true" and string-length(@content-desc) > 0]'
        ),
    ),
    # XCUITest trees carry no clickable attribute. Only U2Driver ships, so these
    # selectors need a UIDriver over an XCUITest session.
    "ios": Locators(
        menu_container="//XCUIElementTypeScrollView",
        menu_items='//XCUIElementTypeScrollView//XCUIElementTypeOther[@accessible="true"]',
        menu_item_by_label=(
            '//XCUIElementTypeScrollView//XCUIElementTypeOther'
            '[@accessible="true" and @name="{label}"]'
        ),
        menu_item_by_text='//*[@label="{label}"]',
        record_container="//XCUIElementTypeTable",
        record_items='//XCUIElementTypeTable//XCUIElementTypeCell[string-length(@name) > 0]',
        label_attribute="name",
    ),
}


@dataclass(frozen=True)
class AuditConfig:
    """Run-wide default configuration."""

    # ==========================================================================
    # App Under Test
    # ==========================================================================
    package: str = "com.bhive.workspace"
    platform: str = "android"
    app_settle_delay: float = 2.0

    # ==========================================================================
    # Reference API
    # ==========================================================================
    api_base_url: str = "https://stag.bhiveworkspace.com/api/v1"
    api_origin: str = "https://booking-stag.bhiveworkspace.com"
    api_referer: str = "https://booking-stag.bhiveworkspace.com/day-passes"
    api_app_version: str = "1.0.0"
    api_limit: int = 1000
    api_timeout: float = 30.0

    # ==========================================================================
    # Discovery
    # ==========================================================================
    screen_timeout: float = 15.0
    screen_poll_interval: float = 0.5
    menu_max_iterations: int = 10
    menu_max_stale: int = 1
    menu_start_swipes: int = 5
    menu_select_swipes: int = 10
    menu_settle_delay: float = 0.8
    record_max_iterations: int = 100
    record_max_stale: int = 3
    record_settle_delay: float = 2.0
    navigation_max_polls: int = 12
    navigation_poll_interval: float = 0.5
    menu_click_delay: float = 2.0

    # ==========================================================================
    # Validation & Reporting
    # ==========================================================================
    all_menu_label: str = "All"
    currency_symbol: str = "₹"
    discount_tier: str = "1"
    report_dir: str = "test-reports"

    locators: Locators = field(default=None)  # type: ignore[assignment]

    def __post_init__(self):
        if self.locators is None:
            object.__setattr__(self, "locators", Locators.for_platform(self.platform))

    def with_overrides(self, **changes) -> "AuditConfig":
        """Copy with changes; locators follow a platform change."""
        if "platform" in changes and "locators" not in changes:
            changes["locators"] = Locators.for_platform(changes["platform"])
        return replace(self, **changes)

    @classmethod
    def from_env(cls) -> "AuditConfig":
        """Create config from environment variables with defaults."""
        return cls(
            package=os.getenv("RECORD_AUDIT_PACKAGE", cls.package),
            platform=os.getenv("RECORD_AUDIT_PLATFORM", cls.platform),
            api_base_url=os.getenv("RECORD_AUDIT_API_BASE_URL", cls.api_base_url),
            api_origin=os.getenv("RECORD_AUDIT_API_ORIGIN", cls.api_origin),
            api_referer=os.getenv("RECORD_AUDIT_API_REFERER", cls.api_referer),
            api_app_version=os.getenv("RECORD_AUDIT_API_APP_VERSION", cls.api_app_version),
            api_limit=int(os.getenv("RECORD_AUDIT_API_LIMIT", cls.api_limit)),
            api_timeout=float(os.getenv("RECORD_AUDIT_API_TIMEOUT", cls.api_timeout)),
            screen_timeout=float(os.getenv("RECORD_AUDIT_SCREEN_TIMEOUT", cls.screen_timeout)),
            screen_poll_interval=float(
                os.getenv("RECORD_AUDIT_SCREEN_POLL_INTERVAL", cls.screen_poll_interval)
            ),
            record_max_iterations=int(
                os.getenv("RECORD_AUDIT_RECORD_MAX_ITERATIONS", cls.record_max_iterations)
            ),
            report_dir=os.getenv("RECORD_AUDIT_REPORT_DIR", cls.report_dir),
        )
