"""
Run orchestration and command line entry point.

Two run modes share the same navigation loop:

* ``validate`` - reconcile every record of every menu against the centers API
* ``survey`` - only count the records found under each menu
"""
import argparse
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from .config import AuditConfig
from .core.app import prepare_app
from .core.device_manager import DeviceManager
from .core.driver import UIDriver
from .core.exceptions import AuditError, LookupFailure, ValidationFailedError
from .core.polling import wait_for_element
from .discovery.menus import MenuDiscovery
from .discovery.navigation import NavigationChangeDetector
from .discovery.records import Record, RecordDiscovery
from .logging_setup import configure_logging, timestamped_log_name
from .report import AuditReporter, ReportPaths
from .validation.api import CentersClient
from .validation.models import CenterRecord, ValidationResult
from .validation.reconciler import RecordReconciler

logger = logging.getLogger(__name__)


@dataclass
class RunOutcome:
    """Result of a validation run."""

    summary: Dict[str, float]
    failures: List[ValidationResult] = field(default_factory=list)
    menus: List[str] = field(default_factory=list)
    report_paths: Optional[ReportPaths] = None

    @property
    def passed(self) -> bool:
        return not self.failures

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1

    def raise_for_failures(self) -> None:
        if self.failures:
            raise ValidationFailedError(self.failures)


@dataclass
class SurveyResult:
    """Record counts per menu for a survey run."""

    menus: List[str]
    records: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def missed(self) -> List[str]:
        return [menu for menu in self.menus if menu not in self.records]

    @property
    def total_records(self) -> int:
        return sum(len(found) for found in self.records.values())

    @property
    def average_records(self) -> float:
        return self.total_records / len(self.records) if self.records else 0.0

    @property
    def success_rate(self) -> float:
        return len(self.records) / len(self.menus) * 100 if self.menus else 0.0

    @property
    def passed(self) -> bool:
        return bool(self.menus) and not self.missed

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1


class _MenuWalker:
    """Shared menu loop: discover menus, select each, wait for its list."""

    def __init__(
        self,
        driver: UIDriver,
        config: Optional[AuditConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None,
    ):
        self.driver = driver
        self.config = config or AuditConfig()
        self.sleep = sleep
        self.logger = logger or logging.getLogger(__name__)
        self.menus = MenuDiscovery(driver, self.config, sleep=sleep, logger=self.logger)
        self.records = RecordDiscovery(driver, self.config, sleep=sleep, logger=self.logger)
        self.navigation = NavigationChangeDetector(
            self.records.visible_descriptions, sleep=sleep, logger=self.logger
        )

    def _snapshot(self) -> List[str]:
        try:
            return self.records.visible_descriptions()
        except (LookupFailure, RuntimeError) as e:
            self.logger.debug(f"[NAVIGATION] Initial snapshot unavailable: {e}")
            return []

    def walk(self, visit: Callable[[str], None]) -> List[str]:
        """Call ``visit(menu)`` for every menu that could be opened.

        Returns the discovered menu labels; menus that cannot be selected
        are logged and skipped.
        """
        menus = self.menus.discover()
        if not menus:
            self.logger.warning("[PROCESSING] No menus discovered")
            return menus

        previous = self._snapshot()
        for index, menu in enumerate(menus, start=1):
            self.logger.info(f"[PROCESSING] Menu {index}/{len(menus)}: {menu}")
            try:
                if not self.menus.select(menu):
                    self.logger.warning(f"[PROCESSING] Skipping menu '{menu}': could not select it")
                    continue
            except (LookupFailure, RuntimeError) as e:
                self.logger.error(f"[PROCESSING] Skipping menu '{menu}': {e}")
                continue

            changed = self.navigation.await_list_changed(
                previous,
                max_polls=self.config.navigation_max_polls,
                poll_interval=self.config.navigation_poll_interval,
            )
            previous = changed if changed is not None else self._snapshot()
            visit(menu)
        return menus


class RecordValidationRun:
    """Validates every record of every menu against the reference API."""

    def __init__(
        self,
        driver: UIDriver,
        config: Optional[AuditConfig] = None,
        client: Optional[CentersClient] = None,
        reporter: Optional[AuditReporter] = None,
        reference_data: Optional[Sequence[CenterRecord]] = None,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config or AuditConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.client = client
        self.reference_data = list(reference_data) if reference_data is not None else None
        self.reporter = reporter or AuditReporter(logger=self.logger)
        self.reconciler = RecordReconciler(self.config, logger=self.logger)
        self.walker = _MenuWalker(driver, self.config, sleep=sleep, logger=self.logger)

    def load_reference_data(self) -> List[CenterRecord]:
        """Fetch centers unless they were supplied up front.

        Raises:
            ReferenceDataError: The API could not be read
        """
        if self.reference_data is None:
            client = self.client or CentersClient(self.config, logger=self.logger)
            self.reference_data = client.fetch_centers()
        return self.reference_data

    def validate_menu(self, menu: str, reference_data: Sequence[CenterRecord]) -> List[ValidationResult]:
        """Reconcile each record of the selected menu while it is on screen."""
        results: List[ValidationResult] = []

        def on_new_record(record: Record) -> None:
            results.append(
                self.reconciler.reconcile(
                    record, menu, reference_data, record_index=len(results) + 1
                )
            )

        self.walker.records.discover(on_new_record=on_new_record)
        self.reporter.add_menu_result(menu, results)
        return results

    def run(self, report_dir: Optional[str] = None) -> RunOutcome:
        """Run the whole validation.

        A reference data failure is raised before any menu is touched.
        Record mismatches never raise; they are collected in the outcome.
        """
        self.reporter.start()
        reference_data = self.load_reference_data()

        menus = self.walker.walk(lambda menu: self.validate_menu(menu, reference_data))

        self.reporter.end()
        self.reporter.log_console_summary()
        paths = self.reporter.save_report(report_dir) if report_dir else None
        return RunOutcome(
            summary=self.reporter.summary,
            failures=self.reporter.failures,
            menus=menus,
            report_paths=paths,
        )


class MenuSurvey:
    """Counts the records under each menu without validating them."""

    def __init__(
        self,
        driver: UIDriver,
        config: Optional[AuditConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None,
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.walker = _MenuWalker(driver, config, sleep=sleep, logger=self.logger)

    def run(self) -> SurveyResult:
        found: Dict[str, List[str]] = {}

        def visit(menu: str) -> None:
            records = self.walker.records.discover()
            found[menu] = [record.description for record in records]
            self.logger.info(f"[SUMMARY] Records for menu '{menu}': {found[menu]}")

        menus = self.walker.walk(visit)
        result = SurveyResult(menus=menus, records=found)
        self._log_summary(result)
        return result

    def _log_summary(self, result: SurveyResult) -> None:
        log = self.logger
        log.info("===== FINAL MENU RECORDS SUMMARY =====")
        log.info(f"[SUMMARY] Discovered menus: {len(result.menus)} - [{', '.join(result.menus)}]")
        log.info(f"[SUMMARY] Successfully processed menus: {len(result.records)}")
        if result.missed:
            log.warning(f"[WARNING] Missed menus: {len(result.missed)} - [{', '.join(result.missed)}]")
        log.info(f"[METRICS] Total Records Found: {result.total_records}")
        log.info(f"[METRICS] Average Records per Menu: {result.average_records:.2f}")
        log.info(f"[METRICS] Success Rate: {result.success_rate:.2f}%")
        for menu, records in result.records.items():
            log.info(f"[MENU_RESULT] Menu: {menu} | Records: {len(records)}")
        log.info(f"[TEST_RESULT] Test Status: {'PASSED' if result.passed else 'FAILED'}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="record_audit",
        description="Audit the menu/record screens of a mobile app against the centers API.",
    )
    parser.add_argument(
        "mode",
        nargs="?",
        choices=("validate", "survey"),
        default="validate",
        help="validate records against the API (default) or only count them",
    )
    parser.add_argument("--device-id", help="Device serial (default: the only attached device)")
    parser.add_argument("--package", help="Package name of the app under test")
    parser.add_argument("--base-url", help="Centers API base URL")
    parser.add_argument("--limit", type=int, help="Maximum centers requested from the API")
    parser.add_argument("--platform", choices=("android", "ios"), help="Locator set to use")
    parser.add_argument("--report-dir", help="Directory for JSON/HTML reports")
    parser.add_argument("--log-file", help="Log file path (default: logs/<run>_<timestamp>.log)")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def config_from_args(args: argparse.Namespace, base: Optional[AuditConfig] = None) -> AuditConfig:
    """Apply command line overrides on top of the environment defaults."""
    base = base or AuditConfig.from_env()
    overrides = {
        "package": args.package,
        "api_base_url": args.base_url,
        "api_limit": args.limit,
        "platform": args.platform,
        "report_dir": args.report_dir,
    }
    return base.with_overrides(**{k: v for k, v in overrides.items() if v is not None})


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = config_from_args(args)

    run_name = "recordValidation" if args.mode == "validate" else "menuSurvey"
    log_file = args.log_file or Path("logs") / timestamped_log_name(run_name)
    log = configure_logging(log_file, level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        driver = DeviceManager(logger=log).connect(args.device_id)
        prepare_app(driver, config.package, settle_delay=config.app_settle_delay, logger=log)
        wait_for_element(
            driver,
            config.locators.menu_container,
            timeout=config.screen_timeout,
            poll_interval=config.screen_poll_interval,
            required=True,
        )
        if args.mode == "survey":
            return MenuSurvey(driver, config, logger=log).run().exit_code
        outcome = RecordValidationRun(driver, config, logger=log).run(report_dir=config.report_dir)
        outcome.raise_for_failures()
    except ValidationFailedError as e:
        log.error(str(e))
        for line in e.details["failures"]:
            log.error(f"  {line}")
        return 1
    except AuditError as e:
        log.error(f"Run aborted: {e}")
        return 1
    return 0
