"""Per-run report: accumulates ValidationResults and renders JSON / HTML."""
import html
import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from .validation.models import FAIL, PASS, SUGGESTION, ValidationResult

logger = logging.getLogger(__name__)


@dataclass
class MenuSummary:
    """Totals and results for one menu."""

    name: str
    results: List[ValidationResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.status == PASS)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status == FAIL)

    @property
    def pass_rate(self) -> float:
        return round(self.passed / self.total * 100, 1) if self.total else 0.0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "totalRecords": self.total,
            "passedRecords": self.passed,
            "failedRecords": self.failed,
            "passRate": self.pass_rate,
            "records": [r.to_dict() for r in self.results],
        }


@dataclass
class ReportPaths:
    json_path: Path
    html_path: Path


class AuditReporter:
    """Collects results per menu for a single run."""

    def __init__(
        self,
        title: str = "Record Details Validation",
        logger: Optional[logging.Logger] = None,
        clock=time.time,
    ):
        self.title = title
        self.logger = logger or logging.getLogger(__name__)
        self._clock = clock
        self.menus: Dict[str, MenuSummary] = {}
        self.started_at: Optional[float] = None
        self.ended_at: Optional[float] = None

    def start(self) -> None:
        self.started_at = self._clock()

    def end(self) -> None:
        self.ended_at = self._clock()

    @property
    def duration(self) -> float:
        if self.started_at is None:
            return 0.0
        end = self.ended_at if self.ended_at is not None else self._clock()
        return max(0.0, end - self.started_at)

    def add_menu_result(self, menu_name: str, results: Sequence[ValidationResult]) -> None:
        menu = self.menus.setdefault(menu_name, MenuSummary(menu_name))
        menu.results.extend(results)

    @property
    def results(self) -> List[ValidationResult]:
        return [r for menu in self.menus.values() for r in menu.results]

    @property
    def failures(self) -> List[ValidationResult]:
        return [r for r in self.results if r.status == FAIL]

    @property
    def summary(self) -> Dict[str, Any]:
        results = self.results
        return {
            "total": len(results),
            "passed": sum(1 for r in results if r.status == PASS),
            "failed": sum(1 for r in results if r.status == FAIL),
            "duration": round(self.duration, 3),
        }

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "summary": self.summary,
            "startTime": _iso(self.started_at),
            "endTime": _iso(self.ended_at),
            "menus": {name: menu.to_dict() for name, menu in self.menus.items()},
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    def log_console_summary(self) -> None:
        summary = self.summary
        self.logger.info("===== TEST SUMMARY =====")
        self.logger.info(f"Total records checked: {summary['total']}")
        self.logger.info(f"Passed: {summary['passed']}")
        self.logger.info(f"Failed: {summary['failed']}")
        for menu in self.menus.values():
            self.logger.info(
                f"[MENU_RESULT] Menu: {menu.name} | Records: {menu.total} "
                f"| Passed: {menu.passed} | Failed: {menu.failed} | Pass Rate: {menu.pass_rate}%"
            )

        failures = self.failures
        if not failures:
            self.logger.info("All records validated successfully!")
            return
        self.logger.error("===== FAILED RECORDS =====")
        for fail in failures:
            self.logger.error(
                f"Menu: {fail.menu_name} | Record: {fail.record_name} | Reasons: {'; '.join(fail.reasons)}"
            )
            for line in fail.details:
                self.logger.error(f"  {line}")

    def render_html(self) -> str:
        summary = self.summary
        sections = "\n".join(_render_menu(menu) for menu in self.menus.values())
        generated = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        return _HTML_TEMPLATE.format(
            title=html.escape(self.title),
            total=summary["total"],
            passed=summary["passed"],
            failed=summary["failed"],
            duration=_format_duration(summary["duration"]),
            sections=sections or "<p><em>No menus processed</em></p>",
            generated=generated,
        )

    def save_report(self, directory: Union[str, Path]) -> ReportPaths:
        """Write JSON and HTML artefacts with a timestamped base name."""
        out_dir = Path(directory)
        out_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        paths = ReportPaths(
            json_path=out_dir / f"test-report-{stamp}.json",
            html_path=out_dir / f"test-report-{stamp}.html",
        )
        paths.json_path.write_text(self.to_json(), encoding="utf-8")
        paths.html_path.write_text(self.render_html(), encoding="utf-8")
        self.logger.info(f"Test report saved to: {paths.html_path}")
        return paths


def _iso(timestamp: Optional[float]) -> Optional[str]:
    return datetime.fromtimestamp(timestamp).isoformat() if timestamp is not None else None


def _format_duration(seconds: float) -> str:
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m {secs}s" if minutes else f"{secs}s"


_STATUS_CLASS = {PASS: "status-pass", FAIL: "status-fail", SUGGESTION: "status-suggestion"}


def _badge(status: str) -> str:
    css = _STATUS_CLASS.get(status, "status-suggestion")
    return f'<span class="status-badge {css}">{html.escape(status)}</span>'


def _render_checks(result: ValidationResult) -> str:
    if not result.checks:
        return "<em>No checks performed</em>"
    items = "".join(
        f"<li><span class=\"check-field\">{html.escape(c.field)}</span> {_badge(c.status)}"
        f"<div class=\"check-values\">Expected: {html.escape(c.expected)} | "
        f"Actual: {html.escape(c.actual)}</div></li>"
        for c in result.checks
    )
    return f'<ul class="details-list">{items}</ul>'


def _render_details(result: ValidationResult) -> str:
    lines = [d for d in result.details if not d.startswith("[CHECK]")]
    if result.reasons:
        lines.append("Reasons: " + "; ".join(result.reasons))
    if not lines:
        return ""
    return '<ul class="details-list">' + "".join(f"<li>{html.escape(line)}</li>" for line in lines) + "</ul>"


def _render_menu(menu: MenuSummary) -> str:
    rows = "\n".join(
        f"<tr><td><strong>{html.escape(r.record_name)}</strong></td>"
        f"<td>{_badge(r.status)}</td>"
        f"<td>{_render_checks(r)}</td>"
        f"<td>{_render_details(r)}</td></tr>"
        for r in menu.results
    )
    return f"""
<div class="menu-section">
  <div class="menu-header">
    <h3>{html.escape(menu.name)}</h3>
    <div class="menu-stats">
      <span class="stat total">Total: {menu.total}</span>
      <span class="stat passed">Passed: {menu.passed}</span>
      <span class="stat failed">Failed: {menu.failed}</span>
      <span class="stat">Pass Rate: {menu.pass_rate}%</span>
    </div>
  </div>
  <table class="records-table">
    <thead><tr><th>Record Name</th><th>Status</th><th>Checks</th><th>Details</th></tr></thead>
    <tbody>
{rows}
    </tbody>
  </table>
</div>"""


_HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>{title}</title>
<style>
body {{ font-family: sans-serif; margin: 20px; }}
.summary-cards {{ display: flex; gap: 20px; }}
.records-table {{ width: 100%; border-collapse: collapse; }}
.records-table td, .records-table th {{ border-bottom: 1px solid #ddd; padding: 6px; vertical-align: top; }}
.status-pass {{ color: #28a745; }}
.status-fail {{ color: #dc3545; }}
.status-suggestion {{ color: #b8860b; }}
</style>
</head>
<body>
<h1>{title}</h1>
<div class="summary-cards">
  <div class="summary-card total"><h3>{total}</h3><p>Total Records</p></div>
  <div class="summary-card passed"><h3>{passed}</h3><p>Passed</p></div>
  <div class="summary-card failed"><h3>{failed}</h3><p>Failed</p></div>
  <div class="summary-card duration"><h3>{duration}</h3><p>Duration</p></div>
</div>
{sections}
<p class="footer">Report generated on {generated}</p>
</body>
</html>
"""
