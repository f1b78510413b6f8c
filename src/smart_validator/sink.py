"""Report persistence, console summary and notifications."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

from .models import Finding, Report
from .notifier import Notifier, NullNotifier

logger = logging.getLogger(__name__)

NOTIFICATION_TITLE = "smart-validator"


class ReportSink:
    """Persists each report and notifies about errors not seen in the previous one."""

    def __init__(
        self,
        report_path: str | Path,
        notifier: Optional[Notifier] = None,
        echo: bool = False,
        show_fixes: bool = False,
    ):
        self.report_path = Path(report_path)
        self.notifier = notifier or NullNotifier()
        # echo prints a summary on every publish (watch mode)
        self.echo = echo
        self.show_fixes = show_fixes
        self._previous_errors: set[str] = self._load_previous_errors()

    def _load_previous_errors(self) -> set[str]:
        if not self.report_path.exists():
            return set()
        try:
            with open(self.report_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return {str(item) for item in data.get("realErrors", [])}
        except (json.JSONDecodeError, OSError, AttributeError) as e:
            logger.debug(f"Ignoring unreadable previous report {self.report_path}: {e}")
            return set()

    def persist(self, report: Report) -> bool:
        """Overwrite the report file. Failures are logged, not raised."""
        try:
            self.report_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.report_path, "w", encoding="utf-8") as f:
                json.dump(report.to_persisted(), f, indent=2)
        except OSError as e:
            logger.error(f"Could not save report to {self.report_path}: {e}")
            return False
        logger.info(f"Report saved to {self.report_path}")
        return True

    def new_errors(self, report: Report) -> list[Finding]:
        return [f for f in report.errors if f.render() not in self._previous_errors]

    def notify(self, findings: list[Finding]) -> None:
        if not findings:
            return
        count = len(findings)
        noun = "error" if count == 1 else "errors"
        message = f"{count} new {noun}: {findings[0].render()}"
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._deliver(message)
            return
        # Desktop commands block; keep them off the event loop.
        loop.run_in_executor(None, self._deliver, message)

    def _deliver(self, message: str) -> None:
        try:
            self.notifier.notify(NOTIFICATION_TITLE, message)
        except Exception as e:
            logger.warning(f"Notification failed ({e}): {message}")

    def publish(self, report: Report) -> None:
        fresh = self.new_errors(report)
        self.persist(report)
        self.notify(fresh)
        self._previous_errors = {f.render() for f in report.errors}
        if self.echo:
            self.render_summary(report, show_fixes=self.show_fixes)

    def render_summary(self, report: Report, show_fixes: bool = False) -> str:
        """Print and return a categorized summary of the report."""
        lines = [
            "SMART VALIDATION REPORT",
            "=" * 50,
            f"Files checked: {report.files_checked}",
            f"Errors: {len(report.errors)}",
            f"Warnings: {len(report.warnings)}",
        ]

        for title, findings in (("ERRORS", report.errors), ("WARNINGS", report.warnings)):
            if not findings:
                continue
            lines.append("")
            lines.append(f"{title} ({len(findings)}):")
            for index, finding in enumerate(findings, start=1):
                lines.append(f"  {index}. [{finding.rule_id}] {finding.render()}")
                if show_fixes and finding.fix_suggestion:
                    lines.append("     Fix:")
                    lines.extend(f"       {fix_line}" for fix_line in finding.fix_suggestion.split("\n"))

        lines.append("")
        if report.errors:
            lines.append(f"Validation failed with {len(report.errors)} errors.")
            if not show_fixes:
                lines.append("Run with --fix to see suggested fixes.")
        elif report.warnings:
            lines.append(f"Validation passed with {len(report.warnings)} warnings.")
        else:
            lines.append("All checks passed!")

        summary = "\n".join(lines)
        print(summary)
        return summary
