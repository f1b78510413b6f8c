"""Validation orchestrator: compiler diagnostics + pattern rules -> Report."""

import logging
from pathlib import Path
from typing import Awaitable, Callable, Iterable, Optional

from .compiler import CompilerDiagnosticsAdapter
from .globs import read_file_text, walk_project_files
from .models import Finding, Report
from .rules import all_targets, categories_for, run_rules
from .sink import ReportSink

logger = logging.getLogger(__name__)


class ValidationOrchestrator:
    """Runs full or single-file validations, one at a time.

    A trigger that arrives while a run is in progress is dropped rather than
    queued; the periodic full run catches anything missed.
    """

    def __init__(
        self,
        project_root: str | Path,
        adapter: CompilerDiagnosticsAdapter,
        sink: Optional[ReportSink] = None,
        exclude_globs: Iterable[str] = (),
    ):
        self.project_root = Path(project_root)
        self.adapter = adapter
        self.sink = sink
        self.exclude_globs = tuple(exclude_globs)
        self._in_progress = False

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    def relative_path(self, path: str | Path) -> str:
        path = Path(path)
        if path.is_absolute():
            try:
                path = path.relative_to(self.project_root)
            except ValueError:
                pass
        return path.as_posix()

    def check_file(self, relative_path: str) -> Optional[list[Finding]]:
        """Pattern findings for one file, or None if it could not be read."""
        content = read_file_text(self.project_root / relative_path)
        if content is None:
            return None
        findings: list[Finding] = []
        for category in categories_for(relative_path):
            findings.extend(run_rules(category, relative_path, content))
        return findings

    async def run_full(self) -> Optional[Report]:
        return await self._guarded("full", self._full)

    async def run_targeted(self, path: str | Path) -> Optional[Report]:
        relative = self.relative_path(path)
        return await self._guarded(f"targeted ({relative})", lambda: self._targeted(relative))

    async def _guarded(self, label: str, run: Callable[[], Awaitable[Report]]) -> Optional[Report]:
        if self._in_progress:
            logger.info(f"Validation already running; dropping {label} trigger")
            return None

        self._in_progress = True
        logger.info(f"Starting {label} validation")
        try:
            report = await run()
        except Exception:
            logger.exception(f"{label} validation aborted")
            raise
        finally:
            self._in_progress = False

        logger.info(
            f"Finished {label} validation: {len(report.errors)} errors, "
            f"{len(report.warnings)} warnings, {report.files_checked} files"
        )
        if self.sink is not None:
            self.sink.publish(report)
        return report

    async def _compiler_findings(self, include_build: bool) -> list[Finding]:
        findings = await self.adapter.invoke_type_check()
        # A type error makes the build result uninformative.
        if include_build and not findings:
            findings.extend(await self.adapter.invoke_build_check())
        return findings

    async def _full(self) -> Report:
        findings = await self._compiler_findings(include_build=True)

        files_checked = 0
        for relative in walk_project_files(self.project_root, all_targets(), self.exclude_globs):
            file_findings = self.check_file(relative)
            if file_findings is None:
                continue
            files_checked += 1
            findings.extend(file_findings)

        return Report.build(findings, files_checked)

    async def _targeted(self, relative: str) -> Report:
        # The type checker has no single-file mode; run it project-wide.
        findings = await self._compiler_findings(include_build=False)

        files_checked = 0
        if categories_for(relative):
            file_findings = self.check_file(relative)
            if file_findings is not None:
                files_checked = 1
                findings.extend(file_findings)

        return Report.build(findings, files_checked)
