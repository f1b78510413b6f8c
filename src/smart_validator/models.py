"""Pydantic models for smart-validator."""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """Severity levels for findings.

    ``error`` is reserved for build-breaking or exploitable conditions and
    fails a run. Everything heuristic is a ``warning``.
    """

    error = "error"
    warning = "warning"


class Category(str, Enum):
    """Rule categories."""

    jsx_correctness = "jsx-correctness"
    edge_function_security = "edge-function-security"
    database_security = "database-security"
    frontend_security = "frontend-security"
    config_security = "config-security"


class Finding(BaseModel):
    """A single issue found by the compiler adapter or a pattern rule."""

    model_config = ConfigDict(frozen=True)

    rule_id: str = Field(description="Identifier of the rule that produced the finding")
    category: Category = Field(description="Category of the finding")
    severity: Severity = Field(description="Severity level")
    file_path: str = Field(description="Project-relative path of the offending file")
    line: Optional[int] = Field(default=None, description="Line number, if known")
    message: str = Field(description="Human-readable description")
    fix_suggestion: Optional[str] = Field(default=None, description="Literal code snippet that fixes the issue")

    def render(self) -> str:
        """Render as ``file:line - message``."""
        location = self.file_path if self.line is None else f"{self.file_path}:{self.line}"
        return f"{location} - {self.message}"


class Report(BaseModel):
    """Aggregated, immutable result of one validation run."""

    model_config = ConfigDict(frozen=True)

    timestamp: str = Field(description="ISO-8601 UTC time the report was produced")
    files_checked: int = Field(default=0, description="Number of files pattern rules were applied to")
    findings: tuple[Finding, ...] = Field(default=(), description="Ordered findings")
    success: bool = Field(description="True when no finding has error severity")

    @classmethod
    def build(cls, findings: list[Finding], files_checked: int) -> "Report":
        return cls(
            timestamp=datetime.now(timezone.utc).isoformat(),
            files_checked=files_checked,
            findings=tuple(findings),
            success=not any(f.severity == Severity.error for f in findings),
        )

    @property
    def errors(self) -> list[Finding]:
        return [f for f in self.findings if f.severity == Severity.error]

    @property
    def warnings(self) -> list[Finding]:
        return [f for f in self.findings if f.severity == Severity.warning]

    def to_persisted(self) -> dict:
        """Shape written to the report file."""
        return {
            "timestamp": self.timestamp,
            "filesChecked": self.files_checked,
            "realErrors": [f.render() for f in self.errors],
            "warnings": [f.render() for f in self.warnings],
            "success": self.success,
        }


Detector = Callable[[str, str], list[Finding]]


class RuleDefinition(NamedTuple):
    """A named, pure detector for one issue category."""

    id: str
    category: Category
    targets: tuple[str, ...]
    severity: Severity
    detector: Detector
    fix: Optional[Callable[[], str]] = None


@dataclass
class WatchState:
    """Debounce bookkeeping owned by the scheduler."""

    pending_file: Optional[str] = None
    debounce_handle: Optional[asyncio.TimerHandle] = None
    last_full_run: Optional[datetime] = None

    def reset_cycle(self) -> None:
        self.pending_file = None
        self.debounce_handle = None
