"""Compiler diagnostics adapter.

Runs the project's type checker and development build as subprocesses and
turns their output into error findings. Only diagnostics that can be pinned
to a component file become findings; everything else in the output is noise
for our purposes.
"""

import asyncio
import logging
import re
from pathlib import Path
from typing import Optional

from .errors import InfrastructureError
from .models import Category, Finding, Severity

logger = logging.getLogger(__name__)

BUILD_OUTPUT_LIMIT = 500

# src/App.tsx(12,5): error TS2322: Type 'string' is not assignable to type 'number'.
TYPE_ERROR_LINE = re.compile(
    r"^(?P<file>.+\.(?:tsx|jsx))\((?P<line>\d+),(?P<col>\d+)\):\s*error\s+(?P<code>TS\d+):\s*(?P<message>.+)$"
)


def parse_type_errors(output: str) -> list[Finding]:
    """Extract component-file type errors from type checker output."""
    findings = []
    for raw_line in output.splitlines():
        match = TYPE_ERROR_LINE.match(raw_line.strip())
        if not match:
            continue
        findings.append(Finding(
            rule_id="typescript-error",
            category=Category.jsx_correctness,
            severity=Severity.error,
            file_path=match.group("file").replace("\\", "/"),
            line=int(match.group("line")),
            message=f"{match.group('code')} (col {match.group('col')}): {match.group('message').strip()}",
        ))
    return findings


def parse_build_failure(returncode: int, output: str) -> Optional[Finding]:
    """One aggregate finding for a failed build, if the output mentions an error."""
    if returncode == 0 or "error" not in output.lower():
        return None
    return Finding(
        rule_id="build-failure",
        category=Category.jsx_correctness,
        severity=Severity.error,
        file_path="(build)",
        message=f"Build failed: {output[:BUILD_OUTPUT_LIMIT]}",
    )


class CompilerDiagnosticsAdapter:
    """Invokes the type checker and build tool for one project."""

    def __init__(
        self,
        project_root: str | Path,
        type_check_command: list[str],
        build_command: list[str],
    ):
        self.project_root = Path(project_root)
        self.type_check_command = list(type_check_command)
        self.build_command = list(build_command)

    async def _run(self, command: list[str]) -> tuple[int, str]:
        """Run a command in the project root; return (exit code, combined output)."""
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                cwd=self.project_root,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
            stdout, _ = await process.communicate()
        except FileNotFoundError as e:
            raise InfrastructureError(command, f"command not found ({e})") from e
        except OSError as e:
            raise InfrastructureError(command, str(e)) from e
        return process.returncode, stdout.decode("utf-8", errors="replace")

    async def invoke_type_check(self) -> list[Finding]:
        logger.info("Checking TypeScript compilation...")
        returncode, output = await self._run(self.type_check_command)
        if returncode == 0:
            logger.info("TypeScript compilation successful")
            return []

        findings = parse_type_errors(output)
        logger.info(f"Type checker exited with {returncode}; {len(findings)} component errors")
        return findings

    async def invoke_build_check(self) -> list[Finding]:
        logger.info("Checking build compilation...")
        returncode, output = await self._run(self.build_command)
        if returncode == 0:
            logger.info("Build compilation successful")
            return []

        finding = parse_build_failure(returncode, output)
        if finding is None:
            logger.warning(f"Build exited with {returncode} but reported no errors")
            return []
        return [finding]
