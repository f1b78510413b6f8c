"""Configuration security rules.

Detects:
- verify_jwt = false in supabase/config.toml
- package.json without zod for runtime schema validation
"""

import json
import logging
import re

from ..models import Category, Finding, RuleDefinition, Severity
from . import fixes

logger = logging.getLogger(__name__)

CONFIG_FILES = ("supabase/config.toml",)
DEPENDENCY_MANIFEST = ("package.json",)

JWT_DISABLED = re.compile(r"^\s*verify_jwt\s*=\s*false\b")

VALIDATION_LIBRARY = "zod"


def detect_jwt_verification_disabled(content: str, path: str) -> list[Finding]:
    findings = []
    for line_num, line in enumerate(content.split("\n"), start=1):
        if JWT_DISABLED.search(line):
            findings.append(Finding(
                rule_id="jwt-verification-disabled",
                category=Category.config_security,
                severity=Severity.error,
                file_path=path,
                line=line_num,
                message="JWT verification disabled in config",
            ))
    return findings


def detect_missing_validation_dependency(content: str, path: str) -> list[Finding]:
    try:
        manifest = json.loads(content)
    except json.JSONDecodeError as e:
        logger.warning(f"Could not parse {path}: {e}")
        manifest = {}

    declared: dict = {}
    if isinstance(manifest, dict):
        for section in ("dependencies", "devDependencies"):
            deps = manifest.get(section)
            if isinstance(deps, dict):
                declared.update(deps)

    if VALIDATION_LIBRARY in declared:
        return []
    return [Finding(
        rule_id="missing-validation-dependency",
        category=Category.config_security,
        severity=Severity.warning,
        file_path=path,
        message="Zod validation library not found",
    )]


RULES = [
    RuleDefinition(
        id="jwt-verification-disabled",
        category=Category.config_security,
        targets=CONFIG_FILES,
        severity=Severity.error,
        detector=detect_jwt_verification_disabled,
        fix=fixes.jwt_fix,
    ),
    RuleDefinition(
        id="missing-validation-dependency",
        category=Category.config_security,
        targets=DEPENDENCY_MANIFEST,
        severity=Severity.warning,
        detector=detect_missing_validation_dependency,
        fix=fixes.zod_fix,
    ),
]
