"""Frontend security rules for application source files.

Detects:
- dangerouslySetInnerHTML without a DOMPurify sanitizer
- Hardcoded secrets (vendor key prefixes or long alphanumeric runs)
- Roles read from localStorage/sessionStorage
- fetch() calls without an abort signal
"""

import re

from ..globs import find_line_number
from ..models import Category, Finding, RuleDefinition, Severity
from . import fixes

FRONTEND_FILES = ("src/**/*.{ts,tsx}",)

# Vendor prefixes first so the reported line favours them over the generic run.
# The generic 32+ character pattern also matches hashes and long identifiers;
# it is kept deliberately broad.
SECRET_PATTERNS = [
    re.compile(r"sk-[a-zA-Z0-9]{20,}"),
    re.compile(r"pk_[a-zA-Z0-9]{20,}"),
    re.compile(r"[a-zA-Z0-9]{32,}"),
]

CLIENT_ROLE_READ = re.compile(
    r"""(?:localStorage|sessionStorage)\.getItem\(\s*['"]role['"]\s*\)""",
)


def _finding(
    rule_id: str,
    severity: Severity,
    path: str,
    message: str,
    line: int | None = None,
) -> Finding:
    return Finding(
        rule_id=rule_id,
        category=Category.frontend_security,
        severity=severity,
        file_path=path,
        line=line,
        message=message,
    )


def _line_of(content: str, offset: int) -> int:
    return content.count("\n", 0, offset) + 1


def detect_unsafe_html_injection(content: str, path: str) -> list[Finding]:
    if "dangerouslySetInnerHTML" not in content or "DOMPurify" in content:
        return []
    return [_finding(
        "unsafe-html-injection",
        Severity.error,
        path,
        "dangerouslySetInnerHTML used without sanitization (XSS risk)",
        find_line_number(content, "dangerouslySetInnerHTML"),
    )]


def detect_hardcoded_secret(content: str, path: str) -> list[Finding]:
    for pattern in SECRET_PATTERNS:
        match = pattern.search(content)
        if match:
            return [_finding(
                "hardcoded-secret",
                Severity.error,
                path,
                "Potential hardcoded secret found",
                _line_of(content, match.start()),
            )]
    return []


def detect_client_side_role_check(content: str, path: str) -> list[Finding]:
    match = CLIENT_ROLE_READ.search(content)
    if not match:
        return []
    return [_finding(
        "client-side-role-check",
        Severity.warning,
        path,
        "Client-side role validation detected - use server-side validation for access control",
        _line_of(content, match.start()),
    )]


def detect_fetch_without_timeout(content: str, path: str) -> list[Finding]:
    if "fetch(" not in content:
        return []
    if "AbortController" in content or "signal:" in content:
        return []
    return [_finding(
        "fetch-without-timeout",
        Severity.warning,
        path,
        "fetch() call without timeout detected",
        find_line_number(content, "fetch("),
    )]


RULES = [
    RuleDefinition(
        id="unsafe-html-injection",
        category=Category.frontend_security,
        targets=FRONTEND_FILES,
        severity=Severity.error,
        detector=detect_unsafe_html_injection,
        fix=fixes.sanitize_html_fix,
    ),
    RuleDefinition(
        id="hardcoded-secret",
        category=Category.frontend_security,
        targets=FRONTEND_FILES,
        severity=Severity.error,
        detector=detect_hardcoded_secret,
        fix=fixes.secret_fix,
    ),
    RuleDefinition(
        id="client-side-role-check",
        category=Category.frontend_security,
        targets=FRONTEND_FILES,
        severity=Severity.warning,
        detector=detect_client_side_role_check,
        fix=fixes.server_role_fix,
    ),
    RuleDefinition(
        id="fetch-without-timeout",
        category=Category.frontend_security,
        targets=FRONTEND_FILES,
        severity=Severity.warning,
        detector=detect_fetch_without_timeout,
        fix=fixes.fetch_timeout_fix,
    ),
]
