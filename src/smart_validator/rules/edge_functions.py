"""Security rules for Supabase edge function handlers.

Detects:
- Handlers that never resolve the authenticated user
- Missing CORS headers
- JSON bodies parsed without any validation
- Request bodies written to the console
- Outbound fetch calls without a domain allow-list (SSRF)
- Image payloads accepted without a size limit
"""

from pathlib import PurePosixPath

from ..globs import find_line_number
from ..models import Category, Finding, RuleDefinition, Severity
from . import fixes

SERVER_HANDLERS = ("supabase/functions/**/index.ts",)

AUTH_CALL = "supabase.auth.getUser()"
HANDLER_ENTRY = "serve(async"


def _function_name(path: str) -> str:
    return PurePosixPath(path).parent.name or path


def _finding(
    rule_id: str,
    severity: Severity,
    path: str,
    message: str,
    line: int | None = None,
) -> Finding:
    return Finding(
        rule_id=rule_id,
        category=Category.edge_function_security,
        severity=severity,
        file_path=path,
        line=line,
        message=message,
    )


def detect_missing_auth_check(content: str, path: str) -> list[Finding]:
    if AUTH_CALL in content:
        return []
    return [_finding(
        "missing-auth-check",
        Severity.error,
        path,
        f"Edge Function '{_function_name(path)}' lacks authentication check",
        find_line_number(content, HANDLER_ENTRY),
    )]


def detect_missing_cors_headers(content: str, path: str) -> list[Finding]:
    if "corsHeaders" in content or "Access-Control-Allow-Origin" in content:
        return []
    return [_finding(
        "missing-cors-headers",
        Severity.warning,
        path,
        f"Edge Function '{_function_name(path)}' may lack proper CORS headers",
    )]


def detect_missing_input_validation(content: str, path: str) -> list[Finding]:
    if "await req.json()" not in content:
        return []
    if "if (!" in content or "throw new Error" in content:
        return []
    return [_finding(
        "missing-input-validation",
        Severity.warning,
        path,
        f"Edge Function '{_function_name(path)}' may lack input validation",
        find_line_number(content, "await req.json()"),
    )]


def detect_sensitive_logging(content: str, path: str) -> list[Finding]:
    if "console.log" in content and "req.body" in content:
        return [_finding(
            "sensitive-logging",
            Severity.error,
            path,
            f"Edge Function '{_function_name(path)}' may log sensitive data",
            find_line_number(content, "req.body"),
        )]
    return []


def detect_unprotected_fetch(content: str, path: str) -> list[Finding]:
    if "fetch(" not in content:
        return []
    if "ALLOWED_DOMAINS" in content or "isAllowedDomain" in content:
        return []
    return [_finding(
        "unprotected-fetch",
        Severity.error,
        path,
        f"Edge Function '{_function_name(path)}' has unprotected fetch calls (SSRF risk)",
        find_line_number(content, "fetch("),
    )]


def detect_missing_image_size_check(content: str, path: str) -> list[Finding]:
    if "imageBase64" not in content:
        return []
    if "MAX_IMAGE_SIZE" in content or "length >" in content:
        return []
    return [_finding(
        "missing-image-size-check",
        Severity.warning,
        path,
        f"Edge Function '{_function_name(path)}' lacks image size validation",
        find_line_number(content, "imageBase64"),
    )]


RULES = [
    RuleDefinition(
        id="missing-auth-check",
        category=Category.edge_function_security,
        targets=SERVER_HANDLERS,
        severity=Severity.error,
        detector=detect_missing_auth_check,
        fix=fixes.auth_fix,
    ),
    RuleDefinition(
        id="missing-cors-headers",
        category=Category.edge_function_security,
        targets=SERVER_HANDLERS,
        severity=Severity.warning,
        detector=detect_missing_cors_headers,
        fix=fixes.cors_fix,
    ),
    RuleDefinition(
        id="missing-input-validation",
        category=Category.edge_function_security,
        targets=SERVER_HANDLERS,
        severity=Severity.warning,
        detector=detect_missing_input_validation,
        fix=fixes.input_validation_fix,
    ),
    RuleDefinition(
        id="sensitive-logging",
        category=Category.edge_function_security,
        targets=SERVER_HANDLERS,
        severity=Severity.error,
        detector=detect_sensitive_logging,
        fix=fixes.sensitive_logging_fix,
    ),
    RuleDefinition(
        id="unprotected-fetch",
        category=Category.edge_function_security,
        targets=SERVER_HANDLERS,
        severity=Severity.error,
        detector=detect_unprotected_fetch,
        fix=fixes.ssrf_fix,
    ),
    RuleDefinition(
        id="missing-image-size-check",
        category=Category.edge_function_security,
        targets=SERVER_HANDLERS,
        severity=Severity.warning,
        detector=detect_missing_image_size_check,
        fix=fixes.image_size_fix,
    ),
]
