"""Security rules for SQL migration files.

Detects:
- Tables created without row level security enabled on that exact table
- References to auth.users outside a foreign-key clause
- Migrations that create tables but no dedicated user_roles table
"""

import re

from ..models import Category, Finding, RuleDefinition, Severity
from . import fixes

MIGRATION_FILES = ("supabase/migrations/*.sql",)

CREATE_TABLE = re.compile(
    r"\bCREATE\s+TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?([\w.\"]+)",
    re.IGNORECASE,
)

IDENTITY_TABLE = re.compile(r"\bauth\.users\b")
IDENTITY_FOREIGN_KEY = re.compile(r"\bREFERENCES\s+auth\.users\b", re.IGNORECASE)


def _finding(
    rule_id: str,
    severity: Severity,
    path: str,
    message: str,
    line: int | None = None,
) -> Finding:
    return Finding(
        rule_id=rule_id,
        category=Category.database_security,
        severity=severity,
        file_path=path,
        line=line,
        message=message,
    )


def _line_of(content: str, offset: int) -> int:
    return content.count("\n", 0, offset) + 1


def created_tables(content: str) -> list[tuple[str, int]]:
    """(table name, line) for each distinct CREATE TABLE statement, in order."""
    tables: list[tuple[str, int]] = []
    seen: set[str] = set()
    for match in CREATE_TABLE.finditer(content):
        name = match.group(1)
        if name in seen:
            continue
        seen.add(name)
        tables.append((name, _line_of(content, match.start())))
    return tables


def _enables_rls(content: str, table: str) -> bool:
    pattern = re.compile(
        rf"\bALTER\s+TABLE\s+(?:ONLY\s+)?{re.escape(table)}\s+ENABLE\s+ROW\s+LEVEL\s+SECURITY\b",
        re.IGNORECASE,
    )
    return bool(pattern.search(content))


def detect_missing_row_level_security(content: str, path: str) -> list[Finding]:
    return [
        _finding(
            "missing-row-level-security",
            Severity.warning,
            path,
            f"Table '{table}' may lack RLS policies",
            line,
        )
        for table, line in created_tables(content)
        if not _enables_rls(content, table)
    ]


def detect_direct_identity_table_reference(content: str, path: str) -> list[Finding]:
    # Blank out foreign keys so only direct references remain.
    stripped = IDENTITY_FOREIGN_KEY.sub(lambda m: " " * len(m.group(0)), content)
    match = IDENTITY_TABLE.search(stripped)
    if not match:
        return []
    return [_finding(
        "direct-identity-table-reference",
        Severity.error,
        path,
        "Direct reference to auth.users table found",
        _line_of(content, match.start()),
    )]


def detect_missing_role_table(content: str, path: str) -> list[Finding]:
    if not CREATE_TABLE.search(content) or "user_roles" in content:
        return []
    return [_finding(
        "missing-role-table",
        Severity.warning,
        path,
        "user_roles table not found - role management may be insecure",
    )]


RULES = [
    RuleDefinition(
        id="missing-row-level-security",
        category=Category.database_security,
        targets=MIGRATION_FILES,
        severity=Severity.warning,
        detector=detect_missing_row_level_security,
        fix=fixes.row_level_security_fix,
    ),
    RuleDefinition(
        id="direct-identity-table-reference",
        category=Category.database_security,
        targets=MIGRATION_FILES,
        severity=Severity.error,
        detector=detect_direct_identity_table_reference,
        fix=fixes.identity_table_fix,
    ),
    RuleDefinition(
        id="missing-role-table",
        category=Category.database_security,
        targets=MIGRATION_FILES,
        severity=Severity.warning,
        detector=detect_missing_role_table,
        fix=fixes.role_table_fix,
    ),
]
