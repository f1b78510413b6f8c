"""Pattern rule catalog.

Every rule is a pure function of (content, path). Rules never see each
other's output, so evaluation order only affects the order of findings.
"""

from ..globs import matches_any
from ..models import Category, Finding, RuleDefinition
from . import config, database, edge_functions, frontend, jsx

CATALOG: tuple[RuleDefinition, ...] = tuple(
    jsx.RULES
    + edge_functions.RULES
    + database.RULES
    + frontend.RULES
    + config.RULES
)

RULES_BY_ID: dict[str, RuleDefinition] = {rule.id: rule for rule in CATALOG}


def all_targets() -> tuple[str, ...]:
    """Every glob some rule applies to, without duplicates."""
    targets: list[str] = []
    for rule in CATALOG:
        for target in rule.targets:
            if target not in targets:
                targets.append(target)
    return tuple(targets)


def categories_for(file_path: str) -> list[Category]:
    """Categories with at least one rule targeting ``file_path``, in catalog order."""
    categories: list[Category] = []
    for rule in CATALOG:
        if rule.category not in categories and matches_any(file_path, rule.targets):
            categories.append(rule.category)
    return categories


def run_rules(category: Category, file_path: str, content: str) -> list[Finding]:
    """Apply every rule in ``category`` whose target matches ``file_path``."""
    findings: list[Finding] = []
    for rule in CATALOG:
        if rule.category != category or not matches_any(file_path, rule.targets):
            continue
        for finding in rule.detector(content, file_path):
            if rule.fix is not None and finding.fix_suggestion is None:
                finding = finding.model_copy(update={"fix_suggestion": rule.fix()})
            findings.append(finding)
    return findings


__all__ = [
    "CATALOG",
    "RULES_BY_ID",
    "all_targets",
    "categories_for",
    "run_rules",
]
