"""JSX correctness rules for React component files.

Detects:
- Void elements (br, hr, img, input) that are not self-closed
- Mapped renders with no key prop anywhere in the file
- className bindings that contain a literal undefined
"""

import re

from ..models import Category, Finding, RuleDefinition, Severity
from . import fixes

COMPONENT_FILES = ("src/**/*.{tsx,jsx}",)

VOID_ELEMENTS = ("br", "hr", "img", "input")

# <br> or <img src="x"> but not <br /> or <img src="x" />
VOID_TAG_PATTERNS = {
    element: re.compile(rf"<{element}(?:\s[^>]*)?(?<!/)>")
    for element in VOID_ELEMENTS
}

UNDEFINED_CLASS_BINDING = re.compile(r"className=\{[^}]*undefined[^}]*\}")


def _finding(rule_id: str, path: str, message: str, line: int | None = None) -> Finding:
    return Finding(
        rule_id=rule_id,
        category=Category.jsx_correctness,
        severity=Severity.warning,
        file_path=path,
        line=line,
        message=message,
    )


def detect_void_not_self_closed(content: str, path: str) -> list[Finding]:
    findings = []
    for line_num, line in enumerate(content.split("\n"), start=1):
        for element, pattern in VOID_TAG_PATTERNS.items():
            if pattern.search(line):
                findings.append(_finding(
                    "void-not-self-closed",
                    path,
                    f"<{element}> should be self-closing: <{element} />",
                    line_num,
                ))
    return findings


def detect_unkeyed_mapped_render(content: str, path: str) -> list[Finding]:
    # Whole-file heuristic: one key= anywhere satisfies every map.
    if ".map(" in content and "return" in content and "key=" not in content:
        return [_finding("unkeyed-mapped-render", path, "Missing 'key' prop in mapped elements")]
    return []


def detect_dangerous_class_binding(content: str, path: str) -> list[Finding]:
    match = UNDEFINED_CLASS_BINDING.search(content)
    if not match:
        return []
    line = content.count("\n", 0, match.start()) + 1
    return [_finding(
        "dangerous-class-binding",
        path,
        "className contains undefined - will cause runtime error",
        line,
    )]


RULES = [
    RuleDefinition(
        id="void-not-self-closed",
        category=Category.jsx_correctness,
        targets=COMPONENT_FILES,
        severity=Severity.warning,
        detector=detect_void_not_self_closed,
        fix=fixes.self_closing_fix,
    ),
    RuleDefinition(
        id="unkeyed-mapped-render",
        category=Category.jsx_correctness,
        targets=COMPONENT_FILES,
        severity=Severity.warning,
        detector=detect_unkeyed_mapped_render,
        fix=fixes.key_prop_fix,
    ),
    RuleDefinition(
        id="dangerous-class-binding",
        category=Category.jsx_correctness,
        targets=COMPONENT_FILES,
        severity=Severity.warning,
        detector=detect_dangerous_class_binding,
        fix=fixes.class_binding_fix,
    ),
]
