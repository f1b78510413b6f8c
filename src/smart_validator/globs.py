"""Glob matching and project file enumeration."""

import logging
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Generator, Iterable, Optional

logger = logging.getLogger(__name__)


DEFAULT_SKIP_DIRS: frozenset[str] = frozenset({
    "node_modules",
    ".git",
    "dist",
    "build",
    ".next",
    "coverage",
    "__pycache__",
    ".pytest_cache",
    ".venv",
    "venv",
    ".turbo",
    ".vercel",
})


@lru_cache(maxsize=256)
def _compile_glob(pattern: str) -> re.Pattern:
    """Translate a glob into a regex.

    Supports ``**`` (any number of directories), ``*`` and ``?`` (within one
    path segment) and ``{a,b}`` alternation.
    """
    out = []
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
            continue
        if pattern.startswith("**", i):
            out.append(".*")
            i += 2
            continue
        if char == "*":
            out.append("[^/]*")
        elif char == "?":
            out.append("[^/]")
        elif char == "{":
            end = pattern.find("}", i)
            if end == -1:
                out.append(re.escape(char))
            else:
                options = pattern[i + 1:end].split(",")
                out.append("(?:" + "|".join(re.escape(opt) for opt in options) + ")")
                i = end + 1
                continue
        else:
            out.append(re.escape(char))
        i += 1
    return re.compile("".join(out) + r"\Z")


def to_posix(path: str | Path) -> str:
    text = str(path).replace("\\", "/")
    return text[2:] if text.startswith("./") else text


def matches_glob(relative_path: str, pattern: str) -> bool:
    return bool(_compile_glob(pattern).match(to_posix(relative_path)))


def matches_any(relative_path: str, patterns: Iterable[str]) -> bool:
    return any(matches_glob(relative_path, pattern) for pattern in patterns)


def walk_project_files(
    project_root: str | Path,
    include: Iterable[str],
    exclude: Iterable[str] = (),
    skip_dirs: Optional[frozenset[str]] = None,
) -> Generator[str, None, None]:
    """Yield project-relative POSIX paths matching ``include`` and not ``exclude``.

    Paths are yielded in sorted order so repeated runs are stable.
    """
    root = Path(project_root)
    if not root.is_dir():
        return

    include = tuple(include)
    exclude = tuple(exclude)
    skip = skip_dirs if skip_dirs is not None else DEFAULT_SKIP_DIRS

    matched: list[str] = []
    for dirpath, dirs, files in os.walk(root):
        dirs[:] = sorted(d for d in dirs if d not in skip)
        for fname in files:
            relative = (Path(dirpath) / fname).relative_to(root).as_posix()
            if matches_any(relative, include) and not matches_any(relative, exclude):
                matched.append(relative)

    yield from sorted(matched)


def read_file_text(path: str | Path) -> Optional[str]:
    """Read a source file, returning None when it cannot be read."""
    try:
        with open(path, "r", encoding="utf-8", errors="ignore") as f:
            return f.read()
    except (IOError, OSError) as e:
        logger.debug(f"Skipping unreadable file {path}: {e}")
        return None


def find_line_number(content: str, needle: str) -> int:
    """1-based line of the first line containing ``needle``, else 1."""
    for index, line in enumerate(content.split("\n"), start=1):
        if needle in line:
            return index
    return 1
