"""Shared fixtures for smart-validator tests."""

import json
from pathlib import Path

import pytest

from helpers import PASSING_COMMAND


@pytest.fixture
def project(tmp_path: Path):
    """Return a writer that creates files under a temporary project root."""

    def write(relative: str, content: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return write


@pytest.fixture
def passing_config(tmp_path: Path) -> Path:
    """Write a default-location config whose compiler commands succeed."""
    path = tmp_path / ".smart-validator" / "config.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps({"typeCheckCommand": PASSING_COMMAND, "buildCommand": PASSING_COMMAND}),
        encoding="utf-8",
    )
    return path
