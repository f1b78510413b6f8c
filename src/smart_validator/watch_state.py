"""Status file shared by ``watch start``, ``watch status`` and ``watch stop``."""

import json
import logging
import os
import signal
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

STATUS_PATH = Path(".smart-validator") / "watch.json"


class WatchStatus(BaseModel):
    pid: int = Field(description="Process id of the running watcher")
    started_at: str = Field(description="ISO-8601 UTC start time")
    project_root: str = Field(description="Absolute project root being watched")


def status_file(project_root: str | Path) -> Path:
    return Path(project_root) / STATUS_PATH


def write_status(project_root: str | Path) -> WatchStatus:
    status = WatchStatus(
        pid=os.getpid(),
        started_at=datetime.now(timezone.utc).isoformat(),
        project_root=str(Path(project_root).resolve()),
    )
    path = status_file(project_root)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(status.model_dump_json(indent=2), encoding="utf-8")
    return status


def read_status(project_root: str | Path) -> Optional[WatchStatus]:
    path = status_file(project_root)
    if not path.exists():
        return None
    try:
        return WatchStatus.model_validate_json(path.read_text(encoding="utf-8"))
    except (ValidationError, OSError) as e:
        logger.warning(f"Ignoring corrupt watch status file {path}: {e}")
        return None


def clear_status(project_root: str | Path) -> None:
    path = status_file(project_root)
    try:
        path.unlink()
    except FileNotFoundError:
        pass


def is_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists but belongs to someone else.
        return True
    return True


def signal_stop(status: WatchStatus) -> bool:
    """Send SIGTERM to the recorded watcher. False if it was not running."""
    if not is_alive(status.pid):
        return False
    os.kill(status.pid, signal.SIGTERM)
    return True


def last_report_summary(report_path: str | Path) -> Optional[dict]:
    path = Path(report_path)
    if not path.exists():
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError):
        return None
    if not isinstance(data, dict):
        return None
    return {
        "timestamp": data.get("timestamp"),
        "success": data.get("success"),
        "errors": len(data.get("realErrors", [])),
        "warnings": len(data.get("warnings", [])),
    }
