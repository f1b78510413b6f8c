"""Notification capability for newly observed errors.

The concrete notifier is picked once, at construction, by ``build_notifier``.
Delivery is fire-and-forget: callers never see a notifier failure.
"""

import logging
import shutil
import subprocess
import sys
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, title: str, message: str) -> None: ...


class NullNotifier:
    """Drops every notification."""

    def notify(self, title: str, message: str) -> None:
        return None


class ConsoleNotifier:
    """Writes notifications to the log."""

    def notify(self, title: str, message: str) -> None:
        logger.warning(f"Notification: {title} - {message}")


class CommandNotifier:
    """Delivers notifications through a desktop command (notify-send, osascript).

    A command that fails or cannot be run hands the notification to
    ``fallback`` so it still reaches the user.
    """

    def __init__(self, command: list[str], timeout: int = 5, fallback: Optional[Notifier] = None):
        self.command = command
        self.timeout = timeout
        self.fallback = fallback or ConsoleNotifier()

    def build_args(self, title: str, message: str) -> list[str]:
        if self.command[0] == "osascript":
            escaped_title = title.replace('"', '\\"')
            escaped_message = message.replace('"', '\\"')
            script = f'display notification "{escaped_message}" with title "{escaped_title}"'
            return [*self.command, "-e", script]
        return [*self.command, title, message]

    def notify(self, title: str, message: str) -> None:
        try:
            result = subprocess.run(
                self.build_args(title, message),
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except (subprocess.SubprocessError, OSError) as e:
            logger.debug(f"{self.command[0]} failed: {e}")
            self.fallback.notify(title, message)
            return

        if result.returncode != 0:
            logger.debug(f"{self.command[0]} exited with {result.returncode}: {result.stderr.strip()}")
            self.fallback.notify(title, message)


def build_notifier(enabled: bool = True, platform: Optional[str] = None) -> Notifier:
    """Choose the best available notifier for this machine."""
    if not enabled:
        return NullNotifier()

    platform = platform or sys.platform
    if platform == "darwin" and shutil.which("osascript"):
        return CommandNotifier(["osascript"])
    if platform.startswith("linux") and shutil.which("notify-send"):
        return CommandNotifier(["notify-send"])
    return ConsoleNotifier()
