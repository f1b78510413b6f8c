"""File-watch and debounce scheduling loop.

A watchdog observer thread delivers file events; they are marshalled onto
the asyncio loop, where all scheduling state lives. One shared debounce
timer collapses a burst of edits into a single targeted run for the most
recently touched file. A separate recurring timer triggers a full run.
"""

import asyncio
import logging
import signal
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

from .globs import matches_any
from .models import WatchState
from .orchestrator import ValidationOrchestrator

logger = logging.getLogger(__name__)

ADD_EVENTS = frozenset({"created", "modified"})
UNLINK_EVENT = "deleted"

GLOB_CHARS = set("*?[{")

OBSERVER_JOIN_TIMEOUT = 5.0


def watch_roots(project_root: Path, globs: Iterable[str]) -> list[Path]:
    """Existing directories to watch: the literal prefix of each glob."""
    roots: list[Path] = []
    for pattern in globs:
        prefix: list[str] = []
        for part in pattern.split("/")[:-1]:
            if GLOB_CHARS & set(part):
                break
            prefix.append(part)
        candidate = project_root.joinpath(*prefix)
        if candidate.is_dir() and candidate not in roots:
            roots.append(candidate)
    return roots


class _EventBridge(FileSystemEventHandler):
    """Hands watchdog events (observer thread) to the scheduler (loop thread)."""

    def __init__(self, loop: asyncio.AbstractEventLoop, callback: Callable[[str, str], None]):
        super().__init__()
        self.loop = loop
        self.callback = callback

    def _forward(self, kind: str, path: str) -> None:
        self.loop.call_soon_threadsafe(self.callback, kind, path)

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward("created", event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward("modified", event.src_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward(UNLINK_EVENT, event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        # A rename shows up at its destination like a new file.
        if not event.is_directory:
            self._forward("created", event.dest_path)


class WatchScheduler:
    """Debounces file changes into targeted runs and triggers periodic full runs."""

    def __init__(
        self,
        orchestrator: ValidationOrchestrator,
        project_root: str | Path,
        watch_globs: Iterable[str],
        exclude_globs: Iterable[str] = (),
        debounce_seconds: float = 2.0,
        full_period_seconds: float = 30 * 60,
        poll_interval_seconds: float = 5.0,
        use_polling: bool = False,
    ):
        self.orchestrator = orchestrator
        self.project_root = Path(project_root).resolve()
        self.watch_globs = tuple(watch_globs)
        self.exclude_globs = tuple(exclude_globs)
        self.debounce_seconds = debounce_seconds
        self.full_period_seconds = full_period_seconds
        self.poll_interval_seconds = poll_interval_seconds
        self.use_polling = use_polling

        self.state = WatchState()
        self.observer = None
        self._full_handle: Optional[asyncio.TimerHandle] = None
        self._tasks: set[asyncio.Task] = set()
        self._stop: Optional[asyncio.Event] = None
        self._fatal: Optional[BaseException] = None

    def _relative(self, path: str | Path) -> str:
        path = Path(path)
        if path.is_absolute():
            try:
                return path.resolve().relative_to(self.project_root).as_posix()
            except ValueError:
                return path.as_posix()
        return path.as_posix()

    def is_watched(self, relative_path: str) -> bool:
        return matches_any(relative_path, self.watch_globs) and not matches_any(relative_path, self.exclude_globs)

    def on_event(self, kind: str, path: str | Path) -> None:
        """Handle one file event. Must be called on the event loop."""
        relative = self._relative(path)
        if kind == UNLINK_EVENT:
            logger.debug(f"Ignoring removal of {relative}")
            return
        if kind not in ADD_EVENTS or not self.is_watched(relative):
            return

        self.state.pending_file = relative
        if self.state.debounce_handle is not None:
            self.state.debounce_handle.cancel()
        loop = asyncio.get_running_loop()
        self.state.debounce_handle = loop.call_later(self.debounce_seconds, self._fire_debounce)

    def _fire_debounce(self) -> None:
        path = self.state.pending_file
        self.state.reset_cycle()
        if path is None:
            return
        logger.info(f"Validating {path}...")
        self._spawn(self.orchestrator.run_targeted(path))

    def _schedule_full(self) -> None:
        loop = asyncio.get_running_loop()
        self._full_handle = loop.call_later(self.full_period_seconds, self._fire_full)

    def _fire_full(self) -> None:
        logger.info("Running scheduled validation...")
        self._spawn(self._run_full())
        self._schedule_full()

    async def _run_full(self) -> None:
        report = await self.orchestrator.run_full()
        # None means the trigger was dropped behind a run in progress.
        if report is not None:
            self.state.last_full_run = datetime.now(timezone.utc)

    def _spawn(self, coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Stopping watcher after fatal validation error: {error}")
            self._fatal = error
            self.stop()

    def stop(self) -> None:
        if self._stop is not None:
            self._stop.set()

    def _build_observer(self):
        if self.use_polling:
            return PollingObserver(timeout=self.poll_interval_seconds)
        return Observer()

    def _install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.stop)
            except (NotImplementedError, RuntimeError):
                # Windows event loops do not support signal handlers.
                pass

    async def run(self, install_signal_handlers: bool = True) -> None:
        """Watch until stopped. Re-raises a fatal error from any run."""
        loop = asyncio.get_running_loop()
        self._stop = asyncio.Event()
        if install_signal_handlers:
            self._install_signal_handlers(loop)

        logger.info("Performing initial health check...")
        await self._run_full()

        observer = self._build_observer()
        self.observer = observer
        handler = _EventBridge(loop, self.on_event)
        roots = watch_roots(self.project_root, self.watch_globs)
        for root in roots:
            observer.schedule(handler, str(root), recursive=True)
        if not roots:
            logger.warning(f"No existing directories match watch patterns: {', '.join(self.watch_globs)}")
        observer.daemon = True
        observer.start()
        self._schedule_full()
        logger.info(f"Watching patterns: {', '.join(self.watch_globs)}")

        try:
            await self._stop.wait()
        finally:
            observer.stop()
            await loop.run_in_executor(None, observer.join, OBSERVER_JOIN_TIMEOUT)
            if self.state.debounce_handle is not None:
                self.state.debounce_handle.cancel()
            if self._full_handle is not None:
                self._full_handle.cancel()
            self.state.reset_cycle()
            logger.info("Watcher stopped")

        if self._fatal is not None:
            raise self._fatal
