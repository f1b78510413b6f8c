"""Command-line entry point: ``smart-validator validate`` and ``smart-validator watch``."""

import argparse
import asyncio
import json
import logging
from pathlib import Path

from .compiler import CompilerDiagnosticsAdapter
from .config import ValidatorConfig, load_config
from .errors import ConfigError, InfrastructureError
from .notifier import build_notifier
from .orchestrator import ValidationOrchestrator
from .scheduler import WatchScheduler
from .sink import ReportSink
from . import watch_state

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_INFRASTRUCTURE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smart-validator",
        description="Continuous JSX and security validation for web application source trees",
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--project-root", default=".", help="Project to validate (default: current directory)")
    common.add_argument("--config", default=None, help="JSON config file (default: .smart-validator/config.json)")
    common.add_argument("--no-notify", action="store_true", help="Disable desktop notifications")
    common.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_parser = subparsers.add_parser("validate", parents=[common], help="Run a full validation once")
    validate_parser.add_argument("--fix", action="store_true", help="Show suggested fixes in the summary")

    watch_parser = subparsers.add_parser("watch", parents=[common], help="Watch files and validate on change")
    watch_parser.add_argument("action", choices=["start", "status", "stop"])
    watch_parser.add_argument("--fix", action="store_true", help="Show suggested fixes in run summaries")

    return parser


def build_components(
    project_root: Path,
    config: ValidatorConfig,
    notify: bool = True,
    echo: bool = False,
    show_fixes: bool = False,
) -> tuple[ValidationOrchestrator, ReportSink]:
    sink = ReportSink(
        project_root / config.report_path,
        notifier=build_notifier(enabled=notify),
        echo=echo,
        show_fixes=show_fixes,
    )
    adapter = CompilerDiagnosticsAdapter(
        project_root,
        type_check_command=config.type_check_command,
        build_command=config.build_command,
    )
    orchestrator = ValidationOrchestrator(
        project_root,
        adapter,
        sink=sink,
        exclude_globs=config.exclude_globs,
    )
    return orchestrator, sink


def _cmd_validate(args: argparse.Namespace, project_root: Path, config: ValidatorConfig) -> int:
    orchestrator, sink = build_components(project_root, config, notify=not args.no_notify)
    try:
        report = asyncio.run(orchestrator.run_full())
    except InfrastructureError as e:
        print(f"Validation failed: {e}")
        return EXIT_INFRASTRUCTURE

    sink.render_summary(report, show_fixes=args.fix)
    return EXIT_OK if report.success else EXIT_FINDINGS


def _cmd_watch_start(args: argparse.Namespace, project_root: Path, config: ValidatorConfig) -> int:
    existing = watch_state.read_status(project_root)
    if existing is not None and watch_state.is_alive(existing.pid):
        print(f"Watcher already running (pid {existing.pid})")
        return EXIT_FINDINGS

    orchestrator, _ = build_components(
        project_root,
        config,
        notify=not args.no_notify,
        echo=True,
        show_fixes=args.fix,
    )
    scheduler = WatchScheduler(
        orchestrator,
        project_root,
        watch_globs=config.watch_globs,
        exclude_globs=config.exclude_globs,
        debounce_seconds=config.debounce_seconds,
        full_period_seconds=config.full_revalidation_seconds,
        poll_interval_seconds=config.poll_interval_ms / 1000,
        use_polling=config.use_polling,
    )

    watch_state.write_status(project_root)
    print("Watcher active; press Ctrl+C to stop")
    try:
        asyncio.run(scheduler.run())
    except InfrastructureError as e:
        print(f"Watcher stopped: {e}")
        return EXIT_INFRASTRUCTURE
    except KeyboardInterrupt:
        pass
    finally:
        watch_state.clear_status(project_root)
    return EXIT_OK


def _cmd_watch_status(project_root: Path, config: ValidatorConfig) -> int:
    status = watch_state.read_status(project_root)
    active = status is not None and watch_state.is_alive(status.pid)
    payload = {
        "active": active,
        "pid": status.pid if status else None,
        "started_at": status.started_at if status else None,
        "last_report": watch_state.last_report_summary(project_root / config.report_path),
    }
    print(json.dumps(payload, indent=2))
    return EXIT_OK


def _cmd_watch_stop(project_root: Path) -> int:
    status = watch_state.read_status(project_root)
    if status is None:
        print("No watcher is running")
        return EXIT_OK
    if watch_state.signal_stop(status):
        print(f"Sent stop signal to watcher (pid {status.pid})")
    else:
        print(f"Watcher (pid {status.pid}) was not running; clearing stale status")
        watch_state.clear_status(project_root)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    project_root = Path(args.project_root).resolve()
    if not project_root.is_dir():
        parser.error(f"Project root is not a directory: {args.project_root}")

    try:
        config = load_config(project_root, args.config)
    except ConfigError as e:
        parser.error(str(e))

    if args.command == "validate":
        return _cmd_validate(args, project_root, config)

    if args.command == "watch":
        if args.action == "start":
            return _cmd_watch_start(args, project_root, config)
        if args.action == "status":
            return _cmd_watch_status(project_root, config)
        return _cmd_watch_stop(project_root)

    parser.error(f"Unsupported command: {args.command}")
    return EXIT_INFRASTRUCTURE


if __name__ == "__main__":
    raise SystemExit(main())
