"""Command line entry point.

Usage::

    tomcat-launcher [--state-dir DIR] [--keep] {run|start|stop|restart|status}
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from collections.abc import Sequence
from types import FrameType

from pydantic import ValidationError

from tomcat_launcher import build_info
from tomcat_launcher.core.config import LauncherSettings
from tomcat_launcher.core.errors import ConfigurationError, LauncherError, UsageError
from tomcat_launcher.integrations.catalina.controller import COMMANDS, CatalinaController
from tomcat_launcher.runtime.environment import resolve_environment
from tomcat_launcher.runtime.state_dir import open_state_directory, prepare_state

logger = logging.getLogger(__name__)

PROG = "tomcat-launcher"
MISSING_COMMAND_EXIT_CODE = 2

COMMANDS_HELP = """\
Commands:
  run       Run Tomcat in the foreground (exec)
  start     Start Tomcat in the background
  stop      Stop Tomcat
  restart   Stop then start
  status    Print key paths and whether a PID appears to be running
"""


class _LauncherArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises UsageError instead of exiting."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(f"{message} (try --help)")


def build_parser() -> argparse.ArgumentParser:
    """Builds the launcher argument parser."""

    parser = _LauncherArgumentParser(
        prog=PROG,
        description="Launch a Tomcat instance with a mutable CATALINA_BASE.",
        epilog=COMMANDS_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument("-h", "--help", action="store_true", help="Show this help and exit.")
    parser.add_argument(
        "--state-dir",
        metavar="DIR",
        help=(
            "Place mutable Tomcat instance dirs in DIR (created if needed). If omitted, "
            "a fresh temp dir is created under $XDG_RUNTIME_DIR or the system temp dir."
        ),
    )
    parser.add_argument(
        "--keep",
        action="store_true",
        help="Do not delete the auto-created temp dir on exit (ignored with --state-dir).",
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=COMMANDS,
        metavar="COMMAND",
        help="Lifecycle command (see below).",
    )
    return parser


def _raise_system_exit(signum: int, frame: FrameType | None) -> None:
    raise SystemExit(128 + signum)


def install_exit_signal_handlers() -> dict[int, object]:
    """Turns SIGTERM and SIGHUP into SystemExit so cleanup blocks still run.

    Returns:
        The previous handlers, for ``restore_signal_handlers``.
    """

    previous: dict[int, object] = {}
    for sig in (signal.SIGTERM, signal.SIGHUP):
        previous[sig] = signal.signal(sig, _raise_system_exit)
    return previous


def restore_signal_handlers(previous: dict[int, object]) -> None:
    for sig, handler in previous.items():
        signal.signal(sig, handler)  # type: ignore[arg-type]


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr)


def main(argv: Sequence[str] | None = None, *, deployment_root: str | None = None) -> int:
    """Runs the launcher and returns its exit code.

    Args:
        argv: Arguments without the program name; defaults to ``sys.argv[1:]``.
        deployment_root: Overrides the build-time deployment root (tests).
    """

    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except UsageError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    if args.help:
        parser.print_help()
        return 0
    if args.command is None:
        parser.print_usage(sys.stderr)
        print("error: missing command (try --help)", file=sys.stderr)
        return MISSING_COMMAND_EXIT_CODE

    try:
        settings = LauncherSettings()
    except ValidationError as exc:
        configure_logging("WARNING")
        logger.error("invalid launcher settings: %s", exc)
        return ConfigurationError.exit_code
    configure_logging(settings.launcher_log_level)

    try:
        environment = resolve_environment(
            settings=settings,
            deployment_root=(
                deployment_root if deployment_root is not None else build_info.DEPLOYMENT_ROOT
            ),
        )
        previous_handlers = install_exit_signal_handlers()
        try:
            with open_state_directory(
                requested=args.state_dir,
                keep=args.keep,
                runtime_dir=settings.xdg_runtime_dir,
            ) as state:
                prepare_state(state, environment=environment)
                controller = CatalinaController(environment=environment, state=state)
                return controller.dispatch(args.command)
        finally:
            restore_signal_handlers(previous_handlers)
    except LauncherError as exc:
        logger.error("%s", exc)
        return exc.exit_code
    except KeyboardInterrupt:
        logger.info("interrupted")
        return 128 + signal.SIGINT


if __name__ == "__main__":
    sys.exit(main())
