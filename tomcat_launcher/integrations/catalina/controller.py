"""Lifecycle commands delegated to Tomcat's catalina.sh.

catalina.sh owns the actual process control and the PID file. This module
only prepares its environment, invokes it in the right mode and reads the
PID file back for ``status``.
"""

from __future__ import annotations

import logging
import os
import shlex
from pathlib import Path
from typing import Literal

from tomcat_launcher.core.errors import ExternalProcessFailure
from tomcat_launcher.integrations.process.subprocess_utils import CommandRunner
from tomcat_launcher.rendering.status_report import (
    StatusReportInput,
    StatusReportRenderer,
    get_default_template_dir,
)
from tomcat_launcher.runtime.environment import RuntimeEnvironment
from tomcat_launcher.runtime.state_dir import StatePaths

Command = Literal["run", "start", "stop", "restart", "status"]
COMMANDS: tuple[str, ...] = ("run", "start", "stop", "restart", "status")


def read_pid(pid_file: str | Path) -> int | None:
    """Reads a PID file, returning None if it is missing or malformed."""

    try:
        content = Path(pid_file).read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError):
        return None
    # str.isdigit() also accepts superscripts and other non-ASCII digits.
    if not (content.isascii() and content.isdigit()):
        return None
    pid = int(content)
    return pid if pid > 0 else None


def is_process_running(pid: int) -> bool:
    """Returns True if ``pid`` can be signalled by this process.

    A recycled pid belonging to an unrelated process also counts as running.
    """

    try:
        os.kill(pid, 0)
    except (ProcessLookupError, PermissionError, OverflowError):
        return False
    return True


class CatalinaController:
    """Runs catalina.sh for one resolved environment and state directory."""

    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        *,
        environment: RuntimeEnvironment,
        state: StatePaths,
        runner: CommandRunner | None = None,
        renderer: StatusReportRenderer | None = None,
    ) -> None:
        self._environment = environment
        self._state = state
        self._runner = runner or CommandRunner()
        self._renderer = renderer or StatusReportRenderer(template_dir=get_default_template_dir())

    def build_env(self) -> dict[str, str]:
        """Returns the variables catalina.sh reads for this instance."""

        base = self._state.catalina_base
        env = {
            "CATALINA_HOME": str(self._environment.catalina_home),
            "CATALINA_BASE": str(base),
            "CATALINA_TMPDIR": str(self._state.temp_dir),
            "CATALINA_PID": str(self._state.pid_file),
            "CATALINA_OUT": str(self._state.catalina_out),
        }
        if self._environment.java_home is not None:
            env["JAVA_HOME"] = str(self._environment.java_home)
        elif self._environment.jre_home is not None:
            env["JRE_HOME"] = str(self._environment.jre_home)
        return env

    def dispatch(self, command: Command) -> int:
        """Runs one lifecycle command and returns the launcher exit code."""

        handlers = {
            "run": self.run,
            "start": self.start,
            "stop": self.stop,
            "restart": self.restart,
            "status": self.status,
        }
        return handlers[command]()

    def run(self) -> int:
        """Runs Tomcat in the foreground.

        With a persistent (or kept) state directory the launcher exec's
        catalina.sh and never returns. An ephemeral state directory still has
        to be removed afterwards, so catalina.sh then runs as a foreground
        child and its exit code is returned (128+N for death by signal N).
        """

        args = self._args("run")
        env = self.build_env()
        if not self._state.ephemeral:
            self._logger.info("Exec: %s", shlex.join(args))
            try:
                self._runner.exec(args=args, env=env)
            except OSError as exc:
                raise ExternalProcessFailure(
                    message=f"could not exec catalina.sh: {exc}",
                    command_display=shlex.join(args),
                ) from exc
        self._logger.info("Foreground: %s", shlex.join(args))
        try:
            exit_code = self._runner.run_foreground(args=args, env=env)
        except OSError as exc:
            raise ExternalProcessFailure(
                message=f"could not run catalina.sh: {exc}",
                command_display=shlex.join(args),
            ) from exc
        return exit_code if exit_code >= 0 else 128 - exit_code

    def start(self) -> int:
        """Starts Tomcat in the background."""

        if self._state.ephemeral:
            self._logger.warning(
                "state directory %s is removed when the launcher exits; "
                "use --state-dir or --keep to keep a background instance usable",
                self._state.state_dir,
            )
        self._invoke("start")
        print("Tomcat started.")
        print(f"Logs: {self._state.logs_dir}")
        return 0

    def stop(self) -> int:
        """Stops Tomcat."""

        self._invoke("stop")
        print("Tomcat stopped.")
        return 0

    def restart(self) -> int:
        """Stops Tomcat if it is running, then starts it."""

        try:
            self._invoke("stop")
        except ExternalProcessFailure as exc:
            self._logger.info("Ignoring stop failure during restart: %s", exc)
        self._invoke("start")
        print("Tomcat restarted.")
        print(f"Logs: {self._state.logs_dir}")
        return 0

    def status(self) -> int:
        """Prints resolved paths; returns 0 if the PID file names a live process."""

        pid = read_pid(self._state.pid_file)
        if pid is not None and not is_process_running(pid):
            pid = None
        report = self._renderer.render(
            data=StatusReportInput(environment=self._environment, state=self._state, pid=pid)
        )
        print(report, end="")
        return 0 if pid is not None else 1

    def _args(self, mode: str) -> list[str]:
        return [str(self._environment.catalina_sh), mode]

    def _invoke(self, mode: str) -> None:
        args = self._args(mode)
        self._logger.info("Running: %s", shlex.join(args))
        try:
            result = self._runner.run(args=args, env=self.build_env(), capture_output=False)
        except OSError as exc:
            raise ExternalProcessFailure(
                message=f"could not run catalina.sh {mode}: {exc}",
                command_display=shlex.join(args),
            ) from exc
        if result.exit_code != 0:
            raise ExternalProcessFailure(
                message=f"catalina.sh {mode} failed",
                command_display=shlex.join(args),
                exit_code=result.exit_code,
            )
