"""Utilities for running catalina.sh and friends.

Commands are always given as argv lists (no shell). The caller supplies the
extra environment explicitly; it is merged over a copy of ``os.environ`` and
the launcher's own environment is never modified.
"""

from __future__ import annotations

import os
import signal
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

# Grace period for a foreground child after a forwarded signal.
_FORWARD_WAIT_SECONDS = 30


@dataclass(frozen=True)
class CommandResult:
    """Result of running a command."""

    exit_code: int
    stdout: str
    stderr: str


def merge_env(env: dict[str, str] | None) -> dict[str, str]:
    """Returns a copy of the current environment updated with ``env``."""

    merged_env = os.environ.copy()
    if env is not None:
        merged_env.update(env)
    return merged_env


class CommandRunner:
    """Runs OS commands with controlled environment."""

    def run(
        self,
        *,
        args: list[str],
        cwd: str | Path | None = None,
        env: dict[str, str] | None = None,
        timeout_seconds: int | None = None,
        capture_output: bool = True,
    ) -> CommandResult:
        """Runs a command to completion.

        Args:
            args: Command arguments (no shell).
            cwd: Working directory.
            env: Environment variables to merge with current environment.
            timeout_seconds: Optional timeout.
            capture_output: If False, the child inherits stdout/stderr and
                the returned result carries empty strings.

        Returns:
            Result with the exit code and, when captured, the output.

        Raises:
            TimeoutError: If timeout is exceeded.
            OSError: If process cannot be started.
        """

        completed = subprocess.run(
            args,
            cwd=str(cwd) if cwd is not None else None,
            env=merge_env(env),
            check=False,
            text=True,
            capture_output=capture_output,
            timeout=timeout_seconds,
        )
        return CommandResult(
            exit_code=int(completed.returncode),
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

    def run_foreground(self, *, args: list[str], env: dict[str, str] | None = None) -> int:
        """Runs a long-lived command attached to the terminal and waits for it.

        If the wait is interrupted (Ctrl-C, or a signal the launcher turned
        into ``SystemExit``), the child gets SIGTERM, a grace period, then
        SIGKILL, and the interruption is re-raised.

        Returns:
            The child's exit code. Negative values mean death by signal.
        """

        process = subprocess.Popen(args, env=merge_env(env))
        try:
            return int(process.wait())
        except BaseException:
            if process.poll() is None:
                process.send_signal(signal.SIGTERM)
                try:
                    process.wait(timeout=_FORWARD_WAIT_SECONDS)
                except subprocess.TimeoutExpired:
                    process.kill()
                    process.wait()
            raise

    def exec(self, *, args: list[str], env: dict[str, str] | None = None) -> NoReturn:
        """Replaces the current process image with ``args``.

        Raises:
            OSError: If the executable cannot be exec'd.
        """

        os.execve(args[0], args, merge_env(env))
