"""Launcher error hierarchy.

Every failure the launcher reports maps to one of these classes. ``cli.main``
catches ``LauncherError`` and turns ``exit_code`` into the process exit code.
"""

from __future__ import annotations


class LauncherError(RuntimeError):
    """Base class for launcher failures."""

    exit_code: int = 1


class ConfigurationError(LauncherError):
    """Raised when required configuration is missing or structurally invalid."""


class DependencyNotFoundError(LauncherError):
    """Raised when java or catalina.sh cannot be located."""


class UsageError(LauncherError):
    """Raised for bad command line arguments."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class ExternalProcessFailure(LauncherError):
    """Raised when catalina.sh reports failure."""

    def __init__(
        self,
        *,
        message: str,
        command_display: str | None = None,
        exit_code: int | None = None,
    ) -> None:
        parts: list[str] = [message]
        if command_display:
            parts.append(f"command={command_display}")
        if exit_code is not None:
            parts.append(f"exit_code={exit_code}")
        super().__init__(" | ".join(parts))
        self.command_display = command_display
        if not exit_code:
            self.exit_code = 1
        elif exit_code < 0:
            # Killed by signal N; report it the way a shell would.
            self.exit_code = 128 - exit_code
        else:
            self.exit_code = exit_code
