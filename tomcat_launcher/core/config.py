"""Launcher configuration.

All values come from environment variables. ``FLOX_ENV`` is required at
resolution time, not at load time, so that ``--help`` and usage errors work
without an activated environment.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LauncherSettings(BaseSettings):
    """Settings for a single launcher invocation."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
    )

    # Environment root holding java and a Tomcat distribution.
    flox_env: str | None = None

    # Optional Tomcat home override; only honoured if bin/catalina.sh is executable.
    catalina_home: str | None = None

    # Preferred parent for auto-created state directories.
    xdg_runtime_dir: str | None = None

    launcher_log_level: str = "WARNING"

    @field_validator("flox_env", "catalina_home", "xdg_runtime_dir", mode="before")
    @classmethod
    def _normalize_env_string(cls, value: Any) -> Any:
        """Normalizes env var strings.

        Env files handed to ``docker --env-file`` or ``systemd`` keep quotes
        verbatim, so we trim whitespace and strip a single pair of surrounding
        quotes. Empty values count as unset.
        """

        if value is None or not isinstance(value, str):
            return value
        text = value.strip()
        if len(text) >= 2 and ((text[0] == text[-1] == '"') or (text[0] == text[-1] == "'")):
            text = text[1:-1].strip()
        return text or None

    @field_validator("launcher_log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        level = value.strip().upper() or "WARNING"
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value}")
        return level
