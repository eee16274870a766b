from __future__ import annotations

import pytest
from pydantic import ValidationError

from tomcat_launcher.core.config import LauncherSettings


def test_launcher_settings_reads_flox_env_and_overrides(monkeypatch) -> None:
    monkeypatch.setenv("FLOX_ENV", "/opt/flox/env")
    monkeypatch.setenv("CATALINA_HOME", "/opt/tomcat")
    monkeypatch.setenv("XDG_RUNTIME_DIR", "/run/user/1000")
    settings = LauncherSettings()
    assert settings.flox_env == "/opt/flox/env"
    assert settings.catalina_home == "/opt/tomcat"
    assert settings.xdg_runtime_dir == "/run/user/1000"


def test_launcher_settings_strips_surrounding_quotes_from_env(monkeypatch) -> None:
    monkeypatch.setenv("FLOX_ENV", '"/opt/flox/env"')
    monkeypatch.setenv("CATALINA_HOME", "'/opt/tomcat' ")
    settings = LauncherSettings()
    assert settings.flox_env == "/opt/flox/env"
    assert settings.catalina_home == "/opt/tomcat"


def test_launcher_settings_treats_empty_values_as_unset(monkeypatch) -> None:
    monkeypatch.setenv("FLOX_ENV", "")
    monkeypatch.setenv("CATALINA_HOME", '""')
    monkeypatch.delenv("XDG_RUNTIME_DIR", raising=False)
    settings = LauncherSettings()
    assert settings.flox_env is None
    assert settings.catalina_home is None
    assert settings.xdg_runtime_dir is None


def test_launcher_settings_normalizes_log_level(monkeypatch) -> None:
    monkeypatch.setenv("LAUNCHER_LOG_LEVEL", "info")
    assert LauncherSettings().launcher_log_level == "INFO"


def test_launcher_settings_rejects_unknown_log_level(monkeypatch) -> None:
    monkeypatch.setenv("LAUNCHER_LOG_LEVEL", "chatty")
    with pytest.raises(ValidationError):
        LauncherSettings()
