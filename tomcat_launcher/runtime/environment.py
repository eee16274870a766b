"""Discovery of java and the Tomcat installation.

Resolution order follows the flox environment conventions: everything is
looked up under ``$FLOX_ENV`` first and only then on ``PATH``.
"""

from __future__ import annotations

import glob
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path

from tomcat_launcher.build_info import is_baked
from tomcat_launcher.core.config import LauncherSettings
from tomcat_launcher.core.errors import ConfigurationError, DependencyNotFoundError

logger = logging.getLogger(__name__)

# Relative to $FLOX_ENV. Evaluated in list order; a pattern's own matches are
# taken in sorted order, like shell glob expansion.
CATALINA_CANDIDATE_PATTERNS: tuple[str, ...] = (
    "bin/catalina.sh",
    "bin/catalina",
    "share/tomcat*/bin/catalina.sh",
    "share/apache-tomcat*/bin/catalina.sh",
    "libexec/tomcat*/bin/catalina.sh",
    "opt/tomcat*/bin/catalina.sh",
    "tomcat*/bin/catalina.sh",
)


@dataclass(frozen=True)
class RuntimeEnvironment:
    """Resolved paths used to drive catalina.sh.

    Exactly one of ``java_home`` and ``jre_home`` is set.
    """

    env_root: Path
    deployment_root: Path
    java_bin: Path
    catalina_home: Path
    catalina_sh: Path
    java_home: Path | None = None
    jre_home: Path | None = None

    @property
    def deployment_webapps(self) -> Path:
        return self.deployment_root / "webapps"


def _is_executable_file(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def _require(path: Path) -> None:
    if not path.exists():
        raise ConfigurationError(f"missing: {path}")


def find_java(*, env_root: Path, search_path: str | None = None) -> Path | None:
    """Returns ``$FLOX_ENV/bin/java`` or the first ``java`` on the search path."""

    candidate = env_root / "bin" / "java"
    if _is_executable_file(candidate):
        return candidate
    found = shutil.which("java", path=search_path)
    return Path(found) if found else None


def find_catalina(
    *,
    env_root: Path,
    catalina_home_override: str | None = None,
    search_path: str | None = None,
) -> Path | None:
    """Returns the first usable catalina.sh, or None."""

    if catalina_home_override:
        override = Path(catalina_home_override) / "bin" / "catalina.sh"
        if _is_executable_file(override):
            return override
        logger.info("Ignoring CATALINA_HOME without executable bin/catalina.sh: %s", override)

    for pattern in CATALINA_CANDIDATE_PATTERNS:
        for match in sorted(glob.glob(str(env_root / pattern))):
            candidate = Path(match)
            if _is_executable_file(candidate):
                return candidate

    found = shutil.which("catalina.sh", path=search_path)
    return Path(found) if found else None


def guess_java_homes(java_bin: Path) -> tuple[Path | None, Path | None]:
    """Returns ``(java_home, jre_home)`` for catalina.sh.

    The JDK-style guess is the grandparent of the symlink-resolved java. If
    that directory does not contain ``bin/java`` the layout is treated as a
    bare JRE rooted at the grandparent of the unresolved path.
    """

    java_home_guess = java_bin.resolve().parent.parent
    if _is_executable_file(java_home_guess / "bin" / "java"):
        return java_home_guess, None
    return None, java_bin.parent.parent.resolve()


def resolve_environment(
    *,
    settings: LauncherSettings,
    deployment_root: str,
    search_path: str | None = None,
) -> RuntimeEnvironment:
    """Resolves java, Tomcat home and the deployment root.

    Args:
        settings: Launcher settings (FLOX_ENV, CATALINA_HOME override).
        deployment_root: The build-time deployment root.
        search_path: PATH-style string; defaults to ``$PATH``.

    Raises:
        ConfigurationError: If FLOX_ENV, the deployment root or the Tomcat
            home layout is missing.
        DependencyNotFoundError: If java or catalina.sh cannot be found.
    """

    if not settings.flox_env:
        raise ConfigurationError("FLOX_ENV is not set")
    env_root = Path(settings.flox_env)
    _require(env_root)

    if not is_baked(deployment_root):
        raise ConfigurationError(
            "deployment root was not substituted at build time "
            "(run `python -m tomcat_launcher.packaging PREFIX` when installing)"
        )
    out = Path(deployment_root)
    if not out.is_absolute():
        raise ConfigurationError(f"deployment root must be an absolute path: {deployment_root}")
    _require(out)
    _require(out / "webapps")

    java_bin = find_java(env_root=env_root, search_path=search_path)
    if java_bin is None:
        raise DependencyNotFoundError(
            f"could not find java (expected {env_root / 'bin' / 'java'} or java on PATH)"
        )
    if not java_bin.is_relative_to(env_root):
        logger.warning("java resolved to '%s' (not under $FLOX_ENV)", java_bin)

    catalina_sh = find_catalina(
        env_root=env_root,
        catalina_home_override=settings.catalina_home,
        search_path=search_path,
    )
    if catalina_sh is None:
        raise DependencyNotFoundError(
            "could not find Tomcat catalina.sh under $FLOX_ENV (or set CATALINA_HOME)"
        )
    catalina_sh = catalina_sh.resolve()
    catalina_home = catalina_sh.parent.parent
    _require(catalina_home / "conf")
    _require(catalina_home / "bin")

    java_home, jre_home = guess_java_homes(java_bin)
    logger.debug(
        "Resolved environment: java=%s catalina=%s java_home=%s jre_home=%s",
        java_bin,
        catalina_sh,
        java_home,
        jre_home,
    )
    return RuntimeEnvironment(
        env_root=env_root,
        deployment_root=out,
        java_bin=java_bin,
        catalina_home=catalina_home,
        catalina_sh=catalina_sh,
        java_home=java_home,
        jre_home=jre_home,
    )
