"""Mutable Tomcat instance directory (CATALINA_BASE).

Layout::

    <state-dir>/catalina-base/
        conf/      seeded from $CATALINA_HOME/conf on first use
        logs/
        temp/      also holds tomcat.pid
        work/
        webapps/   symlinks (or copies) of the immutable webapps

An auto-created state directory lives only as long as the
``open_state_directory`` context unless the caller asked to keep it.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from tomcat_launcher.core.errors import ConfigurationError
from tomcat_launcher.runtime.environment import RuntimeEnvironment

logger = logging.getLogger(__name__)

STATE_DIR_PREFIX = "flox-tomcat."
CATALINA_BASE_NAME = "catalina-base"
LAYOUT_DIRS = ("conf", "logs", "temp", "work", "webapps")


@dataclass(frozen=True)
class StatePaths:
    """Resolved paths of one mutable instance."""

    state_dir: Path
    catalina_base: Path
    conf_dir: Path
    logs_dir: Path
    temp_dir: Path
    work_dir: Path
    webapps_dir: Path
    pid_file: Path
    catalina_out: Path
    auto_created: bool = False
    keep: bool = False

    @property
    def ephemeral(self) -> bool:
        """True if the directory is removed when the launcher exits."""

        return self.auto_created and not self.keep


def get_state_paths(
    *, state_dir: str | Path, auto_created: bool = False, keep: bool = False
) -> StatePaths:
    """Returns instance paths for a given state directory."""

    root = Path(state_dir).expanduser().resolve()
    base = root / CATALINA_BASE_NAME
    return StatePaths(
        state_dir=root,
        catalina_base=base,
        conf_dir=base / "conf",
        logs_dir=base / "logs",
        temp_dir=base / "temp",
        work_dir=base / "work",
        webapps_dir=base / "webapps",
        pid_file=base / "temp" / "tomcat.pid",
        catalina_out=base / "logs" / "catalina.out",
        auto_created=auto_created,
        keep=keep,
    )


def _create_temp_state_dir(runtime_dir: str | None) -> Path:
    parent = runtime_dir or tempfile.gettempdir()
    try:
        return Path(tempfile.mkdtemp(prefix=STATE_DIR_PREFIX, dir=parent))
    except OSError as exc:
        raise ConfigurationError(f"cannot create state directory under {parent}: {exc}") from exc


def remove_state_dir(paths: StatePaths) -> None:
    """Deletes an ephemeral state directory tree."""

    if not paths.ephemeral:
        return
    try:
        shutil.rmtree(paths.state_dir)
    except FileNotFoundError:
        return
    except OSError as exc:
        logger.warning("could not remove state directory %s: %s", paths.state_dir, exc)
        return
    logger.info("Removed state directory %s", paths.state_dir)


@contextmanager
def open_state_directory(
    *,
    requested: str | Path | None = None,
    keep: bool = False,
    runtime_dir: str | None = None,
) -> Iterator[StatePaths]:
    """Creates or reuses a state directory for the duration of the block.

    Args:
        requested: Persistent directory chosen by the caller. Created if
            missing and never deleted.
        keep: Keep an auto-created directory after exit.
        runtime_dir: Parent for auto-created directories; falls back to the
            system temp directory.

    Raises:
        ConfigurationError: If the directory cannot be created.
    """

    if requested is not None:
        try:
            Path(requested).expanduser().mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigurationError(f"cannot create state directory {requested}: {exc}") from exc
        paths = get_state_paths(state_dir=requested)
    else:
        paths = get_state_paths(
            state_dir=_create_temp_state_dir(runtime_dir), auto_created=True, keep=keep
        )
        logger.info("Created state directory %s", paths.state_dir)

    try:
        yield paths
    finally:
        remove_state_dir(paths)


def ensure_layout(paths: StatePaths) -> None:
    """Ensures the CATALINA_BASE subdirectories exist."""

    for name in LAYOUT_DIRS:
        (paths.catalina_base / name).mkdir(parents=True, exist_ok=True)


def seed_conf(paths: StatePaths, *, catalina_home: Path) -> bool:
    """Copies the default Tomcat configuration into a fresh instance.

    Returns:
        True if the configuration was copied, False if the instance already
        had a ``server.xml``.
    """

    if (paths.conf_dir / "server.xml").is_file():
        return False
    shutil.copytree(catalina_home / "conf", paths.conf_dir, symlinks=True, dirs_exist_ok=True)
    logger.info("Seeded %s from %s", paths.conf_dir, catalina_home / "conf")
    return True


def _copy_entry(source: Path, dest: Path) -> None:
    if source.is_dir() and not source.is_symlink():
        shutil.copytree(source, dest, symlinks=True)
    else:
        shutil.copy2(source, dest, follow_symlinks=False)


def link_webapps(paths: StatePaths, *, deployment_webapps: Path) -> list[str]:
    """Exposes every immutable webapp inside the mutable webapps directory.

    Entries already present are left alone, even if they differ from the
    immutable source. Symlinks are preferred; a copy is made where the
    filesystem refuses them.

    Returns:
        Names of the entries created by this call.
    """

    if not deployment_webapps.is_dir():
        logger.warning("no webapps directory found at %s", deployment_webapps)
        return []

    created: list[str] = []
    for name in sorted(os.listdir(deployment_webapps)):
        source = deployment_webapps / name
        dest = paths.webapps_dir / name
        if os.path.lexists(dest):
            continue
        try:
            os.symlink(source, dest)
        except (OSError, NotImplementedError):
            logger.info("Symlink refused, copying %s", source)
            _copy_entry(source, dest)
        created.append(name)
    return created


def prepare_state(paths: StatePaths, *, environment: RuntimeEnvironment) -> None:
    """Builds the instance layout, seeds conf and links webapps. Idempotent.

    Raises:
        ConfigurationError: If the instance tree cannot be written.
    """

    try:
        ensure_layout(paths)
        seed_conf(paths, catalina_home=environment.catalina_home)
        link_webapps(paths, deployment_webapps=environment.deployment_webapps)
    except OSError as exc:
        raise ConfigurationError(
            f"cannot prepare state directory {paths.state_dir}: {exc}"
        ) from exc
