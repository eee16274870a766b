"""Bakes the deployment root into an installed launcher.

Run once by the packaging step, after the package is installed into its
output prefix and the webapps are copied to ``PREFIX/webapps``::

    python -m tomcat_launcher.packaging /nix/store/...-sample-tomcat-app
"""

from __future__ import annotations

import argparse
import logging
import re
import sys
from collections.abc import Sequence
from pathlib import Path

from tomcat_launcher import build_info
from tomcat_launcher.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

_ASSIGNMENT_RE = re.compile(r"^DEPLOYMENT_ROOT = .*$", re.MULTILINE)


def bake_deployment_root(prefix: str | Path, *, module_path: str | Path | None = None) -> Path:
    """Rewrites ``DEPLOYMENT_ROOT`` in ``build_info.py``.

    Args:
        prefix: Absolute output prefix holding ``webapps``.
        module_path: File to rewrite; defaults to the installed build_info.py.

    Returns:
        The rewritten file.

    Raises:
        ConfigurationError: If ``prefix`` is relative or the file has no
            ``DEPLOYMENT_ROOT`` assignment.
    """

    prefix_path = Path(prefix)
    if not prefix_path.is_absolute():
        raise ConfigurationError(f"deployment root must be an absolute path, got: {prefix}")
    target = Path(module_path) if module_path is not None else Path(build_info.__file__)
    source = target.read_text(encoding="utf-8")
    baked, count = _ASSIGNMENT_RE.subn(
        lambda _: f"DEPLOYMENT_ROOT = {str(prefix_path)!r}", source, count=1
    )
    if count != 1:
        raise ConfigurationError(f"no DEPLOYMENT_ROOT assignment in {target}")
    target.write_text(baked, encoding="utf-8")
    logger.info("Baked deployment root %s into %s", prefix_path, target)
    return target


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="python -m tomcat_launcher.packaging",
        description="Substitute the build-time deployment root.",
    )
    parser.add_argument("prefix", help="Absolute output prefix containing webapps/.")
    parser.add_argument("--module-path", help="build_info.py to rewrite (default: installed).")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    try:
        bake_deployment_root(args.prefix, module_path=args.module_path)
    except (ConfigurationError, OSError) as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
