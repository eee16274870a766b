"""Build-time constants.

``DEPLOYMENT_ROOT`` is rewritten by ``tomcat_launcher.packaging`` when the
package is installed into its output prefix. It must never be computed from
the launcher's own location at run time.
"""

from __future__ import annotations

DEPLOYMENT_ROOT = "@out@"

# Split so that a global `sed s|@out@|...|g` over this file leaves it intact.
PLACEHOLDER = "@" + "out@"


def is_baked(value: str = DEPLOYMENT_ROOT) -> bool:
    """Returns True once the placeholder has been substituted."""

    return bool(value) and value != PLACEHOLDER
