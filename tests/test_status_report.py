from __future__ import annotations

from pathlib import Path

from tomcat_launcher.rendering.status_report import (
    StatusReportInput,
    StatusReportRenderer,
    get_default_template_dir,
)
from tomcat_launcher.runtime.environment import RuntimeEnvironment
from tomcat_launcher.runtime.state_dir import get_state_paths


def _input(tmp_path: Path, pid: int | None) -> StatusReportInput:
    environment = RuntimeEnvironment(
        env_root=Path("/flox/env"),
        deployment_root=Path("/opt/app"),
        java_bin=Path("/flox/env/bin/java"),
        catalina_home=Path("/flox/env/share/tomcat"),
        catalina_sh=Path("/flox/env/share/tomcat/bin/catalina.sh"),
        java_home=Path("/flox/env"),
    )
    return StatusReportInput(
        environment=environment, state=get_state_paths(state_dir=tmp_path), pid=pid
    )


def test_status_report_lists_every_path(tmp_path: Path) -> None:
    renderer = StatusReportRenderer(template_dir=get_default_template_dir())
    body = renderer.render(data=_input(tmp_path, pid=4242))
    base = tmp_path.resolve() / "catalina-base"
    assert body.splitlines() == [
        "FLOX_ENV       = /flox/env",
        "out            = /opt/app",
        "JAVA_BIN       = /flox/env/bin/java",
        "CATALINA_HOME  = /flox/env/share/tomcat",
        f"CATALINA_BASE  = {base}",
        f"LOGS           = {base / 'logs'}",
        "WEBAPPS (imm)  = /opt/app/webapps",
        f"WEBAPPS (mut)  = {base / 'webapps'}",
        "STATUS         = running (pid 4242)",
    ]
    assert body.endswith("\n")


def test_status_report_for_stopped_instance(tmp_path: Path) -> None:
    renderer = StatusReportRenderer(template_dir=get_default_template_dir())
    body = renderer.render(data=_input(tmp_path, pid=None))
    assert body.splitlines()[-1] == "STATUS         = not running"
