"""Status report rendering."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from tomcat_launcher.runtime.environment import RuntimeEnvironment
from tomcat_launcher.runtime.state_dir import StatePaths


@dataclass(frozen=True)
class StatusReportInput:
    """Input to render a status report."""

    environment: RuntimeEnvironment
    state: StatePaths
    pid: int | None


class StatusReportRenderer:
    """Renders the `status` command output from a Jinja2 template."""

    def __init__(self, *, template_dir: str, template_name: str = "status.txt") -> None:
        env = Environment(
            loader=FileSystemLoader(template_dir),
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
        )
        self._template = env.get_template(template_name)

    def render(self, *, data: StatusReportInput) -> str:
        environment = data.environment
        state = data.state
        body = self._template.render(
            env_root=environment.env_root,
            deployment_root=environment.deployment_root,
            java_bin=environment.java_bin,
            catalina_home=environment.catalina_home,
            catalina_base=state.catalina_base,
            logs_dir=state.logs_dir,
            deployment_webapps=environment.deployment_webapps,
            webapps_dir=state.webapps_dir,
            pid=data.pid,
        )
        return body.rstrip("\n") + "\n"


def get_default_template_dir() -> str:
    """Returns the default template directory path."""

    return str(Path(__file__).parent / "templates")
