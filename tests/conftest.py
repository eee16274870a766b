from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pytest

# Records its mode and a few environment facts, then exits with 3 if the mode
# is listed in STUB_FAIL_MODES.
CATALINA_STUB = """#!/bin/sh
if [ -n "$STUB_RECORD" ]; then
  echo "mode=$1" >> "$STUB_RECORD"
  echo "base=$CATALINA_BASE" >> "$STUB_RECORD"
  echo "pid=$CATALINA_PID" >> "$STUB_RECORD"
  echo "java_home=${JAVA_HOME:-}" >> "$STUB_RECORD"
  if [ -d "$CATALINA_BASE/webapps" ]; then
    echo "webapps=present" >> "$STUB_RECORD"
  fi
fi
case " ${STUB_FAIL_MODES:-} " in
  *" $1 "*) exit 3 ;;
esac
exit 0
"""

JAVA_STUB = "#!/bin/sh\nexit 0\n"


@dataclass(frozen=True)
class FloxLayout:
    env_root: Path
    deployment_root: Path
    catalina_home: Path
    runtime_dir: Path
    record_file: Path

    @property
    def catalina_sh(self) -> Path:
        return self.catalina_home / "bin" / "catalina.sh"

    def recorded_modes(self) -> list[str]:
        if not self.record_file.exists():
            return []
        lines = self.record_file.read_text(encoding="utf-8").splitlines()
        return [line.split("=", 1)[1] for line in lines if line.startswith("mode=")]

    def recorded_values(self, key: str) -> list[str]:
        if not self.record_file.exists():
            return []
        lines = self.record_file.read_text(encoding="utf-8").splitlines()
        prefix = f"{key}="
        return [line[len(prefix) :] for line in lines if line.startswith(prefix)]


def write_executable(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    path.chmod(0o755)
    return path


def make_tomcat_home(root: Path) -> Path:
    write_executable(root / "bin" / "catalina.sh", CATALINA_STUB)
    conf = root / "conf"
    conf.mkdir(parents=True, exist_ok=True)
    (conf / "server.xml").write_text('<Server port="8005"/>\n', encoding="utf-8")
    (conf / "web.xml").write_text("<web-app/>\n", encoding="utf-8")
    (conf / "Catalina" / "localhost").mkdir(parents=True, exist_ok=True)
    return root


@pytest.fixture
def flox_layout(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> FloxLayout:
    env_root = tmp_path / "flox-env"
    write_executable(env_root / "bin" / "java", JAVA_STUB)
    catalina_home = make_tomcat_home(env_root / "share" / "apache-tomcat-10.1.34")

    deployment_root = tmp_path / "out"
    webapps = deployment_root / "webapps"
    webapps.mkdir(parents=True)
    (webapps / "sample.war").write_bytes(b"PK\x03\x04sample")
    (webapps / "docs").mkdir()
    (webapps / "docs" / "index.html").write_text("<h1>docs</h1>\n", encoding="utf-8")

    runtime_dir = tmp_path / "runtime"
    runtime_dir.mkdir()
    record_file = tmp_path / "catalina-calls.log"

    monkeypatch.setenv("FLOX_ENV", str(env_root))
    monkeypatch.setenv("XDG_RUNTIME_DIR", str(runtime_dir))
    monkeypatch.setenv("STUB_RECORD", str(record_file))
    for name in ("CATALINA_HOME", "JAVA_HOME", "JRE_HOME", "STUB_FAIL_MODES", "LAUNCHER_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    return FloxLayout(
        env_root=env_root,
        deployment_root=deployment_root,
        catalina_home=catalina_home.resolve(),
        runtime_dir=runtime_dir,
        record_file=record_file,
    )
