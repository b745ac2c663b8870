import json
import os
import subprocess
from pathlib import Path

import pytest
from rich.console import Console

import killernodes_installer.core as core_module
import killernodes_installer.services.docker_runtime as docker_runtime_module
from killernodes_installer.core import Installer
from killernodes_installer.models import InstallerSettings

ENV_TEMPLATE = (
    "APP_URL=http://localhost\n"
    "MARIADB_ROOT_PASSWORD=\n"
    "MARIADB_DATABASE=\n"
    "MARIADB_USER=\n"
    "MARIADB_PASSWORD=\n"
    "REDIS_PASSWORD=\n"
)


class FakeHost:
    """Stands in for every external command the installer runs."""

    def __init__(self, fail_prefix=None):
        self.calls = []
        self.crontab = None
        self.fail_prefix = fail_prefix

    def run(self, cmd, check=True, capture_output=False, cwd=None, input_text=None, error_cls=None, **_kwargs):
        self.calls.append(cmd)
        if self.fail_prefix and cmd[: len(self.fail_prefix)] == self.fail_prefix:
            raise error_cls(f"Command failed (1): {' '.join(cmd)}")

        stdout = ""
        returncode = 0
        if cmd[:2] == ["git", "clone"]:
            target = Path(cmd[-1])
            (target / "frontend").mkdir(parents=True)
            (target / "backend").mkdir()
            (target / ".env.example").write_text(ENV_TEMPLATE, encoding="utf-8")
        elif cmd[-2:] == ["config", "--services"]:
            stdout = "app\ndb\n"
        elif "ps" in cmd:
            stdout = "db\napp\n"
        elif cmd == ["crontab", "-l"]:
            if self.crontab is None:
                returncode = 1
            else:
                stdout = self.crontab
        elif cmd == ["crontab", "-"]:
            self.crontab = input_text
        return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr="")

    def called(self, *prefix):
        return any(call[: len(prefix)] == list(prefix) for call in self.calls)


@pytest.fixture
def host_files(tmp_path):
    os_release = tmp_path / "os-release"
    os_release.write_text('NAME="Ubuntu"\nVERSION_ID="24.04"\n', encoding="utf-8")
    meminfo = tmp_path / "meminfo"
    meminfo.write_text("MemTotal:        4028248 kB\n", encoding="utf-8")
    return os_release, meminfo


@pytest.fixture
def report_console(monkeypatch):
    console = Console(record=True, width=160)
    monkeypatch.setattr(core_module, "console", console)
    monkeypatch.setattr(docker_runtime_module.time, "sleep", lambda *_args: None)
    return console


def _settings(tmp_path, host_files):
    os_release, meminfo = host_files
    return InstallerSettings(
        app_dir=str(tmp_path / "KILLER_NODES"),
        backup_script_path=str(tmp_path / "bin" / "killernodes-backup.sh"),
        os_release_path=str(os_release),
        meminfo_path=str(meminfo),
        manifest_file=str(tmp_path / "install-manifest.json"),
        readiness_retries=3,
        readiness_backoff_seconds=0.0,
    )


def _scripted_prompt(answers):
    iterator = iter(answers)
    return lambda _message: next(iterator)


def _installer(tmp_path, host_files, host, answers):
    installer = Installer(
        settings=_settings(tmp_path, host_files),
        prompt_func=_scripted_prompt(answers),
        command_runner=host,
    )
    installer.package_service.which = lambda name: f"/usr/bin/{name}"
    return installer


def test_full_run_provisions_everything(tmp_path, host_files, report_console):
    host = FakeHost()
    installer = _installer(tmp_path, host_files, host, ["", "example.com", "admin@example.com"])

    exit_code = installer.run()

    assert exit_code == 0

    env_lines = (tmp_path / "KILLER_NODES" / ".env").read_text(encoding="utf-8").splitlines()
    assert "APP_URL=example.com" in env_lines
    assert "MARIADB_DATABASE=killernodes_v3" in env_lines

    backup_script = tmp_path / "bin" / "killernodes-backup.sh"
    assert backup_script.is_file()
    assert os.access(backup_script, os.X_OK)
    assert len(host.crontab.splitlines()) == 2

    context = installer.context
    output = report_console.export_text()
    assert "https://example.com" in output
    for secret in (context.db_root_password, context.db_password, context.redis_password):
        assert len(secret) == 20
        assert secret in output

    assert host.called("sudo", "certbot", "--nginx", "-d", "example.com")
    assert host.called("php", "killernodes", "makeAdmin")

    manifest = json.loads((tmp_path / "install-manifest.json").read_text(encoding="utf-8"))
    assert manifest["status"] == "success"
    assert manifest["metadata"]["domain"] == "example.com"
    assert manifest["steps"][-1]["name"] == "display_completion_message"
    assert context.db_password not in json.dumps(manifest)


def test_steps_run_in_fixed_order(tmp_path, host_files, report_console):
    host = FakeHost()
    installer = _installer(tmp_path, host_files, host, ["example.com", "admin@example.com"])

    assert installer.run() == 0

    manifest = json.loads((tmp_path / "install-manifest.json").read_text(encoding="utf-8"))
    assert [step["name"] for step in manifest["steps"]] == [
        "check_requirements",
        "collect_inputs",
        "generate_passwords",
        "install_dependencies",
        "clone_repository",
        "configure_environment",
        "build_applications",
        "start_services",
        "setup_ssl",
        "setup_periodic_tasks",
        "display_completion_message",
    ]


def test_low_memory_host_aborts_before_package_manager(tmp_path, host_files, report_console):
    _, meminfo = host_files
    meminfo.write_text("MemTotal:        1572864 kB\n", encoding="utf-8")
    host = FakeHost()
    installer = _installer(tmp_path, host_files, host, ["example.com", "admin@example.com"])

    exit_code = installer.run()

    assert exit_code == 1
    assert host.calls == []
    assert installer.context.domain is None
    assert not (tmp_path / "install-manifest.json").exists()
    assert installer.manifest_service.manifest["status"] == "failed"
    assert "Minimum 2GB RAM required" in installer.manifest_service.manifest["error"]


def test_failed_step_stops_the_pipeline(tmp_path, host_files, report_console):
    host = FakeHost(fail_prefix=["yarn", "build"])
    installer = _installer(tmp_path, host_files, host, ["example.com", "admin@example.com"])

    exit_code = installer.run()

    assert exit_code == 1
    assert not host.called("composer")
    assert not host.called("docker", "compose", "up")
    assert host.crontab is None

    manifest = json.loads((tmp_path / "install-manifest.json").read_text(encoding="utf-8"))
    assert manifest["steps"][-1]["name"] == "build_applications"
    assert manifest["steps"][-1]["status"] == "failed"
    # Nothing is rolled back on failure.
    assert (tmp_path / "KILLER_NODES" / ".env").exists()


def test_unexpected_errors_also_exit_non_zero(tmp_path, host_files, report_console, monkeypatch):
    host = FakeHost()
    installer = _installer(tmp_path, host_files, host, ["example.com", "admin@example.com"])

    def explode():
        raise ValueError("boom")

    monkeypatch.setattr(installer, "build_applications", explode)

    assert installer.run() == 1
