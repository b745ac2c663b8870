import os
import subprocess

import pytest

from killernodes_installer.errors import InstallerError
from killernodes_installer.models import InstallContext
from killernodes_installer.services.scheduler import SchedulerService


class DummyLogger:
    def info(self, *_args, **_kwargs):
        return None

    def debug(self, *_args, **_kwargs):
        return None

    def log(self, *_args, **_kwargs):
        return None


class FakeCrontab:
    def __init__(self, existing=None):
        self.content = existing

    def __call__(self, cmd, input_text=None, **_kwargs):
        if cmd == ["crontab", "-l"]:
            if self.content is None:
                return subprocess.CompletedProcess(cmd, 1, stdout="", stderr="no crontab for user")
            return subprocess.CompletedProcess(cmd, 0, stdout=self.content, stderr="")
        if cmd == ["crontab", "-"]:
            self.content = input_text
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")
        raise AssertionError(f"unexpected command: {cmd}")

    @property
    def lines(self):
        return (self.content or "").splitlines()


def _context():
    return InstallContext(
        domain="example.com",
        email="admin@example.com",
        db_root_password="RootPass0123456789ab",
        db_password="DbPass0123456789abcd",
        redis_password="RedisPass0123456789a",
    )


def _service(run_cmd, tmp_path):
    return SchedulerService(
        logger=DummyLogger(),
        run_cmd=run_cmd,
        deploy_root="/var/www/killernodes-v3",
        backup_script_path=str(tmp_path / "bin" / "killernodes-backup.sh"),
        backup_dir="/var/backups/killernodes",
        db_name="killernodes_v3",
        db_user="killernodes_v3",
    )


def test_install_periodic_tasks_adds_two_entries_and_backup_script(tmp_path):
    crontab = FakeCrontab()

    script_path = _service(crontab, tmp_path).install_periodic_tasks(_context())

    assert crontab.lines == [
        "* * * * * /usr/bin/php /var/www/killernodes-v3/backend/killernodes cron:run >> /dev/null 2>&1",
        f"0 2 * * * {script_path}",
    ]
    assert os.access(script_path, os.X_OK)

    script = script_path.read_text(encoding="utf-8")
    assert script.startswith("#!/bin/bash\n")
    assert "DATE=$(date +%Y%m%d_%H%M%S)" in script
    assert "mysqldump -u killernodes_v3 -pDbPass0123456789abcd killernodes_v3" in script
    assert '"$BACKUP_DIR/database_$DATE.sql"' in script
    assert "/var/www/killernodes-v3/backend/.env /var/www/killernodes-v3/backend/storage/" in script


def test_existing_entries_are_kept(tmp_path):
    crontab = FakeCrontab(existing="0 0 * * * /usr/local/bin/other-job\n")

    _service(crontab, tmp_path).install_periodic_tasks(_context())

    assert crontab.lines[0] == "0 0 * * * /usr/local/bin/other-job"
    assert len(crontab.lines) == 3


def test_rerun_appends_duplicate_entries(tmp_path):
    crontab = FakeCrontab()
    service = _service(crontab, tmp_path)

    service.install_periodic_tasks(_context())
    service.install_periodic_tasks(_context())

    assert len(crontab.lines) == 4


def test_backup_script_quotes_unusual_passwords(tmp_path):
    script = _service(FakeCrontab(), tmp_path).render_backup_script("it's")

    assert "-p'it'\"'\"'s'" in script


def test_install_periodic_tasks_requires_secrets(tmp_path):
    with pytest.raises(InstallerError):
        _service(FakeCrontab(), tmp_path).install_periodic_tasks(
            InstallContext(domain="example.com", email="admin@example.com")
        )


def test_existing_blank_lines_and_comments_are_preserved(tmp_path):
    existing = "# nightly jobs\n0 0 * * * /usr/local/bin/other-job\n\nMAILTO=ops@example.com\n"
    crontab = FakeCrontab(existing=existing)

    _service(crontab, tmp_path).install_periodic_tasks(_context())

    assert crontab.content.startswith(existing)
    assert crontab.lines[:4] == [
        "# nightly jobs",
        "0 0 * * * /usr/local/bin/other-job",
        "",
        "MAILTO=ops@example.com",
    ]
    assert len(crontab.lines) == 6
