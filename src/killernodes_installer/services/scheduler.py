"""Cron entries and the generated backup script."""

import os
import shlex
from pathlib import Path
from typing import Callable, List

from killernodes_installer.constants import (
    APP_CONSOLE,
    BACKUP_SCHEDULE,
    SCRIPT_MODE,
    SUCCESS,
    TASK_RUNNER_SCHEDULE,
)
from killernodes_installer.errors import SchedulerError
from killernodes_installer.models import InstallContext

BACKUP_SCRIPT_TEMPLATE = """#!/bin/bash
DATE=$(date +%Y%m%d_%H%M%S)
BACKUP_DIR={backup_dir}
mkdir -p "$BACKUP_DIR"

# Backup database
mysqldump -u {db_user} -p{db_password} {db_name} > "$BACKUP_DIR/database_$DATE.sql"

# Backup configuration
tar -czf "$BACKUP_DIR/config_$DATE.tar.gz" {env_file} {storage_dir}

echo "Backup created: $BACKUP_DIR/$DATE"
"""


class SchedulerService:
    """Registers the task-runner and backup jobs in the user's crontab.

    Entries are appended on every run; existing lines are not deduplicated.
    """

    def __init__(
        self,
        logger,
        run_cmd: Callable,
        deploy_root: str,
        backup_script_path: str,
        backup_dir: str,
        db_name: str,
        db_user: str,
    ):
        self.logger = logger
        self.run_cmd = run_cmd
        self.deploy_root = deploy_root
        self.backup_script_path = backup_script_path
        self.backup_dir = backup_dir
        self.db_name = db_name
        self.db_user = db_user

    @property
    def task_runner_entry(self) -> str:
        console_path = f"{self.deploy_root}/backend/{APP_CONSOLE}"
        return f"{TASK_RUNNER_SCHEDULE} /usr/bin/php {console_path} cron:run >> /dev/null 2>&1"

    @property
    def backup_entry(self) -> str:
        return f"{BACKUP_SCHEDULE} {self.backup_script_path}"

    def install_periodic_tasks(self, context: InstallContext) -> Path:
        context.require_secrets()

        self.logger.info("Setting up cron jobs...")
        self.append_cron_entry(self.task_runner_entry)
        self.logger.log(SUCCESS, "Cron jobs configured")

        self.logger.info("Creating backup script...")
        script_path = self.write_backup_script(context.db_password)
        self.append_cron_entry(self.backup_entry)
        self.logger.log(SUCCESS, "Backup script created")
        return script_path

    def read_crontab(self) -> List[str]:
        result = self.run_cmd(
            ["crontab", "-l"],
            check=False,
            capture_output=True,
            error_cls=SchedulerError,
        )
        # `crontab -l` exits non-zero when the user has no crontab yet.
        if result.returncode != 0:
            return []
        return (result.stdout or "").splitlines()

    def append_cron_entry(self, entry: str):
        lines = self.read_crontab()
        lines.append(entry)
        self.run_cmd(
            ["crontab", "-"],
            input_text="\n".join(lines) + "\n",
            error_cls=SchedulerError,
        )
        self.logger.debug("Added cron entry: %s", entry)

    def render_backup_script(self, db_password: str) -> str:
        backend_dir = f"{self.deploy_root}/backend"
        return BACKUP_SCRIPT_TEMPLATE.format(
            backup_dir=shlex.quote(self.backup_dir),
            db_user=shlex.quote(self.db_user),
            db_password=shlex.quote(db_password),
            db_name=shlex.quote(self.db_name),
            env_file=shlex.quote(f"{backend_dir}/.env"),
            storage_dir=shlex.quote(f"{backend_dir}/storage/"),
        )

    def write_backup_script(self, db_password: str) -> Path:
        path = Path(self.backup_script_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8", newline="\n") as file_obj:
                file_obj.write(self.render_backup_script(db_password))
            os.chmod(path, SCRIPT_MODE)
        except OSError as exc:
            raise SchedulerError(f"Could not write backup script {path}: {exc}") from exc
        return path
