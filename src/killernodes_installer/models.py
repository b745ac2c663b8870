"""Shared domain models for the KILLER NODES installer."""

from dataclasses import dataclass, replace
from typing import Optional

from .constants import (
    DEFAULT_APP_DIR,
    DEFAULT_BACKUP_DIR,
    DEFAULT_BACKUP_SCRIPT,
    DEFAULT_DB_NAME,
    DEFAULT_DB_USER,
    DEFAULT_DEPLOY_ROOT,
    DEFAULT_MANIFEST_FILE,
    DEFAULT_REPO_URL,
)
from .errors import InstallerError


@dataclass(frozen=True)
class InstallContext:
    """Values collected and generated during a single installation run.

    Instances are never mutated: each stage returns a new, more complete
    context which is handed to the steps that need it.
    """

    domain: Optional[str] = None
    email: Optional[str] = None
    db_root_password: Optional[str] = None
    db_password: Optional[str] = None
    redis_password: Optional[str] = None

    @property
    def has_secrets(self) -> bool:
        return all((self.db_root_password, self.db_password, self.redis_password))

    def with_inputs(self, domain: str, email: str) -> "InstallContext":
        if not domain or not email:
            raise InstallerError("Domain and email must both be non-empty.")
        return replace(self, domain=domain, email=email)

    def with_secrets(
        self,
        db_root_password: str,
        db_password: str,
        redis_password: str,
    ) -> "InstallContext":
        if self.has_secrets:
            raise InstallerError("Credentials were already generated for this run.")
        self.require_inputs()
        return replace(
            self,
            db_root_password=db_root_password,
            db_password=db_password,
            redis_password=redis_password,
        )

    def require_inputs(self):
        if not self.domain or not self.email:
            raise InstallerError("Domain and email must be collected before this step.")

    def require_secrets(self):
        self.require_inputs()
        if not self.has_secrets:
            raise InstallerError("Credentials must be generated before this step.")


@dataclass(frozen=True)
class InstallerSettings:
    """Host paths and tunables for an installation run."""

    app_dir: str = DEFAULT_APP_DIR
    repo_url: str = DEFAULT_REPO_URL
    deploy_root: str = DEFAULT_DEPLOY_ROOT
    backup_script_path: str = DEFAULT_BACKUP_SCRIPT
    backup_dir: str = DEFAULT_BACKUP_DIR
    db_name: str = DEFAULT_DB_NAME
    db_user: str = DEFAULT_DB_USER
    os_release_path: str = "/etc/os-release"
    meminfo_path: str = "/proc/meminfo"
    manifest_file: str = DEFAULT_MANIFEST_FILE
    readiness_retries: int = 10
    readiness_backoff_seconds: float = 2.0
    readiness_max_backoff_seconds: float = 30.0
