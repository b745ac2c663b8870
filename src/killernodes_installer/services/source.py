"""Application source checkout."""

import os
import shutil
from typing import Callable

from killernodes_installer.constants import SUCCESS
from killernodes_installer.errors import CloneError
from killernodes_installer.errors_catalog import actionable_error


class SourceService:
    """Clones the application repository, replacing any previous checkout."""

    def __init__(self, logger, run_cmd: Callable, repo_url: str):
        self.logger = logger
        self.run_cmd = run_cmd
        self.repo_url = repo_url

    def fetch(self, target_dir: str):
        self.logger.info("Cloning KILLER NODES repository...")

        if os.path.exists(target_dir):
            self.logger.warning("%s already exists. Removing...", target_dir)
            try:
                if os.path.isdir(target_dir) and not os.path.islink(target_dir):
                    shutil.rmtree(target_dir)
                else:
                    os.remove(target_dir)
            except OSError as exc:
                raise CloneError(f"Could not remove existing {target_dir}: {exc}") from exc

        try:
            self.run_cmd(["git", "clone", self.repo_url, target_dir], error_cls=CloneError)
        except CloneError as exc:
            raise CloneError(
                f"{actionable_error('clone_failed', url=self.repo_url, path=target_dir)}\n{exc}"
            ) from exc

        self.logger.log(SUCCESS, "Repository cloned")
