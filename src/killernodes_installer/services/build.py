"""Frontend and backend build steps."""

import os
from typing import Callable

from killernodes_installer.constants import SUCCESS
from killernodes_installer.errors import BuildError


class BuildService:
    """Runs the application's own build tooling in its checkout."""

    def __init__(self, logger, run_cmd: Callable):
        self.logger = logger
        self.run_cmd = run_cmd

    def build(self, app_dir: str):
        self.logger.info("Building applications...")

        frontend_dir = os.path.join(app_dir, "frontend")
        backend_dir = os.path.join(app_dir, "backend")
        for path in (frontend_dir, backend_dir):
            if not os.path.isdir(path):
                raise BuildError(f"Expected build directory is missing: {path}")

        self.logger.info("Building frontend...")
        self.run_cmd(["yarn", "install"], cwd=frontend_dir, error_cls=BuildError)
        self.run_cmd(["yarn", "build"], cwd=frontend_dir, error_cls=BuildError)

        self.logger.info("Building backend...")
        self.run_cmd(["composer", "install"], cwd=backend_dir, error_cls=BuildError)

        self.logger.log(SUCCESS, "Applications built")
