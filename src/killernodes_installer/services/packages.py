"""System package and container tooling installation."""

import getpass
import os
import platform
import shutil
import tempfile
from typing import Callable, Iterable

from killernodes_installer.constants import (
    COMPOSE_INSTALL_PATH,
    COMPOSE_RELEASE_URL,
    DOCKER_INSTALL_URL,
    SUCCESS,
    SYSTEM_PACKAGES,
)
from killernodes_installer.errors import PackageManagerError


class PackageService:
    """Installs OS packages, Docker and Docker Compose.

    Docker and Compose are only installed when missing, so re-running the
    installer leaves them untouched.
    """

    def __init__(
        self,
        logger,
        run_cmd: Callable,
        download_service,
        docker_runtime_service,
        packages: Iterable[str] = SYSTEM_PACKAGES,
        which: Callable = shutil.which,
    ):
        self.logger = logger
        self.run_cmd = run_cmd
        self.download_service = download_service
        self.docker_runtime_service = docker_runtime_service
        self.packages = list(packages)
        self.which = which

    def install(self):
        self.logger.info("Installing system dependencies...")

        self.run_cmd(["sudo", "apt", "update"], error_cls=PackageManagerError)
        self.run_cmd(
            ["sudo", "apt", "install", "-y"] + self.packages,
            error_cls=PackageManagerError,
        )

        if self.which("docker") is None:
            self.install_docker()
        else:
            self.logger.debug("Docker already installed, skipping.")

        if self.docker_runtime_service.find_docker_compose_cmd() is None:
            self.install_docker_compose()
        else:
            self.logger.debug("Docker Compose already installed, skipping.")

        self.logger.log(SUCCESS, "Dependencies installed")

    def install_docker(self):
        self.logger.info("Installing Docker...")
        with tempfile.TemporaryDirectory(prefix="killernodes-docker-") as work_dir:
            script_path = os.path.join(work_dir, "get-docker.sh")
            self.download_service.download_file(
                DOCKER_INSTALL_URL,
                script_path,
                "Downloading Docker installer...",
            )
            self.run_cmd(["sh", script_path], error_cls=PackageManagerError)

        self.run_cmd(
            ["sudo", "usermod", "-aG", "docker", getpass.getuser()],
            error_cls=PackageManagerError,
        )

    def install_docker_compose(self):
        self.logger.info("Installing Docker Compose...")
        url = COMPOSE_RELEASE_URL.format(system=platform.system(), machine=platform.machine())
        with tempfile.TemporaryDirectory(prefix="killernodes-compose-") as work_dir:
            binary_path = os.path.join(work_dir, "docker-compose")
            self.download_service.download_file(url, binary_path, "Downloading Docker Compose...")
            self.run_cmd(
                ["sudo", "install", "-m", "0755", binary_path, COMPOSE_INSTALL_PATH],
                error_cls=PackageManagerError,
            )
