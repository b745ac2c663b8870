"""Docker Compose runtime services for the KILLER NODES installer."""

import time
from typing import Callable, List, Optional, Set

from killernodes_installer.constants import APP_CONSOLE, SUCCESS
from killernodes_installer.errors import InstallerError, StartupError
from killernodes_installer.errors_catalog import actionable_error


class DockerRuntimeService:
    """Detects Docker Compose, starts the stack and gates on service readiness."""

    def __init__(
        self,
        logger,
        console,
        run_cmd: Callable,
        readiness_retries: int = 10,
        readiness_backoff_seconds: float = 2.0,
        readiness_max_backoff_seconds: float = 30.0,
    ):
        if readiness_retries < 1:
            raise StartupError(
                f"readiness_retries must be at least 1, got {readiness_retries}."
            )
        self.logger = logger
        self.console = console
        self.run_cmd = run_cmd
        self.readiness_retries = readiness_retries
        self.readiness_backoff_seconds = readiness_backoff_seconds
        self.readiness_max_backoff_seconds = readiness_max_backoff_seconds

    def find_docker_compose_cmd(self) -> Optional[List[str]]:
        for candidate, probe in (
            (["docker", "compose"], ["docker", "compose", "version"]),
            (["docker-compose"], ["docker-compose", "--version"]),
        ):
            try:
                result = self.run_cmd(probe, check=False, capture_output=True)
            except InstallerError:
                continue
            if result.returncode == 0:
                return candidate
        return None

    def get_docker_compose_cmd(self) -> List[str]:
        compose_cmd = self.find_docker_compose_cmd()
        if compose_cmd is None:
            raise StartupError(
                "Docker Compose is not available. Install Docker Compose v2 (`docker compose`) "
                "or v1 (`docker-compose`) and try again."
            )
        return compose_cmd

    def launch(self, app_dir: str):
        self.logger.info("Starting services...")
        compose_cmd = self.get_docker_compose_cmd()

        self.run_cmd(compose_cmd + ["up", "-d"], cwd=app_dir, error_cls=StartupError)

        self.logger.info("Waiting for services to start...")
        self.wait_for_services(compose_cmd, app_dir)

        self.logger.info("Running initial setup...")
        self.run_cmd(["php", APP_CONSOLE, "migrate"], cwd=app_dir, error_cls=StartupError)
        self.run_cmd(["php", APP_CONSOLE, "makeAdmin"], cwd=app_dir, error_cls=StartupError)

        self.logger.log(SUCCESS, "Services started")

    def declared_services(self, compose_cmd: List[str], app_dir: str) -> Set[str]:
        result = self.run_cmd(
            compose_cmd + ["config", "--services"],
            capture_output=True,
            cwd=app_dir,
            error_cls=StartupError,
        )
        return _service_names(result.stdout)

    def running_services(self, compose_cmd: List[str], app_dir: str) -> Set[str]:
        result = self.run_cmd(
            compose_cmd + ["ps", "--services", "--filter", "status=running"],
            check=False,
            capture_output=True,
            cwd=app_dir,
            error_cls=StartupError,
        )
        if result.returncode != 0:
            return set()
        return _service_names(result.stdout)

    def wait_for_services(self, compose_cmd: List[str], app_dir: str):
        expected = self.declared_services(compose_cmd, app_dir)
        delay = self.readiness_backoff_seconds
        pending = set(expected)

        for attempt in range(1, self.readiness_retries + 1):
            pending = expected - self.running_services(compose_cmd, app_dir)
            if not pending:
                self.console.print("[green]All services are running.[/green]")
                return

            if attempt < self.readiness_retries:
                self.logger.debug(
                    "Services not ready (%s/%s), retrying in %.1fs: %s",
                    attempt,
                    self.readiness_retries,
                    delay,
                    ", ".join(sorted(pending)),
                )
                time.sleep(delay)
                delay = min(delay * 2, self.readiness_max_backoff_seconds)

        raise StartupError(
            actionable_error(
                "services_not_ready",
                attempts=str(self.readiness_retries),
                pending=", ".join(sorted(pending)),
                path=app_dir,
            )
        )


def _service_names(output: Optional[str]) -> Set[str]:
    return {line.strip() for line in (output or "").splitlines() if line.strip()}
