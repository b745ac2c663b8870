import logging
import os
import subprocess
import uuid
from pathlib import Path
from typing import Callable, List, Optional

import requests
from rich.console import Console

from .constants import SUCCESS
from .errors import InstallerError
from .models import InstallContext, InstallerSettings
from .services.build import BuildService
from .services.command_runner import CommandRunner
from .services.credentials import CredentialService
from .services.docker_runtime import DockerRuntimeService
from .services.download import DownloadService
from .services.environment import EnvironmentService
from .services.manifest import ManifestService
from .services.packages import PackageService
from .services.preflight import PreflightService
from .services.prompt import InputService
from .services.report import ReportService
from .services.scheduler import SchedulerService
from .services.source import SourceService
from .services.tls import TLSService

console = Console()
logger = logging.getLogger("killernodes_installer")


class Installer:
    """Provisions KILLER NODES on a fresh Ubuntu host.

    Steps run strictly in order and the first failure aborts the run. Nothing
    is rolled back: a failed run leaves whatever it already changed in place.
    """

    def __init__(
        self,
        domain: Optional[str] = None,
        email: Optional[str] = None,
        settings: Optional[InstallerSettings] = None,
        prompt_func: Optional[Callable[[str], str]] = None,
        command_runner: Optional[CommandRunner] = None,
    ):
        self.preset_domain = domain
        self.preset_email = email
        self.settings = settings or InstallerSettings()
        self.context = InstallContext()
        self.app_dir = os.path.abspath(self.settings.app_dir)
        self.current_step_name: Optional[str] = None

        self.command_runner = command_runner or CommandRunner(logger=logger)
        self.manifest_service = ManifestService(
            manifest_file=self.settings.manifest_file,
            logger=logger,
        )
        self.preflight_service = PreflightService(
            logger=logger,
            os_release_path=self.settings.os_release_path,
            meminfo_path=self.settings.meminfo_path,
        )
        self.input_service = InputService(logger=logger, console=console, prompt_func=prompt_func)
        self.credential_service = CredentialService(logger=logger)
        self.download_service = DownloadService(
            logger=logger,
            console=console,
            requests_module=requests,
        )
        self.docker_runtime_service = DockerRuntimeService(
            logger=logger,
            console=console,
            run_cmd=self._run_cmd,
            readiness_retries=self.settings.readiness_retries,
            readiness_backoff_seconds=self.settings.readiness_backoff_seconds,
            readiness_max_backoff_seconds=self.settings.readiness_max_backoff_seconds,
        )
        self.package_service = PackageService(
            logger=logger,
            run_cmd=self._run_cmd,
            download_service=self.download_service,
            docker_runtime_service=self.docker_runtime_service,
        )
        self.source_service = SourceService(
            logger=logger,
            run_cmd=self._run_cmd,
            repo_url=self.settings.repo_url,
        )
        self.environment_service = EnvironmentService(
            logger=logger,
            db_name=self.settings.db_name,
            db_user=self.settings.db_user,
        )
        self.build_service = BuildService(logger=logger, run_cmd=self._run_cmd)
        self.tls_service = TLSService(logger=logger, run_cmd=self._run_cmd)
        self.scheduler_service = SchedulerService(
            logger=logger,
            run_cmd=self._run_cmd,
            deploy_root=self.settings.deploy_root,
            backup_script_path=self.settings.backup_script_path,
            backup_dir=self.settings.backup_dir,
            db_name=self.settings.db_name,
            db_user=self.settings.db_user,
        )
        self.report_service = ReportService(
            console=console,
            backup_script_path=self.settings.backup_script_path,
        )

    def _run_cmd(self, cmd: List[str], **kwargs) -> subprocess.CompletedProcess:
        return self.command_runner.run(cmd, **kwargs)

    def _run_step(self, name: str, callback, *args, **kwargs):
        self.manifest_service.step_started(name)
        self.current_step_name = name
        logger.debug("Step started: %s", name)

        try:
            result = callback(*args, **kwargs)
        except Exception as exc:
            self.manifest_service.step_finished(name, "failed", error=str(exc))
            raise

        self.manifest_service.step_finished(name, "success")
        self.current_step_name = None
        return result

    def check_requirements(self):
        self.preflight_service.check()

    def collect_inputs(self, context: InstallContext) -> InstallContext:
        domain = self.input_service.collect_domain(self.preset_domain)
        email = self.input_service.collect_email(self.preset_email)
        return context.with_inputs(domain=domain, email=email)

    def generate_passwords(self, context: InstallContext) -> InstallContext:
        return self.credential_service.generate_context_secrets(context)

    def install_dependencies(self):
        self.package_service.install()

    def clone_repository(self):
        self.source_service.fetch(self.app_dir)

    def configure_environment(self, context: InstallContext) -> Path:
        env_path = self.environment_service.configure(self.app_dir, context)
        self.manifest_service.add_artifact("env_file", str(env_path))
        return env_path

    def build_applications(self):
        self.build_service.build(self.app_dir)

    def start_services(self):
        self.docker_runtime_service.launch(self.app_dir)

    def setup_ssl(self, context: InstallContext):
        context.require_inputs()
        self.tls_service.provision(context.domain, context.email)

    def setup_periodic_tasks(self, context: InstallContext) -> Path:
        script_path = self.scheduler_service.install_periodic_tasks(context)
        self.manifest_service.add_artifact("backup_script", str(script_path))
        return script_path

    def display_completion_message(self, context: InstallContext):
        self.report_service.report(context)

    def run(self) -> int:
        manifest_status = "failed"
        manifest_error: Optional[str] = None
        self.manifest_service.start_run(
            run_id=uuid.uuid4().hex[:10],
            metadata={"app_dir": self.app_dir, "repo_url": self.settings.repo_url},
            persist=False,
        )

        try:
            self.report_service.welcome()
            logger.info("Starting KILLER NODES installation...")

            self._run_step("check_requirements", self.check_requirements)
            self.manifest_service.persist()
            self.context = self._run_step("collect_inputs", self.collect_inputs, self.context)
            self.manifest_service.update_metadata(
                domain=self.context.domain,
                email=self.context.email,
            )
            self.context = self._run_step("generate_passwords", self.generate_passwords, self.context)
            self._run_step("install_dependencies", self.install_dependencies)
            self._run_step("clone_repository", self.clone_repository)
            self._run_step("configure_environment", self.configure_environment, self.context)
            self._run_step("build_applications", self.build_applications)
            self._run_step("start_services", self.start_services)
            self._run_step("setup_ssl", self.setup_ssl, self.context)
            self._run_step("setup_periodic_tasks", self.setup_periodic_tasks, self.context)
            self._run_step("display_completion_message", self.display_completion_message, self.context)

            logger.log(SUCCESS, "KILLER NODES installation completed successfully!")
            manifest_status = "success"
            return 0

        except KeyboardInterrupt:
            console.print("[bold red]Installation cancelled by user.[/bold red]")
            logger.info("Installation cancelled by user")
            manifest_status = "aborted"
            manifest_error = "Installation cancelled by user."
            return 1
        except InstallerError as exc:
            logger.error(str(exc))
            manifest_error = str(exc)
            return 1
        except Exception as exc:
            logger.exception("Unexpected error during step '%s'", self.current_step_name or "run")
            manifest_error = str(exc)
            return 1
        finally:
            self.manifest_service.finalize(manifest_status, error=manifest_error)
