"""TLS certificate provisioning through certbot."""

from typing import Callable

from killernodes_installer.constants import SUCCESS
from killernodes_installer.errors import CertIssuanceError
from killernodes_installer.errors_catalog import actionable_error


class TLSService:
    def __init__(self, logger, run_cmd: Callable):
        self.logger = logger
        self.run_cmd = run_cmd

    def provision(self, domain: str, email: str):
        self.logger.info("Setting up SSL certificate...")

        try:
            self.run_cmd(
                [
                    "sudo",
                    "certbot",
                    "--nginx",
                    "-d",
                    domain,
                    "--non-interactive",
                    "--agree-tos",
                    "-m",
                    email,
                ],
                error_cls=CertIssuanceError,
            )
        except CertIssuanceError as exc:
            raise CertIssuanceError(
                f"{actionable_error('certificate_failed', domain=domain)}\n{exc}"
            ) from exc

        self.run_cmd(["sudo", "systemctl", "reload", "nginx"], error_cls=CertIssuanceError)

        self.logger.log(SUCCESS, "SSL certificate configured")
