"""Host prerequisite checks run before anything is changed."""

import os
from pathlib import Path
from typing import Dict

from killernodes_installer.constants import (
    MIN_RAM_GB,
    SUCCESS,
    SUPPORTED_OS_NAME,
    SUPPORTED_OS_VERSIONS,
)
from killernodes_installer.errors import InsufficientMemoryError, UnsupportedOSError
from killernodes_installer.errors_catalog import actionable_error


class PreflightService:
    """Validates OS identity, OS version and installed memory."""

    def __init__(
        self,
        logger,
        os_release_path: str = "/etc/os-release",
        meminfo_path: str = "/proc/meminfo",
        geteuid=None,
    ):
        self.logger = logger
        self.os_release_path = os_release_path
        self.meminfo_path = meminfo_path
        self.geteuid = geteuid or getattr(os, "geteuid", lambda: -1)

    def check(self):
        self.logger.info("Checking system requirements...")

        if self.geteuid() == 0:
            self.logger.warning(
                "This installer should not be run as root. Using sudo where needed."
            )

        os_release = self.read_os_release()
        name = os_release.get("NAME", "")
        if name != SUPPORTED_OS_NAME:
            raise UnsupportedOSError(actionable_error("unsupported_os", name=name or "<unknown>"))

        version_id = os_release.get("VERSION_ID", "")
        if version_id not in SUPPORTED_OS_VERSIONS:
            self.logger.warning(
                "This installer is tested on Ubuntu %s LTS. You are running %s",
                "/".join(SUPPORTED_OS_VERSIONS),
                version_id or "<unknown>",
            )

        ram_gb = self.total_memory_gb()
        if ram_gb < MIN_RAM_GB:
            raise InsufficientMemoryError(
                actionable_error(
                    "insufficient_memory",
                    minimum=str(MIN_RAM_GB),
                    current=str(ram_gb),
                )
            )

        self.logger.log(SUCCESS, "System requirements met")

    def read_os_release(self) -> Dict[str, str]:
        path = Path(self.os_release_path)
        if not path.is_file():
            raise UnsupportedOSError(actionable_error("os_release_missing", path=str(path)))

        values: Dict[str, str] = {}
        for line in path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            values[key.strip()] = value.strip().strip('"').strip("'")
        return values

    def total_memory_gb(self) -> int:
        """Whole gigabytes of installed memory, rounded down like `free -g`."""
        try:
            with open(self.meminfo_path, "r", encoding="utf-8") as file_obj:
                for line in file_obj:
                    if line.startswith("MemTotal:"):
                        return int(line.split()[1]) // (1024 * 1024)
        except (OSError, ValueError, IndexError) as exc:
            raise InsufficientMemoryError(
                f"Could not read total memory from {self.meminfo_path}: {exc}"
            ) from exc

        raise InsufficientMemoryError(f"MemTotal not reported in {self.meminfo_path}.")
