"""Subprocess execution service for the KILLER NODES installer."""

import subprocess
from typing import List, Optional, Type

from killernodes_installer.errors import InstallerError


class CommandRunner:
    """Runs external commands and maps failures to typed installer errors."""

    def __init__(self, logger, default_timeout: Optional[float] = None):
        self.logger = logger
        self.default_timeout = default_timeout

    def run(
        self,
        cmd: List[str],
        check: bool = True,
        capture_output: bool = False,
        cwd: Optional[str] = None,
        input_text: Optional[str] = None,
        timeout: Optional[float] = None,
        error_cls: Type[InstallerError] = InstallerError,
    ) -> subprocess.CompletedProcess:
        cmd_str = " ".join(cmd)
        if cwd:
            self.logger.debug("Executing in %s: %s", cwd, cmd_str)
        else:
            self.logger.debug("Executing: %s", cmd_str)

        effective_timeout = timeout if timeout is not None else self.default_timeout

        try:
            result = subprocess.run(
                cmd,
                text=True,
                capture_output=capture_output,
                cwd=cwd,
                input=input_text,
                timeout=effective_timeout,
            )
        except FileNotFoundError as exc:
            raise error_cls(
                f"Required command not found: {cmd[0]}. Please install it and try again."
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise error_cls(f"Command timed out after {effective_timeout}s: {cmd_str}") from exc
        except OSError as exc:
            raise error_cls(f"Failed to execute command: {cmd_str}. {exc}") from exc

        if capture_output and result.stdout:
            self.logger.debug("Command output: %s", result.stdout.strip())

        if result.returncode == 0:
            return result

        stderr = (result.stderr or "").strip() if capture_output else ""
        message = f"Command failed ({result.returncode}): {cmd_str}"
        if stderr:
            message = f"{message}\n{stderr}"

        if check:
            raise error_cls(message)

        self.logger.debug(message)
        return result
