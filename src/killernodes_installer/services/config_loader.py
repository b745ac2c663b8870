"""Configuration loader for the KILLER NODES installer."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from killernodes_installer.errors import InstallerError


class ConfigLoader:
    """Loads YAML configuration files for CLI defaults."""

    SUPPORTED_KEYS = {
        "domain",
        "email",
        "app_dir",
        "repo_url",
        "deploy_root",
        "backup_script_path",
        "backup_dir",
        "manifest_file",
        "readiness_retries",
        "readiness_backoff_seconds",
        "verbose",
        "log_file",
    }

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise InstallerError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise InstallerError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise InstallerError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise InstallerError(f"Unknown configuration keys: {unknown_list}")

        self._validate_readiness(parsed)
        return parsed

    def _validate_readiness(self, parsed: Dict[str, Any]):
        retries = parsed.get("readiness_retries")
        if retries is not None and (
            isinstance(retries, bool) or not isinstance(retries, int) or retries < 1
        ):
            raise InstallerError(
                f"readiness_retries must be an integer of at least 1, got {retries!r}."
            )

        backoff = parsed.get("readiness_backoff_seconds")
        if backoff is not None and (
            isinstance(backoff, bool) or not isinstance(backoff, (int, float)) or backoff < 0
        ):
            raise InstallerError(
                f"readiness_backoff_seconds must be a non-negative number, got {backoff!r}."
            )
