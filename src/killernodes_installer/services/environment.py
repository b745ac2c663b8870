"""Materializes the application's `.env` file from its template."""

import shutil
from pathlib import Path
from typing import Dict

from killernodes_installer.constants import ENV_FILE, ENV_TEMPLATE, SUCCESS
from killernodes_installer.errors import MissingTemplateError
from killernodes_installer.errors_catalog import actionable_error
from killernodes_installer.models import InstallContext


class EnvironmentService:
    """Copies `.env.example` to `.env` and fills in generated values."""

    def __init__(self, logger, db_name: str, db_user: str):
        self.logger = logger
        self.db_name = db_name
        self.db_user = db_user

    def build_substitutions(self, context: InstallContext) -> Dict[str, str]:
        context.require_secrets()
        return {
            "APP_URL": context.domain,
            "MARIADB_ROOT_PASSWORD": context.db_root_password,
            "MARIADB_DATABASE": self.db_name,
            "MARIADB_USER": self.db_user,
            "MARIADB_PASSWORD": context.db_password,
            "REDIS_PASSWORD": context.redis_password,
        }

    def configure(self, app_dir: str, context: InstallContext) -> Path:
        self.logger.info("Configuring environment...")

        template_path = Path(app_dir) / ENV_TEMPLATE
        env_path = Path(app_dir) / ENV_FILE
        if not template_path.is_file():
            raise MissingTemplateError(actionable_error("missing_template", path=str(template_path)))

        substitutions = self.build_substitutions(context)
        shutil.copyfile(template_path, env_path)

        with open(env_path, "r", encoding="utf-8", newline="") as file_obj:
            content = file_obj.read()
        rendered, replaced = substitute_keys(content, substitutions)
        with open(env_path, "w", encoding="utf-8", newline="") as file_obj:
            file_obj.write(rendered)

        for key in substitutions:
            if key not in replaced:
                self.logger.warning("Key %s not found in %s; left unset.", key, ENV_TEMPLATE)

        self.logger.log(SUCCESS, "Environment configured")
        return env_path


def substitute_keys(content: str, substitutions: Dict[str, str]):
    """Rewrite `KEY=value` lines whose key exactly matches a substitution.

    Returns the new content and the set of keys that were found.
    """
    replaced = set()
    lines = []
    for line in content.splitlines(keepends=True):
        body = line.rstrip("\r\n")
        ending = line[len(body):]
        key = body.split("=", 1)[0].strip() if "=" in body else None
        if key in substitutions:
            body = f"{key}={substitutions[key]}"
            replaced.add(key)
        lines.append(body + ending)
    return "".join(lines), replaced
