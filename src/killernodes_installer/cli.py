import logging
import os

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from .constants import DEFAULT_CONFIG_FILE
from .core import Installer, InstallerError
from .models import InstallerSettings
from .services.config_loader import ConfigLoader

SETTINGS_KEYS = (
    "app_dir",
    "repo_url",
    "deploy_root",
    "backup_script_path",
    "backup_dir",
    "manifest_file",
    "readiness_retries",
    "readiness_backoff_seconds",
)


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%Y-%m-%d %H:%M:%S]",
    handlers=[
        RichHandler(
            console=Console(theme=Theme({"logging.level.success": "bold green"})),
            rich_tracebacks=True,
            show_path=False,
        )
    ],
)


@click.command()
@click.option("--domain", required=False, help="Domain name the dashboard will be served on.")
@click.option("--email", required=False, help="Contact email for the TLS certificate.")
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help=f"Path to a YAML configuration file. Defaults to {DEFAULT_CONFIG_FILE} if present.",
)
@click.option("--app-dir", required=False, help="Directory the repository is cloned into.")
@click.option("--repo-url", required=False, help="Git URL of the application repository.")
@click.option("--manifest-file", required=False, type=click.Path(), help="Path of the install manifest JSON.")
@click.option(
    "--readiness-retries",
    required=False,
    type=click.IntRange(min=1),
    default=None,
    help="Number of service readiness checks before giving up (at least 1).",
)
@click.option(
    "--readiness-backoff-seconds",
    required=False,
    type=click.FloatRange(min=0.0),
    default=None,
    help="Initial delay between readiness checks; doubles after each check.",
)
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
def main(
    domain,
    email,
    config,
    app_dir,
    repo_url,
    manifest_file,
    readiness_retries,
    readiness_backoff_seconds,
    verbose,
    log_file,
):
    """Install KILLER NODES on a fresh Ubuntu server."""
    logger = logging.getLogger("killernodes_installer")

    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
    except InstallerError as exc:
        raise click.ClickException(str(exc)) from exc

    domain = _resolve_option(domain, config_values, "domain")
    email = _resolve_option(email, config_values, "email")
    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    log_file = _resolve_option(log_file, config_values, "log_file")

    cli_settings = {
        "app_dir": app_dir,
        "repo_url": repo_url,
        "manifest_file": manifest_file,
        "readiness_retries": readiness_retries,
        "readiness_backoff_seconds": readiness_backoff_seconds,
    }
    settings_values = {}
    for key in SETTINGS_KEYS:
        value = _resolve_option(cli_settings.get(key), config_values, key)
        if value is not None:
            settings_values[key] = value

    try:
        if "readiness_retries" in settings_values:
            settings_values["readiness_retries"] = int(settings_values["readiness_retries"])
        if "readiness_backoff_seconds" in settings_values:
            settings_values["readiness_backoff_seconds"] = float(
                settings_values["readiness_backoff_seconds"]
            )
    except (TypeError, ValueError) as exc:
        raise click.ClickException(f"Invalid readiness setting: {exc}") from exc

    if settings_values.get("readiness_retries", 1) < 1:
        raise click.ClickException("readiness_retries must be at least 1.")
    if settings_values.get("readiness_backoff_seconds", 0.0) < 0:
        raise click.ClickException("readiness_backoff_seconds must not be negative.")

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    try:
        installer = Installer(
            domain=domain,
            email=email,
            settings=InstallerSettings(**settings_values),
        )
    except InstallerError as exc:
        raise click.ClickException(str(exc)) from exc

    raise SystemExit(installer.run())


if __name__ == "__main__":
    main()
