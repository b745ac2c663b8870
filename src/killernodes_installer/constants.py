"""Fixed values shared across installer services."""

import logging

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

SCRIPT_MODE = 0o755

SUPPORTED_OS_NAME = "Ubuntu"
SUPPORTED_OS_VERSIONS = ("22.04", "24.04")
MIN_RAM_GB = 2

PASSWORD_LENGTH = 20
PASSWORD_STRIP_CHARS = "=+/"

DEFAULT_REPO_URL = "https://github.com/businesspluginshub-creator/KILLERTHEME.git"
DEFAULT_APP_DIR = "KILLER_NODES"
DEFAULT_DEPLOY_ROOT = "/var/www/killernodes-v3"
DEFAULT_BACKUP_SCRIPT = "/usr/local/bin/killernodes-backup.sh"
DEFAULT_BACKUP_DIR = "/var/backups/killernodes"
DEFAULT_DB_NAME = "killernodes_v3"
DEFAULT_DB_USER = "killernodes_v3"
DEFAULT_MANIFEST_FILE = "killernodes-install-manifest.json"
DEFAULT_CONFIG_FILE = ".killernodes-install.yml"

ENV_TEMPLATE = ".env.example"
ENV_FILE = ".env"

DOCKER_INSTALL_URL = "https://get.docker.com"
COMPOSE_RELEASE_URL = (
    "https://github.com/docker/compose/releases/latest/download/docker-compose-{system}-{machine}"
)
COMPOSE_INSTALL_PATH = "/usr/local/bin/docker-compose"

SYSTEM_PACKAGES = (
    "curl",
    "git",
    "wget",
    "unzip",
    "nginx",
    "apache2-utils",
    "software-properties-common",
    "apt-transport-https",
    "ca-certificates",
    "gnupg",
    "lsb-release",
    "certbot",
    "python3-certbot-nginx",
    "mariadb-server",
    "redis-server",
    "php8.3",
    "php8.3-cli",
    "php8.3-common",
    "php8.3-mysql",
    "php8.3-zip",
    "php8.3-gd",
    "php8.3-mbstring",
    "php8.3-curl",
    "php8.3-xml",
    "php8.3-bcmath",
    "php8.3-json",
    "php8.3-ldap",
    "php8.3-imagick",
    "php8.3-intl",
    "php8.3-gmp",
    "php8.3-dev",
    "supervisor",
    "cron",
    "jq",
    "nodejs",
    "npm",
    "yarn",
)

APP_CONSOLE = "killernodes"
TASK_RUNNER_SCHEDULE = "* * * * *"
BACKUP_SCHEDULE = "0 2 * * *"
