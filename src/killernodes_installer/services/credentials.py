"""Random credential generation."""

import base64
import secrets

from killernodes_installer.constants import PASSWORD_LENGTH, PASSWORD_STRIP_CHARS
from killernodes_installer.models import InstallContext


class CredentialService:
    """Generates passwords safe to embed in `.env` files and shell scripts."""

    def __init__(self, logger, length: int = PASSWORD_LENGTH, token_bytes=secrets.token_bytes):
        self.logger = logger
        self.length = length
        self.token_bytes = token_bytes
        self._strip_table = str.maketrans("", "", PASSWORD_STRIP_CHARS)

    def generate(self) -> str:
        while True:
            encoded = base64.b64encode(self.token_bytes(32)).decode("ascii")
            candidate = encoded.translate(self._strip_table)
            if len(candidate) >= self.length:
                return candidate[: self.length]

    def generate_context_secrets(self, context: InstallContext) -> InstallContext:
        populated = context.with_secrets(
            db_root_password=self.generate(),
            db_password=self.generate(),
            redis_password=self.generate(),
        )
        self.logger.info("Generated secure passwords")
        return populated
