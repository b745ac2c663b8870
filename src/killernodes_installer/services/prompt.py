"""Interactive collection of the domain and contact email."""

from typing import Callable, Optional

from rich.prompt import Prompt


class InputService:
    """Asks for required free-text values until something is entered.

    Only emptiness is checked; domain and email syntax are accepted as typed.
    """

    DOMAIN_PROMPT = "Enter your domain name (e.g., killernodes.com)"
    EMAIL_PROMPT = "Enter your email for SSL certificate (e.g., admin@killernodes.com)"

    def __init__(self, logger, console, prompt_func: Optional[Callable[[str], str]] = None):
        self.logger = logger
        self.console = console
        self.prompt_func = prompt_func or self._ask

    def collect_domain(self, preset: Optional[str] = None) -> str:
        return self._collect(self.DOMAIN_PROMPT, "Domain name is required!", preset)

    def collect_email(self, preset: Optional[str] = None) -> str:
        return self._collect(self.EMAIL_PROMPT, "Email is required for SSL certificate!", preset)

    def _collect(self, prompt: str, empty_warning: str, preset: Optional[str]) -> str:
        value = (preset or "").strip()
        while not value:
            value = (self.prompt_func(prompt) or "").strip()
            if not value:
                self.logger.warning(empty_warning)
        return value

    def _ask(self, prompt: str) -> str:
        return Prompt.ask(prompt, console=self.console)
