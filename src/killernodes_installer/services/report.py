"""Banners shown at the start and end of an installation."""

from rich.panel import Panel
from rich.table import Table

from killernodes_installer.models import InstallContext


class ReportService:
    def __init__(self, console, backup_script_path: str):
        self.console = console
        self.backup_script_path = backup_script_path

    def welcome(self):
        self.console.print(
            Panel.fit(
                "Professional Game Server Management Dashboard\nInstallation Script",
                title="KILLER NODES",
                border_style="green",
            )
        )

    def report(self, context: InstallContext):
        """Print the access URL and generated credentials.

        Passwords are shown in clear text and will remain in the terminal
        scrollback.
        """
        details = Table.grid(padding=(0, 2))
        details.add_column(style="bold")
        details.add_column()
        details.add_row("Access URL", f"https://{context.domain}")
        details.add_row("", "")
        details.add_row("Database Root Password", context.db_root_password or "")
        details.add_row("Database Password", context.db_password or "")
        details.add_row("Redis Password", context.redis_password or "")
        details.add_row("", "")
        details.add_row("View logs", "docker-compose logs -f")
        details.add_row("Restart", "docker-compose restart")
        details.add_row("Backup", self.backup_script_path)

        self.console.print()
        self.console.print(
            Panel(
                details,
                title="INSTALLATION COMPLETE",
                subtitle="Your KILLER NODES installation is ready!",
                border_style="green",
            )
        )
        self.console.print(
            "\n[yellow]Please note down your passwords and store them securely![/yellow]"
        )
