"""
Database Server Screen

Collects the SQL Server instance, database name and optional SQL login.
"""

from typing import Optional

from rich.console import Console

from .base import WizardScreen
from .credentials import UserAccountCredentialsScreen
from ..state import ValidationIssue
from ...config.models import DATABASE_NAME_PATTERN
from ...database.connection import ConnectionSettings


class DatabaseServerScreen(WizardScreen):
    """Database server screen - where the configuration database lives."""

    name = "Database Server"
    description = "Choose the SQL Server instance and the database to create"

    def __init__(self):
        super().__init__()
        self.host_name = ""
        self.database_name = ""
        self.user_name = ""
        self.password = ""
        self.include_sample_data = False

    @property
    def next_screen(self) -> Optional[WizardScreen]:
        return self.state.screen(UserAccountCredentialsScreen)

    def initialize_state(self) -> None:
        if self.state is None:
            return

        connection = self.state.connection_settings
        if connection is not None:
            self.host_name = connection.host_name or ""
            self.database_name = connection.database_name or ""
            self.user_name = connection.user_name or ""
            self.password = connection.password or ""
        else:
            defaults = self.state.settings.database
            self.host_name = self.host_name or defaults.host
            self.database_name = self.database_name or defaults.database

        if self.state.include_sample_data is not None:
            self.include_sample_data = self.state.include_sample_data

    def validate(self) -> Optional[ValidationIssue]:
        host = self.host_name.strip()
        database = self.database_name.strip()

        if not host:
            return self.issue("host_name", "Please provide the SQL Server host name.")

        if not database:
            return self.issue("database_name", "Please provide a database name.")

        if not DATABASE_NAME_PATTERN.match(database):
            return self.issue(
                "database_name",
                "Database name may only contain letters, digits and underscores "
                "and must not start with a digit.",
            )

        if self.password and not self.user_name.strip():
            return self.issue("user_name", "Please provide the SQL Server login name for the password given.")

        return None

    def save_state(self) -> None:
        connection = ConnectionSettings()
        connection.host_name = self.host_name.strip()
        connection.database_name = self.database_name.strip()
        connection.user_name = self.user_name.strip()
        connection.password = self.password

        self.state.connection_settings = connection
        self.state.include_sample_data = self.include_sample_data

    def prompt(self, console: Console) -> None:
        self.host_name = self.prompt_text(console, "SQL Server host", default=self.host_name)
        self.database_name = self.prompt_text(console, "Database name", default=self.database_name)

        if self.prompt_confirm(
            console,
            "Connect with a SQL Server login? (No uses your Windows account)",
            default=bool(self.user_name),
        ):
            self.user_name = self.prompt_text(console, "SQL Server login", default=self.user_name)
            self.password = self.prompt_password(console, "SQL Server password")
        else:
            self.user_name = ""
            self.password = ""

        if self.state.settings.scripts.sample_dataset_script:
            self.include_sample_data = self.prompt_confirm(
                console,
                "Include sample devices and measurements?",
                default=self.include_sample_data,
            )
