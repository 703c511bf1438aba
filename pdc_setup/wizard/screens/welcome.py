"""
Welcome Screen

Entry point of the setup wizard.
"""

from typing import Optional

from rich.console import Console
from rich.panel import Panel

from .base import WizardScreen
from .database_server import DatabaseServerScreen
from ..state import ValidationIssue


class WelcomeScreen(WizardScreen):
    """Welcome screen - introduces the wizard."""

    name = "Welcome"
    description = "Introduction to the database setup"

    @property
    def can_go_back(self) -> bool:
        return False

    @property
    def next_screen(self) -> Optional[WizardScreen]:
        return self.state.screen(DatabaseServerScreen)

    def validate(self) -> Optional[ValidationIssue]:
        """Welcome screen - always valid."""
        return None

    def render(self, console: Console) -> None:
        console.print(Panel.fit(
            "[bold]Welcome to the PDC Database Setup Wizard![/bold]\n\n"
            "This wizard will:\n"
            "  • Connect to your SQL Server instance\n"
            "  • Create the configuration database\n"
            "  • Register an administrative user account\n\n"
            "[dim]Nothing is changed until the final step applies the setup.[/dim]",
            title="PDC Setup",
            border_style="blue"
        ))
