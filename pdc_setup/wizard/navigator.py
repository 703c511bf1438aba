"""
Wizard Navigation

Reads next/back/cancel choices from the console.
"""

from enum import Enum
from typing import List

from rich.console import Console
from rich.prompt import Prompt

from .screens.base import WizardScreen
from .state import NavigationState


class NavigationAction(str, Enum):
    """Possible navigation actions."""
    NEXT = "next"
    BACK = "back"
    CANCEL = "cancel"


class Navigator:
    """
    Console front end for the wizard's navigation buttons.
    """

    def __init__(self, console: Console):
        """
        Initialize navigator.

        Args:
            console: Rich console for output
        """
        self.console = console

    def show_navigation_prompt(self, navigation: NavigationState, is_last: bool = False) -> NavigationAction:
        """
        Show navigation prompt and get user choice.

        Args:
            navigation: Currently available actions
            is_last: Whether moving forward applies the setup

        Returns:
            The chosen navigation action
        """
        options = []

        if navigation.can_go_forward:
            options.append("[Enter] Apply" if is_last else "[Enter] Next")

        if navigation.can_go_back:
            options.append("[B] Back")

        if navigation.can_cancel:
            options.append("[C] Cancel")

        self.console.print()
        self.console.print("  ".join(options), style="dim")

        while True:
            choice = Prompt.ask("", default="", show_default=False, console=self.console).strip().lower()

            if choice in ("", "n") and navigation.can_go_forward:
                return NavigationAction.NEXT
            elif choice == "b" and navigation.can_go_back:
                return NavigationAction.BACK
            elif choice in ("c", "q") and navigation.can_cancel:
                return NavigationAction.CANCEL
            else:
                self.console.print("[yellow]Invalid choice. Please try again.[/yellow]")

    def confirm_cancel(self) -> bool:
        """
        Confirm the user wants to cancel.

        Returns:
            True if user confirms cancel
        """
        self.console.print()
        self.console.print("[yellow]No changes have been made. Entered settings will be discarded.[/yellow]")

        choice = Prompt.ask(
            "Are you sure you want to cancel the setup?",
            choices=["y", "n"],
            default="n",
            console=self.console,
        ).lower()

        return choice == "y"

    def get_path_summary(self, history: List[WizardScreen], current: WizardScreen) -> str:
        """
        Get a summary of the screens visited so far.

        Returns:
            Formatted summary string
        """
        lines = [f"  [green]✓[/green] {screen.name}" for screen in history]
        lines.append(f"  [cyan]→[/cyan] {current.name}")
        return "\n".join(lines)
