"""
Pass-Through Authentication Screen

Windows accounts only: whether the account may sign in to the manager
application without re-entering its credentials.
"""

from typing import Optional

from rich.console import Console

from .apply import ApplyChangesScreen
from .base import WizardScreen
from ..state import ValidationIssue


class PassThroughAuthenticationScreen(WizardScreen):
    """Pass-through screen - single-sign-on option for Windows accounts."""

    name = "Pass-Through Authentication"
    description = "Allow the Windows account to sign in without a password prompt"

    def __init__(self):
        super().__init__()
        self.allow_pass_through = False

    @property
    def next_screen(self) -> Optional[WizardScreen]:
        return self.state.screen(ApplyChangesScreen)

    def initialize_state(self) -> None:
        if self.state is not None and self.state.allow_pass_through_authentication is not None:
            self.allow_pass_through = self.state.allow_pass_through_authentication

    def validate(self) -> Optional[ValidationIssue]:
        return None

    def save_state(self) -> None:
        self.state.allow_pass_through_authentication = self.allow_pass_through

    def prompt(self, console: Console) -> None:
        self.allow_pass_through = self.prompt_confirm(
            console,
            "Allow pass-through authentication for this account?",
            default=self.allow_pass_through,
        )
