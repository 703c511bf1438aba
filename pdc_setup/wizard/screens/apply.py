"""
Apply Changes Screen

Final screen: provisions the configuration database with the collected
settings by running the setup scripts and registering the administrator.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel

from .base import WizardScreen
from ..log_view import LogView
from ..state import MissingStateError, ValidationIssue
from ...config.models import AuthenticationType
from ...database.accounts import build_admin_account_statement, hash_password


logger = logging.getLogger(__name__)


@dataclass
class SetupAction:
    """One script or statement run while applying the setup."""
    description: str
    script: Optional[Path] = None
    statement: Optional[str] = None


class ApplyChangesScreen(WizardScreen):
    """Apply screen - commits the setup. Terminal screen of the wizard."""

    name = "Apply Changes"
    description = "Create the database and register the administrator"
    is_terminal = True

    def __init__(self):
        super().__init__()
        self.log_view = LogView()

    @property
    def applied(self) -> bool:
        return self.state is not None and self.state.applied

    @property
    def can_go_back(self) -> bool:
        return not self.applied

    @property
    def can_cancel(self) -> bool:
        return not self.applied

    @property
    def next_screen(self) -> Optional[WizardScreen]:
        return None

    def build_actions(self) -> List[SetupAction]:
        """
        List what applying the setup will run, in order.

        Raises:
            MissingStateError: If an earlier screen has not provided its values
        """
        state = self.state
        scripts = state.settings.scripts
        state.require("connection_settings")
        kind = state.require("authentication_type")
        user_name = state.require("admin_user_name")

        actions = [
            SetupAction("Create database schema", script=scripts.path_for(scripts.schema_script)),
            SetupAction("Load initial data set", script=scripts.path_for(scripts.initial_dataset_script)),
        ]

        if state.include_sample_data and scripts.sample_dataset_script:
            actions.append(
                SetupAction("Load sample data set", script=scripts.path_for(scripts.sample_dataset_script))
            )

        password_hash = None
        if kind == AuthenticationType.DATABASE:
            password_hash = hash_password(state.require("admin_password"), state.settings.accounts.password_salt)

        actions.append(SetupAction(
            f"Register administrator {user_name}",
            statement=build_admin_account_statement(
                user_name=user_name,
                role=state.settings.accounts.role,
                use_windows_authentication=kind == AuthenticationType.WINDOWS,
                password_hash=password_hash,
                first_name=state.admin_user_first_name,
                last_name=state.admin_user_last_name,
            ),
        ))

        return actions

    def validate(self) -> Optional[ValidationIssue]:
        """Run the setup. Any failed action is reported as the problem."""
        if self.applied:
            return None

        try:
            actions = self.build_actions()
        except MissingStateError as e:
            return self.issue(str(e.args[0]), f"Setup is incomplete: no value for {e.args[0]}.")

        runner = self.state.create_runner(self.state.connection_settings)
        runner.add_listener(self.log_view.write)

        for action in actions:
            self.log_view.write_message(f"{action.description}...")
            logger.info(action.description)

            if action.script is not None:
                success = runner.execute_script(action.script)
            else:
                success = runner.execute_statement(action.statement)

            if not success:
                reason = runner.last_error or "unknown error"
                return self.issue("apply", f"{action.description} failed: {reason}")

        return None

    def save_state(self) -> None:
        if not self.state.applied:
            self.state.applied = True
            self.log_view.write_message("Setup complete.")

    def render(self, console: Console) -> None:
        self.log_view.console = console
        console.print(Panel.fit(
            "The following settings will be applied:",
            title=self.name,
            border_style="blue"
        ))
        self.show_table(console, "Setup Summary", self.state.summary())
        console.print()

        try:
            actions = self.build_actions()
        except MissingStateError as e:
            console.print(f"[red]Setup is incomplete: no value for {e.args[0]}.[/red]")
            return

        for i, action in enumerate(actions, 1):
            console.print(f"  {i}. {action.description}")
        console.print()
