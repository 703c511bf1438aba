"""
User Account Credentials Screen

Collects the administrative account and how it authenticates. Windows
accounts are verified against the operating system; database accounts
must satisfy the password policy.
"""

import logging
import re
from typing import Optional

from rich.console import Console

from .apply import ApplyChangesScreen
from .base import WizardScreen
from .pass_through import PassThroughAuthenticationScreen
from ..state import ValidationIssue
from ...config.models import AuthenticationType
from ...identity import current_identity, machine_name, parse_account_name


logger = logging.getLogger(__name__)

PASSWORD_REQUIREMENT = re.compile(r"^.*(?=.{8,})(?=.*\d)(?=.*[a-z])(?=.*[A-Z]).*$")
PASSWORD_REQUIREMENT_ERROR = (
    "Invalid Password: Password must be at least 8 characters; must contain at least "
    "1 number, 1 upper case letter, and 1 lower case letter"
)

WINDOWS_TITLE = "Verifying Windows Credentials"
DATABASE_TITLE = "Database User Credentials"


class UserAccountCredentialsScreen(WizardScreen):
    """Credentials screen - the administrative user account."""

    name = "User Account Credentials"
    description = "Choose the administrator account for the configuration database"

    AUTHENTICATION_CHOICES = {
        "Windows authentication": AuthenticationType.WINDOWS,
        "Database authentication": AuthenticationType.DATABASE,
    }

    def __init__(self):
        super().__init__()
        self.authentication_type = AuthenticationType.WINDOWS
        self.user_name = current_identity()
        self.password = ""
        self.confirm_password = ""
        self.first_name = ""
        self.last_name = ""

    @property
    def next_screen(self) -> Optional[WizardScreen]:
        if self.authentication_type == AuthenticationType.WINDOWS:
            return self.state.screen(PassThroughAuthenticationScreen)
        return self.state.screen(ApplyChangesScreen)

    def set_authentication_type(self, kind: AuthenticationType) -> None:
        """
        Switch between Windows and database authentication.

        Resets the user name to suit the new mode and asks the controller to
        refresh navigation.
        """
        kind = AuthenticationType(kind)
        if kind == self.authentication_type:
            return

        self.authentication_type = kind
        self.user_name = current_identity() if kind == AuthenticationType.WINDOWS else ""
        self.password = ""
        self.confirm_password = ""
        self.request_navigation_update()

    def initialize_state(self) -> None:
        if self.state is None or self.state.authentication_type is None:
            return

        self.authentication_type = self.state.authentication_type
        self.user_name = self.state.admin_user_name or ""
        self.first_name = self.state.admin_user_first_name or ""
        self.last_name = self.state.admin_user_last_name or ""

    def validate(self) -> Optional[ValidationIssue]:
        if self.authentication_type == AuthenticationType.WINDOWS:
            return self._validate_windows()
        return self._validate_database()

    def _validate_windows(self) -> Optional[ValidationIssue]:
        try:
            domain, user = parse_account_name(self.user_name)
        except ValueError:
            return ValidationIssue(
                field="user_name",
                title=WINDOWS_TITLE,
                message=(
                    "Username format is invalid: for Windows authentication please provide "
                    "a username formatted like domain\\username.\n"
                    f"Use the machine name \"{machine_name()}\" as the domain name if the "
                    "system is not on a domain or you want to use a local account."
                ),
            )

        try:
            authenticated = self.state.authenticator.authenticate(domain, user, self.password.strip())
        except Exception as e:
            logger.warning(f"Could not verify {domain}\\{user}: {e}")
            return ValidationIssue(field="user_name", title=f"{WINDOWS_TITLE} - ERROR!", message=str(e))

        if not authenticated:
            return ValidationIssue(
                field="password",
                title=WINDOWS_TITLE,
                message="Authentication failed. Please verify your username and password.",
            )

        return None

    def _validate_database(self) -> Optional[ValidationIssue]:
        user_name = self.user_name.strip()
        password = self.password.strip()
        confirm_password = self.confirm_password.strip()

        def problem(field: str, message: str) -> ValidationIssue:
            return ValidationIssue(field=field, title=DATABASE_TITLE, message=message)

        if not user_name:
            return problem("user_name", "Please provide administrative user account name.")

        if not password or not PASSWORD_REQUIREMENT.match(password):
            return problem(
                "password",
                f"Please provide valid password for administrative user.\n{PASSWORD_REQUIREMENT_ERROR}",
            )

        if password != confirm_password:
            return problem("confirm_password", "Password does not match the confirm password.")

        if not self.first_name.strip():
            return problem("first_name", "Please provide first name for administrative user.")

        if not self.last_name.strip():
            return problem("last_name", "Please provide last name for administrative user.")

        return None

    def save_state(self) -> None:
        state = self.state
        state.authentication_type = self.authentication_type
        state.admin_user_name = self.user_name.strip()
        state.admin_user_first_name = self.first_name.strip()
        state.admin_user_last_name = self.last_name.strip()

        if self.authentication_type == AuthenticationType.DATABASE:
            state.admin_password = self.password.strip()
            state.allow_pass_through_authentication = False
        else:
            # The OS holds Windows credentials; they are only needed for verification
            state.admin_password = None

    def render(self, console: Console) -> None:
        super().render(console)
        if self.authentication_type == AuthenticationType.WINDOWS:
            console.print(
                "Enter the current credentials of the Windows account that will administer "
                "the system. They will be verified by the operating system."
            )
        else:
            console.print("Provide the credentials for a new database administrator account.")
        console.print()

    def prompt(self, console: Console) -> None:
        current = next(
            label for label, kind in self.AUTHENTICATION_CHOICES.items()
            if kind == self.authentication_type
        )
        choice = self.prompt_choice(
            console,
            "Authentication type",
            list(self.AUTHENTICATION_CHOICES),
            default=current,
        )
        self.set_authentication_type(self.AUTHENTICATION_CHOICES[choice])

        if self.authentication_type == AuthenticationType.WINDOWS:
            self.user_name = self.prompt_text(console, "Windows account (domain\\username)", default=self.user_name)
            self.password = self.prompt_password(console, "Windows password")
        else:
            self.user_name = self.prompt_text(console, "Administrator user name", default=self.user_name)
            self.password = self.prompt_password(console, "Password")
            self.confirm_password = self.prompt_password(console, "Confirm password")
            self.first_name = self.prompt_text(console, "First name", default=self.first_name)
            self.last_name = self.prompt_text(console, "Last name", default=self.last_name)
