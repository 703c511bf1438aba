"""
Wizard State Management

Shared state threaded through every screen of one wizard run, plus the
small result types screens and the controller exchange.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, TypeVar

from ..config.models import AuthenticationType, SetupSettings
from ..database.connection import ConnectionSettings
from ..database.script_runner import ScriptRunner
from ..identity import Authenticator, WindowsAuthenticator

if TYPE_CHECKING:
    from .screens.base import WizardScreen


ScreenT = TypeVar("ScreenT", bound="WizardScreen")
RunnerFactory = Callable[[ConnectionSettings], ScriptRunner]

# Fields that hold collected values, as opposed to collaborators and the screen cache
DATA_FIELDS = (
    "authentication_type",
    "admin_user_name",
    "admin_password",
    "admin_user_first_name",
    "admin_user_last_name",
    "allow_pass_through_authentication",
    "connection_settings",
    "include_sample_data",
    "applied",
)


class MissingStateError(KeyError):
    """A screen needed a value no earlier screen has provided."""
    pass


@dataclass
class ValidationIssue:
    """A user-correctable problem with one input field."""
    field: str
    message: str
    title: str = ""

    def __str__(self) -> str:
        return self.message


@dataclass
class NavigationState:
    """Which navigation actions are currently available."""
    can_go_forward: bool = False
    can_go_back: bool = False
    can_cancel: bool = True


@dataclass
class SharedState:
    """
    Values collected during one wizard run.

    Owned by the WizardController and handed to each screen while it is
    active. Screens write their fields only after their input validated.
    Nothing here is written to disk.
    """

    # Collaborators
    settings: SetupSettings = field(default_factory=SetupSettings)
    authenticator: Authenticator = field(default_factory=WindowsAuthenticator)
    runner_factory: Optional[RunnerFactory] = None

    # Collected values
    authentication_type: Optional[AuthenticationType] = None
    admin_user_name: Optional[str] = None
    admin_password: Optional[str] = None
    admin_user_first_name: Optional[str] = None
    admin_user_last_name: Optional[str] = None
    allow_pass_through_authentication: Optional[bool] = None
    connection_settings: Optional[ConnectionSettings] = None
    include_sample_data: Optional[bool] = None
    applied: bool = False

    # Screens constructed so far, keyed by screen class name
    screens: Dict[str, "WizardScreen"] = field(default_factory=dict, repr=False)

    def screen(self, factory: Callable[[], ScreenT], key: Optional[str] = None) -> ScreenT:
        """
        Get a cached screen, constructing it on first use.

        Args:
            factory: Screen class or zero-argument callable
            key: Cache key (defaults to the factory's name)

        Returns:
            The same screen instance on every call with the same key
        """
        key = key or getattr(factory, "__name__", repr(factory))
        if key not in self.screens:
            self.screens[key] = factory()
        return self.screens[key]

    def require(self, name: str) -> Any:
        """
        Get a collected value that must already be present.

        Raises:
            MissingStateError: If the value has not been set
        """
        if name not in DATA_FIELDS:
            raise AttributeError(f"Unknown state field: {name}")
        value = getattr(self, name)
        if value is None:
            raise MissingStateError(name)
        return value

    def create_runner(self, connection: ConnectionSettings) -> ScriptRunner:
        """Create a ScriptRunner for the given connection."""
        if self.runner_factory is not None:
            return self.runner_factory(connection)

        return ScriptRunner(
            connection,
            executable=self.settings.sqlcmd.executable,
            placeholder=self.settings.database.placeholder,
            temp_dir=self.settings.temp_dir,
            timeout=self.settings.sqlcmd.timeout,
            abort_on_error=self.settings.sqlcmd.abort_on_error,
        )

    def snapshot(self) -> Dict[str, Any]:
        """Get a comparable copy of the collected values."""
        data = {}
        for name in DATA_FIELDS:
            value = getattr(self, name)
            if isinstance(value, ConnectionSettings):
                value = value.to_dict()
            data[name] = value
        return data

    def summary(self) -> Dict[str, str]:
        """Get collected values for display, with secrets masked."""
        summary = {}

        if self.connection_settings is not None:
            summary["Connection"] = self.connection_settings.to_string(mask_password=True)
        if self.include_sample_data is not None:
            summary["Sample data"] = "yes" if self.include_sample_data else "no"
        if self.authentication_type is not None:
            summary["Authentication"] = self.authentication_type.value
        if self.admin_user_name:
            summary["Administrator"] = self.admin_user_name
        if self.admin_password:
            summary["Password"] = "********"
        if self.admin_user_first_name or self.admin_user_last_name:
            summary["Name"] = f"{self.admin_user_first_name or ''} {self.admin_user_last_name or ''}".strip()
        if self.allow_pass_through_authentication is not None:
            summary["Pass-through"] = "yes" if self.allow_pass_through_authentication else "no"

        return summary
