"""
Wizard Runner

Console front end: shows each screen, reads its fields and navigation
choices, and hands them to the WizardController.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .controller import WizardController
from .navigator import NavigationAction, Navigator
from .screens import WelcomeScreen
from .screens.base import WizardScreen
from .state import RunnerFactory, SharedState
from ..config.models import SetupSettings
from ..identity import Authenticator, WindowsAuthenticator


class WizardRunner:
    """
    Runs the PDC database setup wizard on the console.
    """

    BANNER = """
╔═══════════════════════════════════════════════════════════╗
║        PDC DATABASE SETUP WIZARD                          ║
║        Configuration database provisioning                ║
╚═══════════════════════════════════════════════════════════╝
"""

    def __init__(
        self,
        console: Optional[Console] = None,
        settings: Optional[SetupSettings] = None,
        authenticator: Optional[Authenticator] = None,
        runner_factory: Optional[RunnerFactory] = None,
    ):
        """
        Initialize the wizard runner.

        Args:
            console: Rich console for output
            settings: Setup configuration
            authenticator: OS credential check (Windows LogonUser by default)
            runner_factory: Builds the ScriptRunner used by the apply screen
        """
        self.console = console or Console()
        self.settings = settings or SetupSettings()
        self.navigator = Navigator(self.console)
        self.controller = WizardController(
            WelcomeScreen(),
            SharedState(
                settings=self.settings,
                authenticator=authenticator or WindowsAuthenticator(),
                runner_factory=runner_factory,
            ),
        )

    def run(self) -> bool:
        """
        Run the wizard until it is applied or cancelled.

        Returns:
            True if the setup was applied
        """
        controller = self.controller
        self.console.print(self.BANNER, style="bold blue")

        try:
            while not controller.is_finished:
                screen = controller.current_screen
                self._show_screen_header(screen)
                screen.render(self.console)
                screen.prompt(self.console)

                action = self.navigator.show_navigation_prompt(
                    controller.navigation,
                    is_last=screen.is_terminal,
                )

                if action == NavigationAction.NEXT:
                    if not controller.advance():
                        screen.show_error(self.console)
                elif action == NavigationAction.BACK:
                    controller.retreat()
                elif self.navigator.confirm_cancel():
                    controller.cancel()
        except KeyboardInterrupt:
            if not controller.cancel():
                raise

        if controller.committed:
            self._show_completion()
            return True

        self.console.print("\n[yellow]Setup cancelled. No changes were applied.[/yellow]")
        return False

    def _show_screen_header(self, screen: WizardScreen) -> None:
        """Show header for a wizard screen."""
        step_number = len(self.controller.history) + 1
        self.console.print()
        self.console.rule(f"[bold]Step {step_number}: {screen.name}[/bold]", style="cyan")
        if self.controller.history:
            self.console.print(self.navigator.get_path_summary(self.controller.history, screen))
        self.console.print()

    def _show_completion(self) -> None:
        """Show wizard completion message."""
        self.console.print()
        self.console.print(Panel.fit(
            "[bold green]Setup Complete![/bold green]\n\n"
            "The configuration database has been created and the\n"
            "administrator account registered.",
            title="✓ Success",
            border_style="green"
        ))

        self.console.print()
        self.console.print("[bold]Configuration Summary:[/bold]")

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Setting", style="dim")
        table.add_column("Value")

        for label, value in self.controller.get_state().summary().items():
            table.add_row(label, value)

        self.console.print(table)

    def get_state(self) -> SharedState:
        """Get the shared wizard state."""
        return self.controller.get_state()

    def export_config(self, output_path: Path) -> Path:
        """
        Write the applied settings for the service configuration.

        Args:
            output_path: YAML file to write

        Returns:
            Path of the written file
        """
        state = self.get_state()

        data: Dict[str, Any] = {
            "systemSettings": {
                "ConnectionString": str(state.connection_settings) if state.connection_settings else "",
                "DataProviderString": "AssemblyName={System.Data, Version=2.0.0.0, Culture=neutral, "
                                      "PublicKeyToken=b77a5c561934e089}; ConnectionType=System.Data.SqlClient.SqlConnection; "
                                      "AdapterType=System.Data.SqlClient.SqlDataAdapter",
            },
            "security": {
                "AuthenticationType": state.authentication_type.value if state.authentication_type else None,
                "Administrator": state.admin_user_name,
                "AllowPassThroughAuthentication": bool(state.allow_pass_through_authentication),
            },
        }

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

        return output_path
