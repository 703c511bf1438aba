"""
Base Wizard Screen

Abstract base class for all wizard screens.
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt
from rich.table import Table

from ..state import SharedState, ValidationIssue


class WizardScreen(ABC):
    """
    Abstract base class for wizard screens.

    A screen owns its form fields, validates them, writes them into the
    shared state once they are valid, and decides which screen comes next.
    Subclasses implement validate(), save_state() and next_screen; the
    console runner uses render() and prompt() to show and fill the form.
    """

    # Screen metadata
    name: str = "Unnamed Screen"
    description: str = ""
    is_terminal: bool = False  # moving forward ends the wizard

    def __init__(self):
        """Initialize the screen."""
        self._state: Optional[SharedState] = None
        self.error: Optional[ValidationIssue] = None
        self.update_navigation: Optional[Callable[[], None]] = None

    # Navigation contract

    @property
    def can_go_forward(self) -> bool:
        return True

    @property
    def can_go_back(self) -> bool:
        return True

    @property
    def can_cancel(self) -> bool:
        return True

    @property
    @abstractmethod
    def next_screen(self) -> Optional["WizardScreen"]:
        """
        Get the screen to show when the user moves forward.

        Returns:
            The next screen, or None if this screen ends the wizard
        """
        pass

    @property
    def state(self) -> Optional[SharedState]:
        """Shared state of the running wizard."""
        return self._state

    @state.setter
    def state(self, value: SharedState) -> None:
        self._state = value
        self.initialize_state()

    def user_input_is_valid(self) -> bool:
        """
        Validate the form and, if valid, save it into the shared state.

        On failure the problem is left in self.error and the shared state
        is not touched.

        Returns:
            True if the input was valid
        """
        if self._state is None:
            raise RuntimeError(f"{self.name} screen has no shared state")

        self.error = None
        issue = self.validate()
        if issue is not None:
            self.error = issue
            return False

        self.save_state()
        return True

    @abstractmethod
    def validate(self) -> Optional[ValidationIssue]:
        """
        Check the form fields.

        Returns:
            The first problem found, or None if the input is valid
        """
        pass

    def save_state(self) -> None:
        """Write validated form fields into the shared state."""
        pass

    def initialize_state(self) -> None:
        """
        Populate form fields from the shared state.

        Called whenever the state is assigned. Must be safe to call more
        than once and must never write into the state.
        """
        pass

    def on_enter(self) -> None:
        """Called each time the screen becomes the current screen."""
        pass

    def request_navigation_update(self) -> None:
        """Ask the controller to re-evaluate the navigation affordances."""
        if self.update_navigation is not None:
            self.update_navigation()

    # Console presentation

    def render(self, console: Console) -> None:
        """Show the screen's introduction text."""
        if self.description:
            console.print(f"[dim]{self.description}[/dim]")
            console.print()

    def prompt(self, console: Console) -> None:
        """Fill the form fields from console input."""
        pass

    def show_error(self, console: Console) -> None:
        """Display the last validation problem."""
        if self.error is None:
            return
        title = f"{self.error.title}: " if self.error.title else ""
        console.print(f"[red]{escape(title + self.error.message)}[/red]")

    # Utility methods for common prompts

    def prompt_text(
        self,
        console: Console,
        prompt: str,
        default: str = "",
    ) -> str:
        """
        Prompt for text input.

        Args:
            console: Rich console
            prompt: Prompt text
            default: Default value

        Returns:
            User input string
        """
        return Prompt.ask(prompt, default=default or "", console=console).strip()

    def prompt_password(self, console: Console, prompt: str) -> str:
        """Prompt for a password without echoing it."""
        return Prompt.ask(prompt, password=True, default="", show_default=False, console=console)

    def prompt_choice(
        self,
        console: Console,
        prompt: str,
        choices: List[str],
        default: Optional[str] = None,
    ) -> str:
        """
        Prompt for a choice from a list.

        Args:
            console: Rich console
            prompt: Prompt text
            choices: List of valid choices
            default: Default choice

        Returns:
            Selected choice
        """
        # Show choices
        console.print()
        for i, choice in enumerate(choices, 1):
            console.print(f"  [{i}] {choice}")
        console.print()

        # Get selection
        while True:
            selection = Prompt.ask(
                prompt,
                default=str(choices.index(default) + 1) if default else "1",
                console=console,
            )

            try:
                # Try as number
                idx = int(selection) - 1
                if 0 <= idx < len(choices):
                    return choices[idx]
            except ValueError:
                # Try as string match
                for choice in choices:
                    if choice.lower() == selection.lower():
                        return choice

            console.print("[red]Invalid selection. Please choose a number from the list.[/red]")

    def prompt_confirm(
        self,
        console: Console,
        prompt: str,
        default: bool = True,
    ) -> bool:
        """
        Prompt for yes/no confirmation.

        Args:
            console: Rich console
            prompt: Prompt text
            default: Default value

        Returns:
            True for yes, False for no
        """
        return Confirm.ask(prompt, default=default, console=console)

    def show_table(
        self,
        console: Console,
        title: str,
        rows: Dict[str, str],
    ) -> None:
        """
        Display a two-column table.

        Args:
            console: Rich console
            title: Table title
            rows: Label to value mapping
        """
        table = Table(title=title, show_header=False)
        table.add_column("Setting", style="cyan")
        table.add_column("Value")

        for label, value in rows.items():
            table.add_row(label, value)

        console.print(table)

    def issue(self, field: str, message: str) -> ValidationIssue:
        """Create a validation issue titled with this screen's name."""
        return ValidationIssue(field=field, message=message, title=self.name)
