"""
Wizard Controller

Drives the active screen and enforces which navigation moves are legal.
"""

import logging
from typing import List, Optional

from .screens.base import WizardScreen
from .state import NavigationState, SharedState, ValidationIssue


logger = logging.getLogger(__name__)


class WizardFinishedError(RuntimeError):
    """Navigation was requested after the wizard ended."""
    pass


class WizardController:
    """
    Runs one pass through a chain of wizard screens.

    Holds the current screen, the shared state and the history of visited
    screens used to go back. Screens decide their own successor; the
    controller only asks them to validate, and swaps them in and out.
    """

    def __init__(self, entry_screen: WizardScreen, state: Optional[SharedState] = None):
        """
        Initialize the controller.

        Args:
            entry_screen: First screen of the wizard
            state: Shared state (a fresh one if None)
        """
        self._state = state or SharedState()
        self._history: List[WizardScreen] = []
        self._current = entry_screen
        self.navigation = NavigationState()
        self.last_error: Optional[ValidationIssue] = None
        self.committed = False
        self.cancelled = False

        self._activate(entry_screen)

    @property
    def current_screen(self) -> WizardScreen:
        return self._current

    @property
    def history(self) -> List[WizardScreen]:
        return list(self._history)

    @property
    def is_finished(self) -> bool:
        return self.committed or self.cancelled

    def get_state(self) -> SharedState:
        """Get the shared state."""
        return self._state

    def set_state(self, state: SharedState) -> None:
        """Replace the shared state and re-initialize the current screen from it."""
        self._ensure_running()
        self._state = state
        self._current.state = state
        self.refresh_navigation()

    def advance(self) -> bool:
        """
        Move to the next screen if the current one validates.

        Returns:
            True if the wizard moved forward or, on the last screen, committed
        """
        self._ensure_running()
        screen = self._current
        self.last_error = None

        if not screen.can_go_forward:
            return False

        if not screen.user_input_is_valid():
            self.last_error = screen.error
            logger.info(f"{screen.name}: {screen.error}")
            self.refresh_navigation()
            return False

        next_screen = screen.next_screen
        if next_screen is None:
            self.committed = True
            logger.info(f"Wizard committed on {screen.name}")
            self.refresh_navigation()
            return True

        self._history.append(screen)
        self._activate(next_screen)
        logger.debug(f"Advanced from {screen.name} to {next_screen.name}")
        return True

    def retreat(self) -> bool:
        """
        Return to the previous screen.

        Returns:
            False if there is nowhere to go back to
        """
        self._ensure_running()
        if not self._history or not self._current.can_go_back:
            return False

        previous = self._history.pop()
        logger.debug(f"Retreated from {self._current.name} to {previous.name}")
        self.last_error = None
        self._activate(previous)
        return True

    def cancel(self) -> bool:
        """
        End the wizard without applying anything.

        Returns:
            False if the setup was already applied
        """
        if self.cancelled:
            return True

        if self.committed or not self._current.can_cancel:
            return False

        self.cancelled = True
        logger.info(f"Wizard cancelled on {self._current.name}")
        self.refresh_navigation()
        return True

    def refresh_navigation(self) -> None:
        """Recompute which navigation actions are available."""
        screen = self._current
        if self.is_finished:
            self.navigation = NavigationState(can_go_forward=False, can_go_back=False, can_cancel=False)
            return

        self.navigation = NavigationState(
            can_go_forward=screen.can_go_forward,
            can_go_back=screen.can_go_back and bool(self._history),
            can_cancel=screen.can_cancel,
        )

    def _activate(self, screen: WizardScreen) -> None:
        self._current = screen
        screen.update_navigation = self.refresh_navigation
        if screen.state is not self._state:
            screen.state = self._state
        screen.on_enter()
        self.refresh_navigation()

    def _ensure_running(self) -> None:
        if self.is_finished:
            raise WizardFinishedError("The wizard has already finished")
