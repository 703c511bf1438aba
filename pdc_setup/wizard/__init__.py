"""
PDC Setup Wizard

Guides an operator through connecting to SQL Server, choosing the
administrator account, and provisioning the configuration database.
"""

from .controller import WizardController, WizardFinishedError
from .log_view import LogView
from .navigator import NavigationAction, Navigator
from .runner import WizardRunner
from .state import MissingStateError, NavigationState, SharedState, ValidationIssue

__all__ = [
    "WizardController",
    "WizardFinishedError",
    "LogView",
    "NavigationAction",
    "Navigator",
    "WizardRunner",
    "MissingStateError",
    "NavigationState",
    "SharedState",
    "ValidationIssue",
]
