"""
Wizard Screens

Each screen handles one step of the database setup.
"""

from .base import WizardScreen
from .welcome import WelcomeScreen
from .database_server import DatabaseServerScreen
from .credentials import UserAccountCredentialsScreen
from .pass_through import PassThroughAuthenticationScreen
from .apply import ApplyChangesScreen, SetupAction

__all__ = [
    "WizardScreen",
    "WelcomeScreen",
    "DatabaseServerScreen",
    "UserAccountCredentialsScreen",
    "PassThroughAuthenticationScreen",
    "ApplyChangesScreen",
    "SetupAction",
]
