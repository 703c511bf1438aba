"""Configuration handling for the setup tool."""

from .models import (
    AccountSettings,
    AuthenticationType,
    DatabaseDefaults,
    ScriptSettings,
    SetupSettings,
    SqlCmdSettings,
)
from .loader import ConfigError, ConfigLoader

__all__ = [
    "AccountSettings",
    "AuthenticationType",
    "DatabaseDefaults",
    "ScriptSettings",
    "SetupSettings",
    "SqlCmdSettings",
    "ConfigError",
    "ConfigLoader",
]
