"""Database connection settings and sqlcmd script execution."""

from .connection import ConnectionSettings
from .script_runner import (
    OutputLine,
    OutputStream,
    ScriptRunner,
    format_command,
    rewrite_script,
)

__all__ = [
    "ConnectionSettings",
    "OutputLine",
    "OutputStream",
    "ScriptRunner",
    "format_command",
    "rewrite_script",
]
