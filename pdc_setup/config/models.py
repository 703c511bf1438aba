"""
Pydantic models for setup configuration.

These models define the schema for the sqlcmd client, the target
database defaults, the setup scripts, and the administrative account.
"""

import re
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator


DATABASE_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class AuthenticationType(str, Enum):
    """How the administrative account signs in."""
    WINDOWS = "windows"
    DATABASE = "database"


# ============================================================
# Client and Database Configuration
# ============================================================

class SqlCmdSettings(BaseModel):
    """Configuration for the sqlcmd command-line client."""

    executable: str = Field(default="sqlcmd", description="sqlcmd executable name or path")
    abort_on_error: bool = Field(default=True, description="Pass -b so scripts stop on the first error")
    timeout: Optional[float] = Field(None, description="Seconds before a running client is killed")

    @field_validator("executable")
    @classmethod
    def validate_executable(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("sqlcmd executable cannot be empty")
        return v.strip()

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("Timeout must be greater than zero")
        return v


class DatabaseDefaults(BaseModel):
    """Default target server and database offered by the wizard."""

    host: str = Field(default="localhost", description="SQL Server host (Data Source)")
    database: str = Field(default="openPDC", description="Database name (Initial Catalog)")
    placeholder: str = Field(
        default="openPDC",
        description="Database name used inside the setup scripts",
    )

    @field_validator("database", "placeholder")
    @classmethod
    def validate_database_name(cls, v: str) -> str:
        """Validate SQL identifier format."""
        if not DATABASE_NAME_PATTERN.match(v):
            raise ValueError(f"Invalid database name: {v}")
        return v


class ScriptSettings(BaseModel):
    """Location of the database setup scripts."""

    directory: str = Field(default="./database", description="Directory holding the setup scripts")
    schema_script: str = Field(default="openPDC.sql", description="Creates the database and schema")
    initial_dataset_script: str = Field(
        default="InitialDataSet.sql",
        description="Loads the required base data",
    )
    sample_dataset_script: Optional[str] = Field(
        default="SampleDataSet.sql",
        description="Optional sample devices and measurements",
    )

    @field_validator("schema_script", "initial_dataset_script")
    @classmethod
    def validate_script_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Script name cannot be empty")
        return v.strip()

    def path_for(self, script_name: str) -> Path:
        """Resolve a script name against the script directory."""
        return Path(self.directory) / script_name


class AccountSettings(BaseModel):
    """Settings for the administrative account created during setup."""

    role: str = Field(default="Administrator", description="Security role granted to the account")
    password_salt: str = Field(
        default="pdc-setup",
        description="Salt prepended to database account passwords before hashing",
    )


# ============================================================
# Setup Configuration (Main)
# ============================================================

class SetupSettings(BaseModel):
    """
    Complete setup configuration.

    Everything has a default, so an empty YAML file is a valid
    configuration.
    """

    sqlcmd: SqlCmdSettings = Field(default_factory=SqlCmdSettings)
    database: DatabaseDefaults = Field(default_factory=DatabaseDefaults)
    scripts: ScriptSettings = Field(default_factory=ScriptSettings)
    accounts: AccountSettings = Field(default_factory=AccountSettings)
    temp_dir: Optional[str] = Field(None, description="Directory for rewritten script copies")
