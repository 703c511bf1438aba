"""
Default configuration values and templates.

Provides the default setup configuration and the environment variables
that override it.
"""

from typing import Any, Dict


DEFAULT_CONFIG_FILENAME = "pdc_setup.yaml"

# Environment variables
ENV_CONFIG = "PDC_SETUP_CONFIG"
ENV_SQLCMD = "PDC_SETUP_SQLCMD"
ENV_HOST = "PDC_SETUP_HOST"
ENV_DATABASE = "PDC_SETUP_DATABASE"
ENV_SCRIPTS_DIR = "PDC_SETUP_SCRIPTS_DIR"

# Environment variable -> (section, key)
ENV_OVERRIDES = {
    ENV_SQLCMD: ("sqlcmd", "executable"),
    ENV_HOST: ("database", "host"),
    ENV_DATABASE: ("database", "database"),
    ENV_SCRIPTS_DIR: ("scripts", "directory"),
}


def get_default_settings() -> Dict[str, Any]:
    """Get the default setup configuration template."""
    return {
        "sqlcmd": {
            "executable": "sqlcmd",
            "abort_on_error": True,
            "timeout": None,
        },
        "database": {
            "host": "localhost",
            "database": "openPDC",
            "placeholder": "openPDC",
        },
        "scripts": {
            "directory": "./database",
            "schema_script": "openPDC.sql",
            "initial_dataset_script": "InitialDataSet.sql",
            "sample_dataset_script": "SampleDataSet.sql",
        },
        "accounts": {
            "role": "Administrator",
            "password_salt": "pdc-setup",
        },
        "temp_dir": None,
    }
