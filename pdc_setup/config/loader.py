"""
Configuration loader for YAML files.

Handles loading, validation, and environment overrides of the setup
configuration.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from pydantic import ValidationError

from .defaults import DEFAULT_CONFIG_FILENAME, ENV_CONFIG, ENV_OVERRIDES
from .models import SetupSettings


logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Configuration loading or validation error."""
    pass


class ConfigLoader:
    """
    Loads and validates the setup configuration from a YAML file.

    Lookup order when no path is given: the PDC_SETUP_CONFIG environment
    variable, then ./pdc_setup.yaml. A missing default file is not an error;
    built-in defaults are used instead.
    """

    def __init__(
        self,
        config_path: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize the config loader.

        Args:
            config_path: Path to the YAML configuration file
            environ: Environment mapping for overrides (defaults to os.environ)
        """
        self.config_path = Path(config_path) if config_path else None
        self.environ = os.environ if environ is None else environ
        self._settings: Optional[SetupSettings] = None

    def load(self) -> SetupSettings:
        """
        Load, override and validate the configuration.

        Returns:
            Validated SetupSettings

        Raises:
            ConfigError: If the file cannot be read or is invalid
        """
        data: Dict[str, Any] = {}

        path = self._resolve_path()
        if path is not None:
            logger.debug(f"Loading configuration from {path}")
            data = self._read_yaml(path)

        self._apply_env_overrides(data)

        try:
            self._settings = SetupSettings(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid setup configuration: {e}")

        return self._settings

    def _resolve_path(self) -> Optional[Path]:
        if self.config_path is not None:
            if not self.config_path.is_file():
                raise ConfigError(f"Configuration file does not exist: {self.config_path}")
            return self.config_path

        env_path = self.environ.get(ENV_CONFIG)
        if env_path:
            path = Path(env_path)
            if not path.is_file():
                raise ConfigError(f"{ENV_CONFIG} points to a missing file: {path}")
            return path

        default = Path(DEFAULT_CONFIG_FILENAME)
        return default if default.is_file() else None

    def _read_yaml(self, file_path: Path) -> Dict[str, Any]:
        """Read and parse a YAML file."""
        try:
            with open(file_path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {file_path}: {e}")
        except IOError as e:
            raise ConfigError(f"Cannot read {file_path}: {e}")

        if not isinstance(data, dict):
            raise ConfigError(f"Configuration in {file_path} must be a mapping")
        return data

    def _apply_env_overrides(self, data: Dict[str, Any]) -> None:
        for variable, (section, key) in ENV_OVERRIDES.items():
            value = self.environ.get(variable)
            if value:
                section_data = data.get(section)
                if not isinstance(section_data, dict):
                    section_data = {}
                    data[section] = section_data
                section_data[key] = value
                logger.debug(f"{variable} overrides {section}.{key}")

    @property
    def settings(self) -> Optional[SetupSettings]:
        """Get loaded settings."""
        return self._settings

    @staticmethod
    def save(settings: SetupSettings, output_path: Union[str, Path]) -> Path:
        """
        Save settings to a YAML file.

        Args:
            settings: Settings to write
            output_path: Destination file

        Returns:
            Path of the written file
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w") as f:
            yaml.dump(
                settings.model_dump(mode="json"),
                f,
                default_flow_style=False,
                sort_keys=False,
            )

        return output_path
