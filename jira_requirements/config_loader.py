"""Configuration loader for the requirements provider.

Loads ``.env`` files and an optional YAML file, then builds the validated
:class:`~jira_requirements.settings.Settings`. Values from the YAML file take
precedence over environment variables.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from jira_requirements.settings import Settings
from jira_requirements.type_definitions import ConfigValue

config_logger = logging.getLogger("jira_requirements.config_loader")

DEFAULT_CONFIG_PATH = Path("config/config.yaml")


class ConfigurationError(Exception):
    """Raised when the configuration cannot be loaded or fails validation."""


def is_test_environment() -> bool:
    """Detect if code is running in a test environment.

    Returns:
        bool: True if running under pytest or with JREQ_TEST_MODE set

    """
    if "PYTEST_CURRENT_TEST" in os.environ:
        return True

    return os.environ.get("JREQ_TEST_MODE", "").lower() in ("true", "1", "yes")


class ConfigLoader:
    """Loads settings from ``.env`` files, environment variables and YAML."""

    def __init__(self, config_file_path: Path | None = None) -> None:
        """Initialize the configuration loader.

        Args:
            config_file_path: Path to the YAML configuration file. When omitted,
                ``config/config.yaml`` is used if it exists.

        Raises:
            ConfigurationError: If the YAML file is unreadable or a value is invalid

        """
        self._load_environment_configuration()

        self.yaml_config: dict[str, Any] = {}
        if config_file_path is not None:
            self.yaml_config = self._load_yaml_config(config_file_path)
        elif DEFAULT_CONFIG_PATH.exists():
            self.yaml_config = self._load_yaml_config(DEFAULT_CONFIG_PATH)

        overrides = self._yaml_overrides()
        try:
            self.settings = Settings(**overrides)
        except ValidationError as e:
            msg = f"Invalid configuration: {e}"
            raise ConfigurationError(msg) from e

    def _load_environment_configuration(self) -> None:
        """Load environment variables from .env files based on execution context.

        Later files override values from earlier files:
        ``.env``, ``.env.local``, then ``.env.test`` in test mode.
        """
        load_dotenv(".env")

        if Path(".env.local").exists():
            load_dotenv(".env.local", override=True)
            config_logger.debug("Loaded local overrides from .env.local")

        if is_test_environment() and Path(".env.test").exists():
            load_dotenv(".env.test", override=True)
            config_logger.debug("Loaded test environment from .env.test")

    def _load_yaml_config(self, config_file_path: Path) -> dict[str, Any]:
        """Load configuration from YAML file.

        Args:
            config_file_path: Path to the YAML configuration file

        Returns:
            dict: Configuration settings (empty for an empty file)

        """
        try:
            with config_file_path.open("r") as config_file:
                config = yaml.safe_load(config_file)
        except FileNotFoundError as e:
            config_logger.exception("Config file not found: %s", config_file_path)
            msg = f"Config file not found: {config_file_path}"
            raise ConfigurationError(msg) from e
        except yaml.YAMLError as e:
            msg = f"Config file {config_file_path} is not valid YAML: {e}"
            raise ConfigurationError(msg) from e

        if config is None:
            return {}
        if not isinstance(config, dict):
            msg = f"Config file {config_file_path} must contain a mapping"
            raise ConfigurationError(msg)
        return config

    def _yaml_overrides(self) -> dict[str, ConfigValue]:
        """Flatten the YAML sections into Settings field names."""
        overrides: dict[str, ConfigValue] = {}
        for section, values in self.yaml_config.items():
            match section, values:
                case "jira", dict():
                    for key, value in values.items():
                        overrides[f"jira_{key}"] = value
                case "requirements", dict():
                    for key, value in values.items():
                        match key:
                            case "types":
                                overrides["requirement_types"] = value
                            case _:
                                overrides[f"requirements_{key}"] = value
                case "releases", dict():
                    for key, value in values.items():
                        match key:
                            case "enabled":
                                overrides["use_customfield_releases"] = value
                            case "types":
                                overrides["release_types"] = value
                            case _:
                                overrides[f"releases_{key}"] = value
                case "jira" | "requirements" | "releases" | "log_level" | "log_file", None:
                    config_logger.debug("Skipping empty configuration entry: %s", section)
                case "log_level" | "log_file", _:
                    overrides[section] = values
                case _:
                    msg = f"Unknown configuration section: {section}"
                    raise ConfigurationError(msg)

        for key, value in overrides.items():
            shown = "***" if key.endswith("api_token") else value
            config_logger.debug("Applied YAML config: %s=%s", key, shown)
        return overrides

    def get_settings(self) -> Settings:
        """Get the validated settings."""
        return self.settings
