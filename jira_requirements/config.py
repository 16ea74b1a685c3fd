"""Configuration module for the requirements provider.

Exposes the shared logger and a lazily loaded settings singleton. Handlers
are installed by the command line entry point, never on import.
"""

import threading
from pathlib import Path

from jira_requirements.config_loader import ConfigLoader, ConfigurationError
from jira_requirements.display import get_logger
from jira_requirements.settings import Settings

logger = get_logger()

_settings: Settings | None = None
_settings_lock = threading.Lock()


def get_settings(config_file_path: Path | None = None) -> Settings:
    """Get or load the global settings instance.

    Thread-safe implementation using double-checked locking so the
    configuration is read exactly once per process.

    Args:
        config_file_path: Optional YAML file, only honoured on the first load

    Returns:
        Settings: The global settings instance

    Raises:
        ConfigurationError: If the settings cannot be loaded

    """
    global _settings
    if _settings is None:
        with _settings_lock:
            if _settings is None:
                try:
                    _settings = ConfigLoader(config_file_path).get_settings()
                except ConfigurationError:
                    logger.exception("Failed to load configuration")
                    raise
                logger.debug("Loaded settings for Jira project %s", _settings.jira_project)
    return _settings


def reset_settings() -> None:
    """Reset the settings cache.

    Primarily intended for tests that change environment variables.
    """
    global _settings
    with _settings_lock:
        _settings = None
        logger.debug("Reset settings cache")
