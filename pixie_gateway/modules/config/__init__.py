"""
Config Module - Black Box Interface

Purpose: Process-level settings for the gateway
Interface: get_config(), ConfigModule.get(), ConfigModule.get_config_schema()
Hidden: Config sources, validation logic, environment parsing

Pixie credentials are not kept here; they are read per request through
a PixieConfigProvider.
"""

import os
from typing import Any, Dict


# Configuration Contract: Required and Optional Keys

REQUIRED_CONFIG_KEYS = {
    "host": "API server bind address",
    "port": "API server port",
    "log_level": "Logging level (DEBUG, INFO, WARNING, ERROR)",
    "pixie_config_source": "Where Pixie credentials come from (file or env)",
    "pixie_config_file": "Path of the Pixie config file (JSON or YAML)",
    "session_timeout": "Seconds allowed to open a cluster session",
    "execution_timeout": "Seconds allowed to execute and stream a script",
}

OPTIONAL_CONFIG_KEYS = {
    "debug": {
        "description": "Enable debug mode (auto-reload)",
        "default": False,
    },
    "scripts_dir": {
        "description": "Directory of named PxL scripts for script_file requests",
        "default": "scripts",
    },
    "use_encryption": {
        "description": "Request end-to-end encryption of results",
        "default": True,
    },
}

VALID_CONFIG_SOURCES = ("file", "env")


class ConfigModule:
    """Configuration management module."""

    def __init__(self):
        """Initialize with environment variables."""
        self._config = self._load_from_env()
        self._validate_required_keys()

    def _validate_required_keys(self) -> None:
        """
        Validate that all required configuration keys are present.

        Raises:
            ValueError: If required keys are missing or invalid
        """
        missing_keys = []
        for key in REQUIRED_CONFIG_KEYS:
            if key not in self._config or self._config[key] is None:
                missing_keys.append(key)

        if missing_keys:
            raise ValueError(
                f"Missing required configuration keys: {', '.join(missing_keys)}. "
                f"Check environment variables and deployment configuration."
            )

        if self._config["pixie_config_source"] not in VALID_CONFIG_SOURCES:
            raise ValueError(
                f"PIXIE_CONFIG_SOURCE must be one of {', '.join(VALID_CONFIG_SOURCES)}"
            )
        for key in ("session_timeout", "execution_timeout"):
            if self._config[key] <= 0:
                raise ValueError(f"{key} must be positive")

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment."""
        return {
            # API settings
            "host": os.getenv("API_HOST", "0.0.0.0"),
            "port": int(os.getenv("API_PORT", "8080")),
            "log_level": os.getenv("LOG_LEVEL", "INFO"),
            "debug": os.getenv("DEBUG", "false").lower() == "true",
            # Pixie settings
            "pixie_config_source": os.getenv("PIXIE_CONFIG_SOURCE", "file").lower(),
            "pixie_config_file": os.getenv("PIXIE_CONFIG_FILE", "config.json"),
            "scripts_dir": os.getenv("PIXIE_SCRIPTS_DIR", "scripts"),
            "use_encryption": os.getenv("PIXIE_USE_ENCRYPTION", "true").lower() == "true",
            # Timeouts (seconds)
            "session_timeout": float(os.getenv("PIXIE_SESSION_TIMEOUT", "60")),
            "execution_timeout": float(os.getenv("PIXIE_EXECUTION_TIMEOUT", "60")),
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value."""
        self._config[key] = value

    @staticmethod
    def get_config_schema() -> Dict[str, Any]:
        """
        Get the configuration schema (contract) for this module.

        Returns:
            Dictionary with 'required' and 'optional' key specifications

        Example:
            >>> schema = ConfigModule.get_config_schema()
            >>> print(schema['required']['session_timeout'])
            'Seconds allowed to open a cluster session'
        """
        return {
            "required": REQUIRED_CONFIG_KEYS.copy(),
            "optional": OPTIONAL_CONFIG_KEYS.copy(),
        }


# Singleton instance
_instance = None


def get_config() -> ConfigModule:
    """Get the configuration module singleton."""
    global _instance
    if _instance is None:
        _instance = ConfigModule()
    return _instance


def reset_config() -> None:
    """Drop the singleton so the next get_config() re-reads the environment."""
    global _instance
    _instance = None


__all__ = ["get_config", "reset_config", "ConfigModule"]
