"""Pixie connection configuration providers following Black Box Design principles."""
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Protocol

import yaml

logger = logging.getLogger(__name__)

# Field name -> label used in validation messages
REQUIRED_FIELDS = {
    "px_api_key": "PX_API_KEY",
    "px_cluster_id": "PX_CLUSTER_ID",
    "cloud_addr": "CLOUD_ADDR",
}


@dataclass
class PixieConfig:
    """Credentials and address of the Pixie cluster to query."""
    px_api_key: str
    px_cluster_id: str
    cloud_addr: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: str = "config file") -> "PixieConfig":
        """
        Build and validate a config from raw values.

        Raises:
            ValueError: If a required field is missing or empty
        """
        if not isinstance(data, dict):
            raise ValueError(f"could not parse {source}: expected an object")
        for key, label in REQUIRED_FIELDS.items():
            value = data.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"{label} is not set in {source}")
        return cls(
            px_api_key=data["px_api_key"].strip(),
            px_cluster_id=data["px_cluster_id"].strip(),
            cloud_addr=data["cloud_addr"].strip(),
        )


class PixieConfigProvider(Protocol):
    """Protocol for Pixie configuration providers."""

    def load(self) -> PixieConfig:
        """Load and validate the configuration."""
        ...


class FilePixieConfigProvider:
    """
    Reads the Pixie configuration from a JSON or YAML file.

    The file is read on every load() so edits take effect without a
    restart.
    """

    def __init__(self, path: str):
        self.path = Path(path)

    def load(self) -> PixieConfig:
        """
        Read and validate the config file.

        Raises:
            ValueError: If the file cannot be read or parsed, or a field is missing
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise ValueError(f"could not read config file: {e}") from e

        try:
            if self.path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(text)
            else:
                data = json.loads(text)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ValueError(f"could not parse config file: {e}") from e

        return PixieConfig.from_dict(data or {}, source="config file")


class EnvPixieConfigProvider:
    """Environment-based Pixie configuration provider."""

    def load(self) -> PixieConfig:
        """Get Pixie configuration from environment variables."""
        return PixieConfig.from_dict(
            {
                "px_api_key": os.getenv("PX_API_KEY", ""),
                "px_cluster_id": os.getenv("PX_CLUSTER_ID", ""),
                "cloud_addr": os.getenv("PX_CLOUD_ADDR", ""),
            },
            source="environment",
        )


def build_config_provider(source: str, path: str) -> PixieConfigProvider:
    """Pick the provider named by the PIXIE_CONFIG_SOURCE setting."""
    if source == "env":
        logger.info("Reading Pixie configuration from environment")
        return EnvPixieConfigProvider()
    if source != "file":
        raise ValueError(f"Unknown Pixie config source: {source}")
    logger.info(f"Reading Pixie configuration from {path}")
    return FilePixieConfigProvider(path)
