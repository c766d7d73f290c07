"""
Configuration Service

Loads PatchVision settings from JSON, or from YAML when the file ends in
.yml/.yaml. A missing file is not an error: every setting has a default.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

logger = logging.getLogger("PatchVision.ConfigService")

CONFIG_ENV = "PATCHVISION_CONFIG"


def default_config_path() -> Path:
    env = os.environ.get(CONFIG_ENV)
    if env:
        return Path(env).expanduser()
    return Path.home() / ".patchvision" / "config.json"


class ConfigService:
    """
    Service class for configuration management.

    Provides:
    - Configuration loading (JSON or YAML)
    - Configuration saving
    - Dot-notation access
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """
        Initialize config service.

        Args:
            config_path: Path to config file (defaults to $PATCHVISION_CONFIG,
                then ~/.patchvision/config.json)
        """
        if config_path is None:
            config_path = default_config_path()

        self.config_path = Path(config_path).expanduser()
        self._config: Dict[str, Any] = {}

        if self.config_path.exists():
            self.load()

    @property
    def is_yaml(self) -> bool:
        return self.config_path.suffix.lower() in (".yml", ".yaml")

    def load(self) -> Dict[str, Any]:
        """
        Load configuration from file.

        Returns:
            Configuration dictionary

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is not valid JSON/YAML or not a mapping
        """
        if not self.config_path.exists():
            logger.error(f"Config file not found at: {self.config_path}")
            raise FileNotFoundError(f"Config file not found at: {self.config_path}")

        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) if self.is_yaml else json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            logger.error(f"Error parsing {self.config_path}: {e}")
            raise ValueError(f"Error parsing {self.config_path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"{self.config_path} must contain a mapping at the top level")

        self._config = data
        logger.info(f"Configuration loaded from {self.config_path}")
        return self._config.copy()

    def save(self, data: Optional[Dict[str, Any]] = None) -> None:
        """
        Save configuration to file.

        Args:
            data: Optional data to save (uses internal config if None)
        """
        if data is not None:
            self._config = data

        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with self.config_path.open("w", encoding="utf-8") as f:
            if self.is_yaml:
                yaml.safe_dump(self._config, f, default_flow_style=False, sort_keys=False)
            else:
                json.dump(self._config, f, indent=4)
        logger.info(f"Configuration saved to {self.config_path}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value.

        Args:
            key: Configuration key (supports dot notation: "matching.tiers")
            default: Default value if key not found
        """
        value: Any = self._config
        for k in key.split("."):
            if not isinstance(value, dict):
                return default
            value = value.get(k)
            if value is None:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value.

        Args:
            key: Configuration key (supports dot notation)
            value: Value to set
        """
        keys = key.split(".")
        config = self._config
        for k in keys[:-1]:
            config = config.setdefault(k, {})
        config[keys[-1]] = value

    def get_all(self) -> Dict[str, Any]:
        return self._config.copy()
