"""
Configuration Management Module

YAML configuration loading, .env support, ${VAR} substitution and validation
"""

import os
import threading
from functools import lru_cache
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from ecocatalog.core.config_models import ConfigModel
from ecocatalog.core.error_handler import ConfigError
from ecocatalog.core.logger import get_logger


class Config:
    """
    Configuration manager

    Loads the YAML configuration file, overlays environment variables and
    fills in defaults for every section.
    """

    _instance: Optional["Config"] = None
    _lock = threading.Lock()
    _config: Dict[str, Any] = {}
    _config_path: Optional[str] = None

    def __new__(cls, config_path: Optional[str] = None):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[str] = None):
        if not getattr(self, "_initialized", False):
            self.logger = get_logger()
            self._load_config(config_path)
            self._initialized = True
        elif config_path and config_path != self._config_path:
            self.reload(config_path)

    def _load_config(self, config_path: Optional[str] = None) -> None:
        """
        Load configuration

        Args:
            config_path: file to load, the first default location found when omitted
        """
        if config_path is None:
            config_path = self._find_config_file()

        self._config_path = config_path
        self._config = {}

        if config_path and os.path.exists(config_path):
            self._load_env_file()
            self._load_yaml_config(config_path)
            self._resolve_env_variables()
        self._set_defaults()

    def _find_config_file(self) -> Optional[str]:
        """
        Locate the configuration file

        Priority: config/config.yaml > config/config.example.yaml
        """
        possible_paths = [
            "config/config.yaml",
            "config/config.example.yaml",
        ]
        for path in possible_paths:
            if os.path.exists(path):
                return path
        return None

    def _load_yaml_config(self, config_path: str) -> None:
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            self.logger.error(f"Invalid YAML in config file: {e}")
            raise ConfigError(f"Invalid YAML: {e}")

        if not isinstance(config_data, dict):
            raise ConfigError(f"Config root must be a mapping: {config_path}")

        try:
            self._config = ConfigModel.from_dict(config_data).to_dict()
        except ValidationError as e:
            self.logger.error(f"Config validation failed: {e}")
            raise ConfigError(f"Invalid configuration: {e}")
        self.logger.debug(f"Config validation passed: {config_path}")

    def _load_env_file(self) -> None:
        env_files = [
            ".env",
            "config/.env",
        ]
        for env_file in env_files:
            if os.path.exists(env_file):
                load_dotenv(env_file, override=True)
                break

    def _resolve_env_variables(self) -> None:
        """
        Replace ${VAR_NAME} values with the environment variable's value
        """
        self._config = self._resolve_dict(self._config)

    def _resolve_dict(self, obj: Any) -> Any:
        if isinstance(obj, dict):
            return {key: self._resolve_dict(value) for key, value in obj.items()}
        elif isinstance(obj, list):
            return [self._resolve_dict(item) for item in obj]
        elif isinstance(obj, str) and obj.startswith("${") and obj.endswith("}"):
            env_key = obj[2:-1]
            value = os.getenv(env_key)
            if value is None:
                self.logger.warning(f"Environment variable {env_key} not found, using placeholder")
                return obj
            return value
        return obj

    def _set_defaults(self) -> None:
        defaults = ConfigModel().to_dict()

        for section, values in defaults.items():
            if section not in self._config:
                self._config[section] = values
            elif isinstance(values, dict):
                for key, value in values.items():
                    self._config[section].setdefault(key, value)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Read a value

        Args:
            key: dotted path such as "catalog.base_url"
            default: returned when the path does not exist

        Returns:
            The configured value
        """
        value = self._config
        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def get_section(self, section: str, default: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._config.get(section, default or {})

    @property
    def app(self) -> Dict[str, Any]:
        return self.get_section("app")

    @property
    def catalog(self) -> Dict[str, Any]:
        return self.get_section("catalog")

    @property
    def display(self) -> Dict[str, Any]:
        return self.get_section("display")

    @property
    def draft_defaults(self) -> Dict[str, Any]:
        return self.get_section("draft_defaults")

    def reload(self, config_path: Optional[str] = None) -> None:
        """
        Reload configuration

        Args:
            config_path: new file to load, the current one when omitted
        """
        self._load_config(config_path or self._config_path)


@lru_cache(maxsize=1)
def get_config(config_path: Optional[str] = None) -> Config:
    """
    Return the configuration singleton

    Args:
        config_path: configuration file

    Returns:
        Config instance
    """
    return Config(config_path)
