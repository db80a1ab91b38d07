"""Repsheet Configuration - Simple Configuration Management"""

import json
import logging
import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Dict, Any, Optional

import yaml

from .constants import (
    DEFAULT_REDIS_HOST, DEFAULT_REDIS_PORT, DEFAULT_REDIS_DB,
    DEFAULT_CONNECT_TIMEOUT_MS, DEFAULT_CONNECT_RETRIES,
    DEFAULT_MAX_HISTORY_LENGTH, DEFAULT_HISTORY_TTL, DEFAULT_BLACKLIST_TTL,
    DEFAULT_LOG_LEVEL
)
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "REPSHEET_"


# ===============================================================================
# CONFIGURATION DATA CLASS
# ===============================================================================

@dataclass
class RepsheetConfig:
    """Main configuration settings"""

    # Redis connection
    redis_host: str = DEFAULT_REDIS_HOST
    redis_port: int = DEFAULT_REDIS_PORT
    redis_db: int = DEFAULT_REDIS_DB
    redis_timeout_ms: int = DEFAULT_CONNECT_TIMEOUT_MS
    connect_retries: int = DEFAULT_CONNECT_RETRIES

    # Evidence retention
    max_history_length: int = DEFAULT_MAX_HISTORY_LENGTH
    history_ttl: int = DEFAULT_HISTORY_TTL
    blacklist_ttl: int = DEFAULT_BLACKLIST_TTL

    # Logging settings
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: Optional[str] = None


# ===============================================================================
# CONFIGURATION MANAGER
# ===============================================================================

class ConfigManager:
    """Loads settings from file, environment and CLI overrides, in that order"""

    def __init__(self, config_path: Optional[str] = None, cli_overrides: Optional[Dict[str, Any]] = None,
                 environ: Optional[Dict[str, str]] = None):
        self.config_path = config_path or self._get_default_config_path()
        self.config = RepsheetConfig()
        self.cli_overrides = cli_overrides or {}
        self.environ = os.environ if environ is None else environ
        self._load_config()

    def _get_default_config_path(self) -> str:
        """Get default configuration file path"""
        return str(Path.home() / ".repsheet" / "config.yaml")

    def _load_config(self):
        """Load configuration from file, then apply overrides"""
        if os.path.exists(self.config_path):
            self._apply(self._read_file(), source=self.config_path)
        else:
            logger.debug(f"No config file at {self.config_path}, using defaults")

        self._apply_env_overrides()

        # CLI overrides (highest priority)
        self._apply(
            {k: v for k, v in self.cli_overrides.items() if v is not None},
            source="command line",
        )

    def _read_file(self) -> Dict[str, Any]:
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                if self.config_path.endswith('.json'):
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f) or {}
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load config from {self.config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {self.config_path} must contain a mapping")
        return data

    def _apply_env_overrides(self):
        """Apply REPSHEET_<FIELD> environment variables"""
        env_values = {}
        for f in fields(RepsheetConfig):
            value = self.environ.get(ENV_PREFIX + f.name.upper())
            if value is not None:
                env_values[f.name] = value
        self._apply(env_values, source="environment")

    def _apply(self, values: Dict[str, Any], source: str):
        field_types = {f.name: f.type for f in fields(RepsheetConfig)}
        for key, value in values.items():
            if key not in field_types:
                logger.warning(f"Ignoring unknown config key '{key}' from {source}")
                continue
            setattr(self.config, key, self._coerce(key, value, source))

    @staticmethod
    def _coerce(key: str, value: Any, source: str) -> Any:
        default = getattr(RepsheetConfig, key)
        if isinstance(default, bool) or value is None:
            return value
        if isinstance(default, int):
            try:
                return int(value)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid integer for '{key}' from {source}: {value!r}") from e
        return str(value)

    def get(self, key: str, default: Any = None) -> Any:
        return getattr(self.config, key, default)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self.config)
