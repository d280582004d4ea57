import json
import logging
import math
import os
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .constants import DEFAULT_CONFIG, ENV_VARS, THRESHOLD_KEYS
from .helpers import TrafficAnalyticsError, get_zone, merge_dicts, safe_float

logger = logging.getLogger(__name__)


class ConfigurationError(TrafficAnalyticsError):
    """Raised when configuration is missing or invalid"""

    pass


class Config:
    """Configuration management for traffic analytics"""

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """Initialize configuration.

        Args:
            config_path: Optional path to configuration file
        """
        self._config = deepcopy(DEFAULT_CONFIG)

        # Load configuration from file if provided
        if config_path:
            self.load_file(config_path)

        # Apply environment variables
        self.load_environment()

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value.

        Args:
            key: Configuration key (dot notation supported)
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split(".")
        value = self._config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default

            if value is None:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """Set configuration value.

        Args:
            key: Configuration key (dot notation supported)
            value: Value to set
        """
        keys = key.split(".")
        config = self._config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def load_file(self, config_path: Union[str, Path]) -> None:
        """Load configuration from a JSON file.

        Args:
            config_path: Path to configuration file

        Raises:
            FileNotFoundError: If file doesn't exist
            ConfigurationError: If file format is invalid
        """
        path = Path(config_path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path) as f:
            try:
                file_config = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid configuration file: {e}") from e

        if not isinstance(file_config, dict):
            raise ConfigurationError(f"Configuration file must hold an object: {path}")
        self._config = merge_dicts(self._config, file_config)

    def load_environment(self) -> None:
        """Load configuration from environment variables"""
        for env_var, (config_key, type_func) in ENV_VARS.items():
            value = os.getenv(env_var)
            if value is not None:
                try:
                    self.set(config_key, type_func(value))
                except (ValueError, TypeError):
                    logger.warning(f"Invalid environment variable {env_var}: {value}")

    def update(self, config: Dict[str, Any]) -> None:
        """Update configuration with dictionary.

        Args:
            config: Configuration dictionary to merge
        """
        self._config = merge_dicts(self._config, config)

    def as_dict(self) -> Dict[str, Any]:
        """Get complete configuration as dictionary"""
        return deepcopy(self._config)

    def get_section(self, section: str) -> Dict[str, Any]:
        """Get configuration section.

        Args:
            section: Section name

        Returns:
            Section configuration

        Raises:
            KeyError: If section not found
        """
        if section not in self._config:
            raise KeyError(f"Configuration section not found: {section}")
        return deepcopy(self._config[section])

    def validate(self) -> bool:
        """Validate configuration.

        Returns:
            True if configuration is valid

        Raises:
            ConfigurationError: If configuration is invalid
        """
        try:
            get_zone(self.get("analysis.time_zone"))
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        port = self.get("server.port")
        if not isinstance(port, int) or isinstance(port, bool) or not 0 < port < 65536:
            raise ConfigurationError(f"Invalid value for server.port: {port}")

        paths = self.get("storage.paths", [])
        if not isinstance(paths, list):
            raise ConfigurationError("Invalid type for storage.paths: expected list")

        # Raises on missing or invalid thresholds
        Thresholds.from_config(self)
        return True

    def __getitem__(self, key: str) -> Any:
        value = self.get(key)
        if value is None:
            raise KeyError(key)
        return value

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __repr__(self) -> str:
        return f"Config({self._config})"

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "Config":
        """Create configuration from dictionary.

        Args:
            config: Configuration dictionary

        Returns:
            New Config instance
        """
        instance = cls()
        instance.update(config)
        return instance


@dataclass(frozen=True)
class Thresholds:
    """Health metric thresholds used to normalize observed traffic.

    ``success`` is accepted for compatibility with stored settings but no
    metric reads it.
    """

    rps: float
    uptime: float
    success: float
    latency: float
    builders: float
    inventory: float

    def __post_init__(self):
        for name in ("rps", "uptime", "success", "latency", "builders", "inventory"):
            if not math.isfinite(getattr(self, name)):
                raise ConfigurationError(
                    f"Health metric threshold {name} must be finite, "
                    f"got {getattr(self, name)}"
                )
        for name in ("rps", "uptime"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(
                    f"Health metric threshold {name} must be positive, "
                    f"got {getattr(self, name)}"
                )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Thresholds":
        """Build thresholds from a settings mapping keyed RPS, Uptime, ...

        Raises:
            ConfigurationError: If a threshold is missing or not numeric
        """
        values = {}
        for key in THRESHOLD_KEYS:
            if data.get(key) is None:
                raise ConfigurationError(f"Missing health metric threshold: {key}")
            value = safe_float(data[key])
            if value is None or not math.isfinite(value):
                raise ConfigurationError(
                    f"Invalid health metric threshold {key}: {data[key]!r}"
                )
            values[key.lower()] = value
        return cls(**values)

    @classmethod
    def from_config(cls, config: Config) -> "Thresholds":
        """Build thresholds from the ``health_metrics`` section"""
        try:
            section = config.get_section("health_metrics")
        except KeyError as e:
            raise ConfigurationError("Missing health_metrics configuration") from e
        if not isinstance(section, dict):
            raise ConfigurationError("Invalid type for health_metrics: expected object")
        return cls.from_mapping(section)

    def as_dict(self) -> Dict[str, float]:
        return {key: getattr(self, key.lower()) for key in THRESHOLD_KEYS}
