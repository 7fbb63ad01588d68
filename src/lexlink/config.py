"""Configuration management for lexlink using YAML files."""

from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger()

CONFIG_DIR_NAME = ".lexlink"

DEFAULTS: dict[str, Any] = {
    "storage.path": f"{CONFIG_DIR_NAME}/graph.json",
    "deadlines.preparation_days": 7,
    "deadlines.rules_file": None,
}

INT_KEYS = frozenset({"deadlines.preparation_days"})


def coerce_value(key: str, value: str) -> Any:
    """Convert a value given on the command line to the type stored for key."""
    if key in INT_KEYS:
        try:
            number = int(value)
        except ValueError as e:
            raise ValueError(f"{key} must be an integer, got '{value}'") from e
        if number < 0:
            raise ValueError(f"{key} must not be negative, got {number}")
        return number
    return value


class Config:
    """Configuration manager using YAML file storage.

    Local config lives in .lexlink/config.yaml in the current directory, global
    config in ~/.lexlink/config.yaml. Reads look in local config first, then
    global config, then the built-in defaults.
    """

    def __init__(self, use_global: bool = False, config_dir: Path | None = None, home: Path | None = None) -> None:
        """Initialize configuration manager.

        Args:
            use_global: If True, use global config only. If False, use local config with global fallback.
            config_dir: Custom directory to store config file (overrides use_global)
            home: Directory holding the global config (defaults to the user's home)
        """
        global_dir = (home or Path.home()) / CONFIG_DIR_NAME
        if config_dir is not None:
            self.config_dir = Path(config_dir)
            self.is_global = use_global
        elif use_global:
            self.config_dir = global_dir
            self.is_global = True
        else:
            self.config_dir = Path.cwd() / CONFIG_DIR_NAME
            self.is_global = False

        self.config_file = self.config_dir / "config.yaml"
        self._config: dict[str, Any] = self._load(self.config_file)

        self._global_config: dict[str, Any] = {}
        global_config_file = global_dir / "config.yaml"
        if not self.is_global and global_config_file != self.config_file and global_config_file.exists():
            try:
                self._global_config = self._load(global_config_file)
            except ValueError as e:
                logger.warning("Failed to load global config", error=str(e))

        logger.debug("Config initialized", config_file=str(self.config_file), is_global=self.is_global)

    @staticmethod
    def _load(config_file: Path) -> dict[str, Any]:
        if not config_file.exists():
            logger.debug("Config file does not exist, initializing empty config", config_file=str(config_file))
            return {}

        try:
            with open(config_file, "r") as f:
                config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to load config", config_file=str(config_file), error=str(e))
            raise ValueError(f"Failed to load config from {config_file}: {e}") from e

        if not isinstance(config, dict):
            raise ValueError(f"Config file {config_file} must contain a mapping")
        logger.debug("Config loaded successfully", keys=list(config.keys()))
        return config

    def _save(self) -> None:
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, "w") as f:
                yaml.safe_dump(self._config, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            logger.error("Failed to save config", error=str(e))
            raise ValueError(f"Failed to save config to {self.config_file}: {e}") from e
        logger.debug("Config saved successfully")

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value.

        Args:
            key: Configuration key
            default: Returned if the key is set nowhere (built-in defaults are used otherwise)

        Returns:
            Configuration value or default
        """
        if key in self._config:
            logger.debug("Getting config value from local", key=key)
            return self._config[key]

        if not self.is_global and key in self._global_config:
            logger.debug("Getting config value from global", key=key)
            return self._global_config[key]

        if default is None:
            default = DEFAULTS.get(key)
        logger.debug("Config value not set, using default", key=key)
        return default

    def source(self, key: str) -> str | None:
        """Where the value of key comes from: local, global, default, or None if unset."""
        if key in self._config:
            return "global" if self.is_global else "local"
        if not self.is_global and key in self._global_config:
            return "global"
        if DEFAULTS.get(key) is not None:
            return "default"
        return None

    def get_int(self, key: str, default: int | None = None) -> int | None:
        value = self.get(key, default)
        if value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Config value {key}={value!r} is not an integer") from e

    def section(self, prefix: str) -> dict[str, Any]:
        """Return every key under ``prefix.`` with the prefix stripped."""
        dotted = prefix.rstrip(".") + "."
        return {key[len(dotted) :]: value for key, value in self.list().items() if key.startswith(dotted)}

    def set(self, key: str, value: Any) -> None:
        logger.debug("Setting config value", key=key)
        self._config[key] = value
        self._save()

    def unset(self, key: str) -> None:
        logger.debug("Unsetting config value", key=key)
        if key in self._config:
            del self._config[key]
            self._save()

    def list(self) -> dict[str, Any]:
        """List all configuration settings.

        For local config, merges global config with local config (local takes precedence).
        """
        if self.is_global:
            return self._config.copy()
        merged = self._global_config.copy()
        merged.update(self._config)
        logger.debug("Listing merged config values", count=len(merged))
        return merged


def get_config(use_global: bool = False) -> Config:
    """Get a configuration instance.

    Args:
        use_global: If True, return global config. If False, return local config with global fallback.
    """
    return Config(use_global=use_global)
