"""Configuration loader for the recovery engine."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from artifact_recovery.conflict import DEFAULT_CONFLICT_MAX_DEPTH
from artifact_recovery.duplicates import DEFAULT_CHUNK_SIZE, MEDIA_EXTENSIONS


class ConfigError(Exception):
    """Raised when config validation fails."""

    pass


class Config:
    """Configuration object for the recovery engine."""

    def __init__(self, config_dict: Dict[str, Any]):
        """Initialize config from dictionary."""
        self._config = config_dict
        self._validate()

    @classmethod
    def from_root(cls, root: str) -> "Config":
        """Build a default configuration for a bare root path."""
        return cls({"root": root})

    def _validate(self) -> None:
        """Validate required configuration fields."""
        if "root" not in self._config:
            raise ConfigError("Missing required config key: root")
        if not isinstance(self._config["root"], str):
            raise ConfigError("Config key 'root' must be a string")

        for key in ("max_depth", "conflict_max_depth"):
            value = self._section("scan").get(key)
            if value is not None and (not isinstance(value, int) or value < 0):
                raise ConfigError(f"Config key 'scan.{key}' must be a non-negative integer")

        workers = self._section("duplicates").get("workers", 4)
        if not isinstance(workers, int) or workers < 1:
            raise ConfigError("Config key 'duplicates.workers' must be a positive integer")

    def _section(self, name: str) -> Dict[str, Any]:
        return self._config.get(name) or {}

    @property
    def root(self) -> str:
        """Get synced folder root."""
        return self._config["root"]

    @property
    def skip_dotfiles(self) -> bool:
        """Get whether deep scans skip dot entries."""
        return self._section("scan").get("skip_dotfiles", True)

    @property
    def max_depth(self) -> Optional[int]:
        """Get recursion bound for generic scans (None = unbounded)."""
        return self._section("scan").get("max_depth")

    @property
    def conflict_max_depth(self) -> Optional[int]:
        """Get recursion bound for conflict discovery (None = unbounded)."""
        return self._section("scan").get("conflict_max_depth", DEFAULT_CONFLICT_MAX_DEPTH)

    @property
    def ignore_patterns(self) -> list:
        """Get extra ignore patterns applied during scans."""
        items = self._section("scan").get("ignore_patterns", [])
        return [i for i in (items or []) if i]

    @property
    def use_ignore_file(self) -> bool:
        """Get whether scans also honour the root's ignore file."""
        return self._section("scan").get("use_ignore_file", True)

    @property
    def duplicate_extensions(self) -> list:
        """Get extensions considered by duplicate search (empty = all files)."""
        items = self._section("duplicates").get("extensions", list(MEDIA_EXTENSIONS))
        return [i for i in (items or []) if i]

    @property
    def duplicate_workers(self) -> int:
        """Get hashing concurrency."""
        return self._section("duplicates").get("workers", 4)

    @property
    def duplicate_chunk_size(self) -> int:
        """Get hashing read size in bytes."""
        return self._section("duplicates").get("chunk_size", DEFAULT_CHUNK_SIZE)

    @property
    def log_file_path(self) -> Optional[str]:
        """Get log file path."""
        return self._section("logging").get("file_path", "recovery.log")

    @property
    def log_level(self) -> str:
        """Get log level."""
        return self._section("logging").get("level", "INFO")

    @property
    def log_max_size_mb(self) -> int:
        """Get log size before rotation in MB."""
        return self._section("logging").get("max_size_mb", 10)

    @property
    def log_backup_count(self) -> int:
        """Get number of rotated log files to keep."""
        return self._section("logging").get("backup_count", 5)

    @property
    def log_rotation_enabled(self) -> bool:
        """Get whether log rotation is enabled."""
        return self._section("logging").get("rotation_enabled", True)

    def to_dict(self) -> Dict[str, Any]:
        """Return config as dictionary."""
        return self._config.copy()


def load_config(config_path: str) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config.yaml file

    Returns:
        Config object

    Raises:
        ConfigError: If config file doesn't exist or is invalid
    """
    path = Path(config_path)

    if not path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(config_dict, dict):
        raise ConfigError(f"Config file must contain a mapping: {config_path}")

    return Config(config_dict)


def load_config_from_env(env_var: str = "RECOVERY_CONFIG") -> Config:
    """Load configuration from environment variable.

    Args:
        env_var: Name of environment variable containing config path

    Returns:
        Config object

    Raises:
        ConfigError: If environment variable not set or config invalid
    """
    config_path = os.getenv(env_var)
    if not config_path:
        raise ConfigError(f"Environment variable {env_var} not set")

    return load_config(config_path)
