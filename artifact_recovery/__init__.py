"""Artifact recovery engine modules."""

from artifact_recovery.config_loader import Config, ConfigError, load_config
from artifact_recovery.engine import RecoveryEngine
from artifact_recovery.logging_setup import get_logger, setup_logging

__all__ = [
    "Config",
    "ConfigError",
    "load_config",
    "RecoveryEngine",
    "setup_logging",
    "get_logger",
]
