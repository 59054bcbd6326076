"""Pytest configuration and fixtures."""

import logging
import os
from datetime import datetime

import pytest

from artifact_recovery.logging_setup import LOGGER_NAME


@pytest.fixture
def sync_root(tmp_path):
    """Create an empty synced folder root."""
    root = tmp_path / "sync"
    root.mkdir()
    return root


@pytest.fixture
def make_file():
    """Write a file, creating parents, optionally with a fixed mtime."""

    def _make(path, content="content", mtime=None):
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content)
        if mtime is not None:
            ts = mtime.timestamp() if isinstance(mtime, datetime) else mtime
            os.utime(path, (ts, ts))
        return path

    return _make


@pytest.fixture
def sample_config(tmp_path, sync_root):
    """Create a sample config file for testing."""
    config_path = tmp_path / "config.yaml"
    config_content = f"""
root: {sync_root}

scan:
  skip_dotfiles: true
  conflict_max_depth: 4
  ignore_patterns:
    - "*.tmp"

duplicates:
  extensions:
    - .jpg
    - .txt
  workers: 2

logging:
  level: DEBUG
  file_path: {tmp_path / "logs" / "recovery.log"}
"""
    config_path.write_text(config_content)
    return config_path


@pytest.fixture(autouse=True)
def reset_recovery_logger():
    """Drop handlers added by a test so later tests do not write to closed streams."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
