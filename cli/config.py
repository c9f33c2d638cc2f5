"""Configuration management for the chunkwrite CLI."""

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from common.constants import DEFAULT_BLOCK_SIZE, DEFAULT_REPLICATION, DEFAULT_TIMEOUT_SECONDS
from common.logging_config import get_logger
from cli.constants import CONFIG_DIR_NAME, CONFIG_FILE_NAME

logger = get_logger(__name__)


def default_config_path() -> Path:
    return Path.home() / CONFIG_DIR_NAME / CONFIG_FILE_NAME


class Config:
    """Manages CLI configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "scheme": os.environ.get("CHUNKWRITE_SCHEME", "http"),
        "timeout": int(os.environ.get("CHUNKWRITE_TIMEOUT", str(DEFAULT_TIMEOUT_SECONDS))),
        "replication": DEFAULT_REPLICATION,
        "block_size": DEFAULT_BLOCK_SIZE,
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.chunkwrite/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            self.config_path = Path(tempfile.gettempdir()) / CONFIG_DIR_NAME / CONFIG_FILE_NAME
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                if not isinstance(data, dict):
                    raise ValueError("config root must be a JSON object")
                config = self.DEFAULT_CONFIG.copy()
                config.update(data)
                return config
            except (ValueError, OSError) as e:
                backup_path = self.config_path.with_suffix('.json.bak')
                logger.warning(f"Unreadable config {self.config_path} ({e}); using defaults, backup at {backup_path}")
                try:
                    shutil.copy(self.config_path, backup_path)
                except OSError as copy_error:
                    logger.warning(f"Could not back up config file: {copy_error}")
                return self.DEFAULT_CONFIG.copy()
        else:
            config = self.DEFAULT_CONFIG.copy()
            self._write(config)
            return config

    def _write(self, data: dict) -> None:
        try:
            with open(self.config_path, 'w') as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.warning(f"Could not write config file {self.config_path}: {e}")

    def save(self) -> None:
        """Save current configuration to file."""
        self._write(self.data)

    def get_token(self) -> Optional[str]:
        """
        Get stored bearer token.

        Returns:
            Token string or None if not set
        """
        return self.data.get('token')

    def set_token(self, token: str) -> None:
        """
        Set bearer token and save to file.

        Args:
            token: Token string sent as 'Authorization: Bearer <token>'
        """
        self.data['token'] = token
        self.save()

    def get_scheme(self) -> str:
        return self.data.get('scheme', 'http')

    def get_timeout(self) -> int:
        """
        Get request timeout in seconds.

        Returns:
            Timeout value in seconds
        """
        return self.data.get('timeout', DEFAULT_TIMEOUT_SECONDS)

    def get_write_hints(self) -> dict:
        """
        Get open-for-write hints.

        Returns:
            Dictionary with 'replication' and 'block_size'
        """
        return {
            'replication': self.data.get('replication', DEFAULT_REPLICATION),
            'block_size': self.data.get('block_size', DEFAULT_BLOCK_SIZE),
        }
