"""Configuration management for the DriveGate CLI."""

import json
import os
import shutil
from pathlib import Path

from common.constants import (
    CHUNK_RETRY_BASE_DELAY_SECONDS,
    DEFAULT_PROXY_PORT,
    HTTP_TIMEOUT_SECONDS,
    MAX_CHUNK_ATTEMPTS,
    UPLOAD_CHUNK_SIZE_BYTES
)
from common.logging_config import get_logger

logger = get_logger(__name__)


class Config:
    """Manages CLI configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "proxy_host": os.environ.get("DRIVEGATE_PROXY_HOST", "localhost"),
        "proxy_port": int(os.environ.get("DRIVEGATE_PROXY_PORT", str(DEFAULT_PROXY_PORT))),
        "timeout": HTTP_TIMEOUT_SECONDS,
        "chunk_size": UPLOAD_CHUNK_SIZE_BYTES,
        "max_chunk_attempts": MAX_CHUNK_ATTEMPTS,
        "retry_base_delay": CHUNK_RETRY_BASE_DELAY_SECONDS,
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.drivegate/config.json)
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
            import tempfile
            self.config_path = Path(tempfile.gettempdir()) / '.drivegate' / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                config = self.DEFAULT_CONFIG.copy()
                config.update(data)
                return config
            except (json.JSONDecodeError, IOError) as e:
                backup_path = self.config_path.with_suffix('.json.bak')
                logger.warning(f"Config file {self.config_path} unreadable ({e}), backing up to {backup_path}")
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
        except IOError as e:
            logger.warning(f"Could not write config file {self.config_path}: {e}")

    def save(self) -> None:
        """Save current configuration to file."""
        self._write(self.data)

    def get_base_url(self) -> str:
        """
        Get proxy base URL.

        Returns:
            Base URL string (e.g., "http://localhost:8000")
        """
        host = self.data.get('proxy_host', 'localhost')
        port = self.data.get('proxy_port', DEFAULT_PROXY_PORT)
        return f"http://{host}:{port}"

    def get_timeout(self) -> float:
        """
        Get request timeout in seconds for proxy calls.

        Returns:
            Timeout value in seconds
        """
        return float(self.data.get('timeout', HTTP_TIMEOUT_SECONDS))

    def get_upload_config(self) -> dict:
        """
        Get chunked upload configuration.

        Returns:
            Dictionary with 'chunk_size', 'max_chunk_attempts' and 'retry_base_delay'
        """
        return {
            'chunk_size': int(self.data.get('chunk_size', UPLOAD_CHUNK_SIZE_BYTES)),
            'max_chunk_attempts': int(self.data.get('max_chunk_attempts', MAX_CHUNK_ATTEMPTS)),
            'retry_base_delay': float(self.data.get('retry_base_delay', CHUNK_RETRY_BASE_DELAY_SECONDS)),
        }
