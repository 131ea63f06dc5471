"""Shared pytest fixtures for all tests."""

import pytest
from pathlib import Path
from cli.config import Config
from proxy.config import GraphSettings


class FakeClock:
    """Manually advanced time source (epoch seconds)."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .drivegate directory
    """
    config_dir = tmp_path / '.drivegate'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance.

    Args:
        temp_config_dir: Temporary config directory fixture

    Returns:
        Config instance with temp config file
    """
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def graph_settings():
    """Complete Graph application settings for proxy tests."""
    return GraphSettings(
        client_id='client-123',
        client_secret='super-secret',
        tenant_id='tenant-abc',
        user_id='owner@example.com',
    )


@pytest.fixture
def fake_clock():
    """Manually advanced clock."""
    return FakeClock()


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a sample file for testing uploads.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to sample text file
    """
    file_path = tmp_path / 'test.txt'
    file_path.write_text('Sample content for testing')
    return file_path


@pytest.fixture
def empty_file(tmp_path):
    """Create a zero-length file."""
    file_path = tmp_path / 'empty.bin'
    file_path.write_bytes(b'')
    return file_path
