"""Tests for CLI configuration module."""

import json
import pytest
from pathlib import Path
from cli.config import Config


def test_config_creates_default_file(tmp_path):
    """Test that config file is created with defaults if missing."""
    config_path = tmp_path / '.drivegate' / 'config.json'
    config = Config(config_path)

    assert config_path.exists()

    assert config.data['proxy_host'] == Config.DEFAULT_CONFIG['proxy_host']
    assert config.data['timeout'] == 30
    assert config.data['chunk_size'] == 40 * 1024 * 1024
    assert config.data['max_chunk_attempts'] == 5
    assert config.data['retry_base_delay'] == 2.0
    assert json.loads(config_path.read_text())['max_chunk_attempts'] == 5


def test_config_loads_existing_file(tmp_path):
    """Test loading existing config file merges with defaults."""
    config_path = tmp_path / '.drivegate' / 'config.json'
    config_path.parent.mkdir(parents=True)

    existing_data = {
        'proxy_host': 'example.com',
        'proxy_port': 9000,
    }
    with open(config_path, 'w') as f:
        json.dump(existing_data, f)

    config = Config(config_path)

    assert config.data['proxy_host'] == 'example.com'
    assert config.data['proxy_port'] == 9000
    assert config.data['timeout'] == 30
    assert config.data['max_chunk_attempts'] == 5


def test_config_get_base_url(tmp_path):
    """Test base URL construction."""
    config_path = tmp_path / 'config.json'
    config = Config(config_path)
    config.data['proxy_host'] = 'proxy.internal'
    config.data['proxy_port'] = 8080

    assert config.get_base_url() == 'http://proxy.internal:8080'


def test_config_get_timeout(temp_config):
    """Test timeout is returned as float."""
    temp_config.data['timeout'] = '45'
    assert temp_config.get_timeout() == 45.0


def test_config_get_upload_config(temp_config):
    """Test upload configuration retrieval."""
    temp_config.data['chunk_size'] = 320 * 1024 * 10
    temp_config.data['max_chunk_attempts'] = 3

    upload_config = temp_config.get_upload_config()

    assert upload_config == {
        'chunk_size': 320 * 1024 * 10,
        'max_chunk_attempts': 3,
        'retry_base_delay': 2.0,
    }


def test_config_save_persists_changes(temp_config):
    """Test that save() writes current values."""
    temp_config.data['proxy_port'] = 9100
    temp_config.save()

    reloaded = Config(temp_config.config_path)
    assert reloaded.data['proxy_port'] == 9100


def test_config_handles_corrupted_file(tmp_path):
    """Test that corrupted config file is backed up and defaults used."""
    config_path = tmp_path / '.drivegate' / 'config.json'
    config_path.parent.mkdir(parents=True)

    with open(config_path, 'w') as f:
        f.write('{ invalid json }')

    config = Config(config_path)

    assert config.data['timeout'] == 30
    assert config.data['chunk_size'] == 40 * 1024 * 1024

    backup_path = config_path.with_suffix('.json.bak')
    assert backup_path.exists()
    assert backup_path.read_text() == '{ invalid json }'
