"""
Tests for Driver Configuration
"""

import pytest
from unittest.mock import patch

from infrastructure.config import DriverConfig


class TestDriverConfig:
    """Test DriverConfig"""

    def test_defaults(self):
        """Test default settings"""
        config = DriverConfig(ledger_name="cars")

        assert config.retry_limit == 4
        assert config.backoff_base_ms == 10
        assert config.backoff_cap_ms == 5000
        assert config.validate() is config

    def test_from_env(self):
        """Test settings read from the environment"""
        with patch.dict('os.environ', {
            'LEDGER_NAME': 'cars',
            'LEDGER_RETRY_LIMIT': '2',
            'LEDGER_BACKOFF_CAP_MS': '100',
            'AWS_REGION': 'us-east-2',
        }, clear=True):
            config = DriverConfig.from_env()

        assert config.ledger_name == 'cars'
        assert config.retry_limit == 2
        assert config.backoff_base_ms == 10
        assert config.backoff_cap_ms == 100
        assert config.region_name == 'us-east-2'
        assert config.endpoint_url is None

    def test_missing_ledger_name(self):
        """Test LEDGER_NAME is required"""
        with patch.dict('os.environ', {}, clear=True):
            with pytest.raises(ValueError, match="LEDGER_NAME required"):
                DriverConfig.from_env()

    def test_invalid_number(self):
        """Test non-numeric settings are rejected"""
        with patch.dict('os.environ', {'LEDGER_NAME': 'cars', 'LEDGER_RETRY_LIMIT': 'many'}, clear=True):
            with pytest.raises(ValueError, match="Invalid ledger driver setting"):
                DriverConfig.from_env()

    def test_negative_retry_limit(self):
        """Test negative retry limits are rejected"""
        with pytest.raises(ValueError, match="retry_limit"):
            DriverConfig(ledger_name="cars", retry_limit=-1).validate()

    def test_non_positive_backoff(self):
        """Test backoff values must be positive"""
        with pytest.raises(ValueError, match="backoff"):
            DriverConfig(ledger_name="cars", backoff_cap_ms=0).validate()

    def test_env_file_loaded(self, tmp_path):
        """Test values loaded from a .env file"""
        env_file = tmp_path / ".env"
        env_file.write_text("LEDGER_NAME=from-file\nLEDGER_RETRY_LIMIT=6\n")

        with patch.dict('os.environ', {}, clear=True):
            config = DriverConfig.from_env(env_file)

        assert config.ledger_name == 'from-file'
        assert config.retry_limit == 6

    def test_env_overrides_env_file(self, tmp_path):
        """Test existing variables win over the .env file"""
        env_file = tmp_path / ".env"
        env_file.write_text("LEDGER_NAME=from-file\n")

        with patch.dict('os.environ', {'LEDGER_NAME': 'from-env'}, clear=True):
            config = DriverConfig.from_env(env_file)

        assert config.ledger_name == 'from-env'
