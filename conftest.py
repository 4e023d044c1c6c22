"""
Pytest configuration and fixtures
Loads environment variables and sets up live ledger test switches
"""

import pytest
import os
from pathlib import Path

from dotenv import load_dotenv


def load_env_file():
    """Load environment variables from .env.dev for testing"""
    env_file = Path(__file__).parent / '.env.dev'
    if env_file.exists():
        # Variables already set win over the file
        load_dotenv(env_file, override=False)


def pytest_configure(config):
    """Configure pytest and load environment"""
    load_env_file()

    config.addinivalue_line(
        "markers", "ledger: marks tests as requiring a live ledger connection"
    )


@pytest.fixture(scope="session")
def ledger_enabled():
    """Check if a live ledger is configured for integration tests"""
    return os.getenv("LEDGER_INTEGRATION", "false").lower() == "true"


@pytest.fixture(scope="session")
def skip_if_no_ledger(ledger_enabled):
    """Skip test if no live ledger is configured"""
    if not ledger_enabled:
        pytest.skip("Live ledger not enabled (set LEDGER_INTEGRATION=true)")
