"""
Pytest configuration and shared fixtures
"""

import itertools
import sys
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from infrastructure.channel import Channel
from infrastructure.session_client import SessionClient
from execution.retry_handler import RetryHandler
from execution.session import LedgerSession


def _page(values, next_page_token=None):
    """Build a page as returned by a SessionClient"""
    return {'values': list(values), 'next_page_token': next_page_token}


@pytest.fixture
def mock_client():
    """SessionClient mock that hands out sequential sessions and transactions"""
    client = Mock(spec=SessionClient)

    session_numbers = itertools.count(1)
    transaction_numbers = itertools.count(1)

    def start_session(ledger_name):
        number = next(session_numbers)
        return f"token-{number}", f"session-{number}"

    client.start_session.side_effect = start_session
    client.start_transaction.side_effect = lambda token: f"txn-{next(transaction_numbers)}"
    client.execute_statement.return_value = _page([])
    client.commit_transaction.side_effect = lambda token, transaction_id, digest: transaction_id
    client.abort_transaction.return_value = None
    client.end_session.return_value = None
    return client


@pytest.fixture
def channel(mock_client):
    """Channel started on the mock client"""
    return Channel.start("test-ledger", mock_client)


@pytest.fixture
def no_sleep():
    """Skip backoff sleeps"""
    with patch('execution.retry_handler.time.sleep') as mock_sleep:
        yield mock_sleep


@pytest.fixture
def ledger_session(mock_client, no_sleep):
    """LedgerSession with retry limit 3 over the mock client"""
    return LedgerSession.start("test-ledger", mock_client, RetryHandler(retry_limit=3))
