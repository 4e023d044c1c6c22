"""
Infrastructure Module
Provides the ledger-facing collaborators of the execution engine:
- Error taxonomy shared by every layer
- Session transport (boto3 'qldb-session' adapter)
- Channel, transaction handle and lazy result stream
- Driver configuration
"""

from .errors import (
    ErrorKind,
    LedgerError,
    InvalidSessionError,
    OccConflictError,
    LedgerServiceError,
    LedgerClientError,
    SessionClosedError,
    TransactionClosedError,
    TRANSIENT_STATUS_CODES,
    classify_error
)
from .config import DriverConfig
from .session_client import SessionClient, Boto3SessionClient
from .channel import Channel
from .transaction import Transaction
from .result_stream import Result

__all__ = [
    # Errors
    "ErrorKind",
    "LedgerError",
    "InvalidSessionError",
    "OccConflictError",
    "LedgerServiceError",
    "LedgerClientError",
    "SessionClosedError",
    "TransactionClosedError",
    "TRANSIENT_STATUS_CODES",
    "classify_error",

    # Configuration
    "DriverConfig",

    # Session layer
    "SessionClient",
    "Boto3SessionClient",
    "Channel",
    "Transaction",
    "Result",
]
