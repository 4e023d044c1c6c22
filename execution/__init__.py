"""
Execution Package - Retrying transaction execution against a ledger
"""

from .executable import Executable
from .executor import AbortException, TransactionExecutor
from .result import BufferedResult
from .retry_handler import RETRY_RULES, RetryHandler, RetryRule
from .session import LedgerSession

__all__ = [
    'Executable',
    'AbortException',
    'TransactionExecutor',
    'BufferedResult',
    'RETRY_RULES',
    'RetryHandler',
    'RetryRule',
    'LedgerSession',
]
