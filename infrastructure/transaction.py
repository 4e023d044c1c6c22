"""
Ledger Transaction - Handle for one open transaction on a channel

The handle accumulates the commit digest as statements are executed and
becomes unusable as soon as it commits, aborts or is discarded. The digest
is built from Ion hashes, so the ledger can verify it on commit.
"""

import hashlib
from typing import Any, Dict, Sequence

import ionhash  # noqa: F401  adds ion_hash() to the simpleion value types
import structlog
from amazon.ion.simpleion import dumps, loads

from .channel import Channel
from .errors import LedgerClientError, TransactionClosedError
from .result_stream import Result

logger = structlog.get_logger(__name__)

HASH_ALGORITHM = 'SHA256'


def to_ion(value: Any) -> Any:
    """Convert a Python value into its simpleion equivalent"""
    return loads(dumps(value))


def ion_hash(value: Any) -> bytes:
    """Ion hash of a value, converting plain Python values first"""
    if not hasattr(value, 'ion_hash'):
        value = to_ion(value)
    return value.ion_hash(HASH_ALGORITHM)


def _compare_hashes(left: bytes, right: bytes) -> int:
    # Signed byte comparison starting from the last byte
    for index in range(len(left) - 1, -1, -1):
        difference = (int.from_bytes(left[index:index + 1], byteorder='big', signed=True)
                      - int.from_bytes(right[index:index + 1], byteorder='big', signed=True))
        if difference != 0:
            return difference
    return 0


def _dot(left: bytes, right: bytes) -> bytes:
    """Combine two hashes independently of their order"""
    if not left:
        return right
    if not right:
        return left
    if len(left) != len(right):
        raise ValueError("Hashes to combine must have the same length")

    if _compare_hashes(left, right) < 0:
        joined = left + right
    else:
        joined = right + left
    return hashlib.sha256(joined).digest()


def statement_hash(statement: str, parameters: Sequence[Any] = ()) -> bytes:
    """
    Hash a statement together with its parameters

    Args:
        statement: Statement text
        parameters: Statement parameters (Python or simpleion values)

    Returns:
        Ion hash of the statement combined with each parameter's Ion hash
    """
    digest = ion_hash(statement)
    for parameter in parameters:
        digest = _dot(digest, ion_hash(parameter))
    return digest


class Transaction:
    """
    Open transaction on a ledger channel

    Provides statement execution and explicit commit/abort. Used directly
    by callers of LedgerSession.start_transaction(), which receive no
    automatic retry.
    """

    def __init__(self, channel: Channel, transaction_id: str):
        """
        Initialize transaction handle

        Args:
            channel: Channel the transaction was started on
            transaction_id: Transaction ID assigned by the ledger
        """
        self._channel = channel
        self.transaction_id = transaction_id
        self._closed = False
        self._commit_digest = ion_hash(transaction_id)

    @classmethod
    def start(cls, channel: Channel) -> 'Transaction':
        """Start a new transaction on the channel"""
        return cls(channel, channel.start_transaction())

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def commit_digest(self) -> bytes:
        return self._commit_digest

    def _ensure_open(self) -> None:
        if self._closed:
            raise TransactionClosedError(f"Transaction {self.transaction_id} is closed")

    def execute(self, statement: str, *parameters: Any) -> Result:
        """
        Execute a statement within this transaction

        Args:
            statement: Statement to execute
            *parameters: Statement parameters

        Returns:
            Lazy result over the rows produced by the statement

        Raises:
            TransactionClosedError: If the transaction is closed
        """
        self._ensure_open()

        self._commit_digest = _dot(self._commit_digest, statement_hash(statement, parameters))
        first_page = self._channel.execute_statement(self.transaction_id, statement, list(parameters))

        return Result(self, first_page)

    def fetch_page(self, next_page_token: str) -> Dict[str, Any]:
        self._ensure_open()
        return self._channel.fetch_page(self.transaction_id, next_page_token)

    def commit(self) -> None:
        """
        Commit the transaction

        The handle is closed whatever the outcome.

        Raises:
            TransactionClosedError: If the transaction is already closed
            LedgerClientError: If the ledger echoes a different transaction ID
        """
        self._ensure_open()

        try:
            committed_id = self._channel.commit_transaction(self.transaction_id, self._commit_digest)
        finally:
            self._closed = True

        if committed_id != self.transaction_id:
            raise LedgerClientError(
                f"Commit acknowledged transaction {committed_id}, expected {self.transaction_id}"
            )

        logger.debug("transaction_committed", transaction_id=self.transaction_id)

    def abort(self) -> None:
        """Abort the transaction and roll back any changes"""
        try:
            self._channel.abort_transaction()
        finally:
            self._closed = True

    def discard(self) -> None:
        """Mark the handle closed without contacting the ledger"""
        self._closed = True

    def __enter__(self) -> 'Transaction':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if not self._closed:
            self.abort()
