"""
Ledger Errors - Exception taxonomy shared by the driver layers

Every error raised by the transport, channel and transaction layers carries
an ErrorKind. The execution engine looks the kind up in its retry rules
instead of branching on exception types.
"""

from enum import Enum
from typing import Optional


# Server statuses treated as transient service failures
TRANSIENT_STATUS_CODES = frozenset({500, 503})


class ErrorKind(Enum):
    """Failure classification"""
    USER_ABORT = "user_abort"
    SESSION_INVALID = "session_invalid"
    OCC_CONFLICT = "occ_conflict"
    TRANSIENT_SERVICE = "transient_service"
    CLIENT_ERROR = "client_error"
    RESOURCE_CLOSED = "resource_closed"


class LedgerError(Exception):
    """Base class for all ledger driver errors"""

    kind = ErrorKind.CLIENT_ERROR


class InvalidSessionError(LedgerError):
    """Raised when the ledger no longer recognizes the session"""

    kind = ErrorKind.SESSION_INVALID


class OccConflictError(LedgerError):
    """Raised when a commit is rejected by optimistic concurrency control"""

    kind = ErrorKind.OCC_CONFLICT


class LedgerServiceError(LedgerError):
    """
    Error reported by the ledger service

    Only the statuses in TRANSIENT_STATUS_CODES are transient; every other
    status is a client error.
    """

    def __init__(self,
                 message: str,
                 status_code: Optional[int] = None,
                 error_code: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code

    @property
    def kind(self) -> ErrorKind:
        if self.status_code in TRANSIENT_STATUS_CODES:
            return ErrorKind.TRANSIENT_SERVICE
        return ErrorKind.CLIENT_ERROR


class LedgerClientError(LedgerError):
    """Unclassified transport or client failure"""

    kind = ErrorKind.CLIENT_ERROR


class SessionClosedError(LedgerError):
    """Raised when a closed session is used"""

    kind = ErrorKind.RESOURCE_CLOSED


class TransactionClosedError(LedgerError):
    """Raised when a committed, aborted or discarded transaction is used"""

    kind = ErrorKind.RESOURCE_CLOSED


def classify_error(error: BaseException) -> ErrorKind:
    """
    Classify an exception into an ErrorKind

    Args:
        error: Exception raised during an attempt

    Returns:
        The error's own kind, or CLIENT_ERROR for anything unclassified
    """
    kind = getattr(error, 'kind', None)
    if isinstance(kind, ErrorKind):
        return kind
    return ErrorKind.CLIENT_ERROR
