"""
Transaction Executor - Reduced view of a transaction handed to user code
"""

from typing import Any

from infrastructure.errors import ErrorKind
from infrastructure.result_stream import Result
from infrastructure.transaction import Transaction


class AbortException(Exception):
    """
    Raised by TransactionExecutor.abort() to end the unit of work

    Deliberately not a LedgerError: the engine aborts the transaction and
    re-raises it without ever retrying.
    """

    kind = ErrorKind.USER_ABORT

    def __init__(self, message: str = "Transaction aborted by caller"):
        super().__init__(message)


class TransactionExecutor:
    """
    Executor passed to the function given to LedgerSession.execute_lambda()

    Only allows operations that are valid within a managed transaction.
    It is valid for exactly one attempt.
    """

    def __init__(self, transaction: Transaction):
        self._transaction = transaction

    @property
    def transaction_id(self) -> str:
        return self._transaction.transaction_id

    def execute_statement(self, statement: str, *parameters: Any) -> Result:
        """
        Execute a statement within the managed transaction

        Args:
            statement: Statement to execute
            *parameters: Statement parameters

        Returns:
            Lazy result, readable until the transaction commits

        Raises:
            TransactionClosedError: If the attempt that owns this executor is over
            LedgerError: If the ledger rejects the statement
        """
        return self._transaction.execute(statement, *parameters)

    def abort(self) -> None:
        """Abort the transaction and roll back any changes"""
        raise AbortException()
