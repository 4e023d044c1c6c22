"""
Tests for Transaction Executor and Buffered Result
"""

import pytest
from unittest.mock import Mock

from execution.executable import Executable
from execution.executor import AbortException, TransactionExecutor
from execution.result import BufferedResult
from execution.session import LedgerSession
from infrastructure.errors import ErrorKind, LedgerError, OccConflictError, TransactionClosedError
from infrastructure.transaction import Transaction


class TestTransactionExecutor:
    """Test the per-attempt facade"""

    def test_execute_delegates(self):
        """Test statements are delegated to the transaction"""
        transaction = Mock(spec=Transaction)
        transaction.execute.return_value = "result"
        executor = TransactionExecutor(transaction)

        assert executor.execute_statement("SELECT ?", 1, 2) == "result"
        transaction.execute.assert_called_once_with("SELECT ?", 1, 2)

    def test_errors_propagate_unmodified(self):
        """Test failures reach the engine unchanged"""
        error = OccConflictError("conflict")
        transaction = Mock(spec=Transaction)
        transaction.execute.side_effect = error
        executor = TransactionExecutor(transaction)

        with pytest.raises(OccConflictError) as exc_info:
            executor.execute_statement("SELECT 1")

        assert exc_info.value is error

    def test_abort_raises(self):
        """Test abort raises the abort signal"""
        executor = TransactionExecutor(Mock(spec=Transaction))

        with pytest.raises(AbortException):
            executor.abort()

    def test_abort_signal_is_not_ledger_error(self):
        """Test the abort signal stays out of the retry taxonomy"""
        assert not issubclass(AbortException, LedgerError)
        assert AbortException.kind == ErrorKind.USER_ABORT

    def test_use_after_close_fails_fast(self, channel):
        """Test an executor outliving its transaction"""
        transaction = Transaction.start(channel)
        executor = TransactionExecutor(transaction)
        transaction.commit()

        with pytest.raises(TransactionClosedError):
            executor.execute_statement("SELECT 1")

    def test_transaction_id(self, channel):
        """Test transaction ID exposure"""
        executor = TransactionExecutor(Transaction.start(channel))

        assert executor.transaction_id == "txn-1"


class TestBufferedResult:
    """Test in-memory results"""

    def test_buffer_result_drains_stream(self):
        """Test rows are copied from a live stream"""
        stream = iter(["a", "b", "c"])

        buffered = BufferedResult.buffer_result(stream)

        assert list(buffered) == ["a", "b", "c"]
        assert next(stream, None) is None

    def test_restartable(self):
        """Test a buffered result can be iterated repeatedly"""
        buffered = BufferedResult([1, 2])

        assert list(buffered) == [1, 2]
        assert list(buffered) == [1, 2]
        assert len(buffered) == 2

    def test_equality(self):
        """Test buffered results compare by rows"""
        assert BufferedResult([1]) == BufferedResult([1])
        assert BufferedResult([1]) != BufferedResult([2])
        assert BufferedResult([1]) != [1]


class TestExecutable:
    """Test the execution contract"""

    def test_ledger_session_is_executable(self):
        """Test the session implements the contract"""
        assert issubclass(LedgerSession, Executable)

    def test_partial_implementation_rejected(self):
        """Test every operation must be implemented"""
        class StatementOnly(Executable):
            def execute_statement(self, statement, *parameters, on_retry=None):
                return []

            def execute_lambda(self, query_lambda, on_retry=None):
                return None

        with pytest.raises(TypeError):
            StatementOnly()
