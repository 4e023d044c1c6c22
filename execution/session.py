"""
Ledger Session - Retrying transaction execution over one ledger session

The execute methods start a transaction, run the caller's work, and commit.
Recoverable failures (OCC conflicts, invalid sessions, transient service
errors) are handled by retrying the whole unit of work in a brand new
transaction:
- execute_statement() runs a single statement
- execute_lambda() runs a function that may issue several statements
- execute_action() is execute_lambda() without a return value
- start_transaction() hands out a raw transaction with no retry, since the
  state of a transaction after an unexpected error is ambiguous

A LedgerSession owns its channel and is not thread-safe: drive each
instance from one thread at a time. The channel is only replaced between
attempts, so no locking is needed under that rule.
"""

from typing import Any, Callable, List, Optional

import structlog

from infrastructure.channel import Channel
from infrastructure.config import DriverConfig
from infrastructure.errors import ErrorKind, LedgerError, SessionClosedError
from infrastructure.result_stream import Result
from infrastructure.session_client import Boto3SessionClient, SessionClient
from infrastructure.transaction import Transaction

from .executable import Executable
from .executor import AbortException, TransactionExecutor
from .result import BufferedResult
from .retry_handler import RetryHandler

logger = structlog.get_logger(__name__)

TABLE_NAMES_QUERY = "SELECT VALUE name FROM information_schema.user_tables WHERE status = 'ACTIVE'"


class LedgerSession(Executable):
    """Session to a single ledger with automatic transaction retry"""

    def __init__(self, channel: Channel, retry_handler: Optional[RetryHandler] = None):
        """
        Initialize ledger session

        Args:
            channel: Established channel, owned by this session from now on
            retry_handler: Retry policy (creates default if not provided)
        """
        self._channel = channel
        self.retry_handler = retry_handler or RetryHandler()
        self._closed = False

    @classmethod
    def start(cls,
              ledger_name: str,
              client: SessionClient,
              retry_handler: Optional[RetryHandler] = None) -> 'LedgerSession':
        """Open a new session on the ledger"""
        return cls(Channel.start(ledger_name, client), retry_handler)

    @classmethod
    def from_config(cls,
                    config: DriverConfig,
                    client: Optional[SessionClient] = None) -> 'LedgerSession':
        """
        Open a session from driver configuration

        Args:
            config: Driver configuration
            client: Transport client (creates a Boto3SessionClient if not provided)

        Returns:
            Open LedgerSession
        """
        config.validate()
        client = client or Boto3SessionClient(
            region_name=config.region_name,
            endpoint_url=config.endpoint_url
        )
        return cls.start(config.ledger_name, client, RetryHandler.from_config(config))

    @property
    def session_id(self) -> str:
        return self._channel.session_id

    @property
    def ledger_name(self) -> str:
        return self._channel.ledger_name

    @property
    def is_closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """End this session. No-op if already closed."""
        if not self._closed:
            self._closed = True
            self._channel.end()

    def __enter__(self) -> 'LedgerSession':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def execute_statement(self,
                          statement: str,
                          *parameters: Any,
                          on_retry: Optional[Callable[[int], None]] = None) -> BufferedResult:
        """
        Execute a single statement in its own transaction

        Args:
            statement: Statement to execute
            *parameters: Statement parameters
            on_retry: Called with the retry number before each retry

        Returns:
            Buffered rows produced by the statement

        Raises:
            SessionClosedError: If the session is closed
            LedgerError: If execution fails and cannot be retried
        """
        return self.execute_lambda(
            lambda executor: executor.execute_statement(statement, *parameters),
            on_retry
        )

    def execute_action(self,
                       action: Callable[[TransactionExecutor], Any],
                       on_retry: Optional[Callable[[int], None]] = None) -> None:
        """Run action within a transaction where no result is expected"""
        def run(executor: TransactionExecutor) -> None:
            action(executor)

        self.execute_lambda(run, on_retry)

    def execute_lambda(self,
                       query_lambda: Callable[[TransactionExecutor], Any],
                       on_retry: Optional[Callable[[int], None]] = None) -> Any:
        """
        Run query_lambda within a transaction and return its result

        query_lambda may be invoked several times, so it must not have side
        effects outside the ledger. If it directly returns a Result, the rows
        are buffered in memory before the commit closes the stream. Results
        nested inside another returned object are NOT buffered and cannot be
        read after this method returns.

        Args:
            query_lambda: Function receiving a TransactionExecutor
            on_retry: Called with the retry number (1-based) before each retry

        Returns:
            Value returned by query_lambda

        Raises:
            AbortException: If query_lambda calls executor.abort()
            SessionClosedError: If the session is closed
            LedgerError: If execution fails and cannot be retried
        """
        self._throw_if_closed()

        attempt = 0
        while True:
            transaction = None
            try:
                transaction = self.start_transaction()
                returned_value = query_lambda(TransactionExecutor(transaction))
                if isinstance(returned_value, Result):
                    returned_value = BufferedResult.buffer_result(returned_value)

                transaction.commit()
                return returned_value
            except AbortException:
                self._no_throw_abort(transaction)
                raise
            except LedgerError as e:
                rule = self.retry_handler.rule_for(e)
                if rule.abort_transaction:
                    self._no_throw_abort(transaction)

                if e.kind == ErrorKind.OCC_CONFLICT:
                    logger.info("occ_conflict", session_id=self.session_id, error=str(e))

                if not self.retry_handler.should_retry(e, attempt):
                    raise

                if rule.replace_session:
                    self._replace_channel(e)

                logger.debug(
                    "transaction_retry_scheduled",
                    session_id=self.session_id,
                    attempt=attempt + 1,
                    kind=e.kind.value
                )
            except BaseException:
                self._no_throw_abort(transaction)
                raise
            finally:
                if transaction is not None:
                    transaction.discard()

            attempt += 1
            if on_retry:
                on_retry(attempt)
            self.retry_handler.sleep_before_retry(attempt)

    def list_table_names(self) -> List[str]:
        """
        Retrieve the names of the active tables in the ledger

        Returns:
            Table names in the order returned by the ledger
        """
        return list(self.execute_statement(TABLE_NAMES_QUERY))

    def start_transaction(self) -> Transaction:
        """
        Start a transaction with full control over commit and abort

        No automatic retry is applied; the caller handles OCC conflicts.

        Raises:
            SessionClosedError: If the session is closed
        """
        self._throw_if_closed()
        return Transaction.start(self._channel)

    def abort_or_close(self) -> bool:
        """
        Check the session is alive by aborting on the idle channel

        Closes the session if the abort fails. Only use while no
        transaction is in flight, otherwise its state is abandoned.

        Returns:
            True if the abort succeeded, False otherwise
        """
        if self._closed:
            return False

        try:
            self._channel.abort_transaction()
            return True
        except LedgerError as e:
            logger.info("ledger_session_probe_failed", session_id=self.session_id, error=str(e))
            self._closed = True
            return False

    def _replace_channel(self, error: LedgerError) -> None:
        previous_session_id = self._channel.session_id
        logger.info(
            "ledger_session_replaced",
            previous_session_id=previous_session_id,
            ledger=self._channel.ledger_name,
            error=str(error)
        )
        self._channel = Channel.start(self._channel.ledger_name, self._channel.client)

    def _no_throw_abort(self, transaction: Optional[Transaction]) -> None:
        """
        Abort without raising

        Args:
            transaction: Transaction to abort, or None to abort whatever the
                channel has open
        """
        try:
            if transaction is not None:
                transaction.abort()
            else:
                self._channel.abort_transaction()
        except Exception as e:
            logger.warning(
                "transaction_abort_failed",
                session_id=self.session_id,
                error=str(e),
                error_type=type(e).__name__
            )

    def _throw_if_closed(self) -> None:
        if self._closed:
            raise SessionClosedError("Session has been closed")
