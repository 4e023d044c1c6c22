"""
Ledger Channel - One stateful session with a ledger

A channel pins a session token to a ledger name and transport client. It
is replaced wholesale (never patched) when the ledger reports the session
invalid.
"""

from typing import Any, Dict, List, Optional

import structlog

from .errors import LedgerError
from .session_client import SessionClient

logger = structlog.get_logger(__name__)


class Channel:
    """Communication channel bound to a single ledger session"""

    def __init__(self,
                 session_token: str,
                 session_id: str,
                 ledger_name: str,
                 client: SessionClient):
        """
        Initialize channel

        Args:
            session_token: Token returned by the ledger for this session
            session_id: Opaque session identifier
            ledger_name: Ledger the session is bound to
            client: Transport client that carries commands
        """
        self._session_token = session_token
        self.session_id = session_id
        self.ledger_name = ledger_name
        self.client = client
        self._ended = False

    @classmethod
    def start(cls, ledger_name: str, client: SessionClient) -> 'Channel':
        """
        Establish a new session on the ledger

        Args:
            ledger_name: Ledger to connect to
            client: Transport client

        Returns:
            Freshly started channel
        """
        session_token, session_id = client.start_session(ledger_name)

        logger.info(
            "ledger_session_started",
            ledger=ledger_name,
            session_id=session_id
        )

        return cls(session_token, session_id, ledger_name, client)

    @property
    def is_ended(self) -> bool:
        return self._ended

    def start_transaction(self) -> str:
        return self.client.start_transaction(self._session_token)

    def execute_statement(self,
                          transaction_id: str,
                          statement: str,
                          parameters: Optional[List[Any]] = None) -> Dict[str, Any]:
        return self.client.execute_statement(
            self._session_token, transaction_id, statement, list(parameters or [])
        )

    def fetch_page(self, transaction_id: str, next_page_token: str) -> Dict[str, Any]:
        return self.client.fetch_page(self._session_token, transaction_id, next_page_token)

    def commit_transaction(self, transaction_id: str, commit_digest: bytes) -> str:
        return self.client.commit_transaction(self._session_token, transaction_id, commit_digest)

    def abort_transaction(self) -> None:
        self.client.abort_transaction(self._session_token)

    def end(self) -> None:
        """End the session. No-op if already ended."""
        if self._ended:
            return

        self._ended = True
        try:
            self.client.end_session(self._session_token)
            logger.info("ledger_session_ended", session_id=self.session_id)
        except LedgerError as e:
            # The session is abandoned either way
            logger.warning(
                "ledger_session_end_failed",
                session_id=self.session_id,
                error=str(e)
            )
