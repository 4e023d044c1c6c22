"""
Ledger Session Client - Transport contract for a single ledger session

The channel layer talks to the ledger only through a SessionClient. The
bundled implementation wraps the boto3 'qldb-session' client and its
SendCommand API.

Usage:
    from infrastructure.session_client import Boto3SessionClient

    client = Boto3SessionClient(region_name="us-east-1")
    token, session_id = client.start_session("vehicle-registration")
"""

import os
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple

import boto3
import structlog
from amazon.ion.simpleion import dumps, loads
from botocore.exceptions import BotoCoreError, ClientError

from .errors import (
    InvalidSessionError,
    LedgerClientError,
    LedgerError,
    LedgerServiceError,
    OccConflictError,
)

logger = structlog.get_logger(__name__)

INVALID_SESSION_CODE = "InvalidSessionException"
OCC_CONFLICT_CODE = "OccConflictException"


class SessionClient(ABC):
    """
    Abstract transport for ledger session commands

    Implementations raise LedgerError subclasses only. A page is a dictionary
    with 'values' (decoded rows) and 'next_page_token' (None on the last page).
    """

    @abstractmethod
    def start_session(self, ledger_name: str) -> Tuple[str, str]:
        """Start a session, returning (session_token, session_id)"""
        pass

    @abstractmethod
    def start_transaction(self, session_token: str) -> str:
        """Start a transaction, returning its id"""
        pass

    @abstractmethod
    def execute_statement(self,
                          session_token: str,
                          transaction_id: str,
                          statement: str,
                          parameters: List[Any]) -> Dict[str, Any]:
        """Execute a statement, returning its first page"""
        pass

    @abstractmethod
    def fetch_page(self,
                   session_token: str,
                   transaction_id: str,
                   next_page_token: str) -> Dict[str, Any]:
        """Fetch the page identified by next_page_token"""
        pass

    @abstractmethod
    def commit_transaction(self,
                           session_token: str,
                           transaction_id: str,
                           commit_digest: bytes) -> str:
        """Commit a transaction, returning the transaction id echoed by the ledger"""
        pass

    @abstractmethod
    def abort_transaction(self, session_token: str) -> None:
        """Abort the session's current transaction, if any"""
        pass

    @abstractmethod
    def end_session(self, session_token: str) -> None:
        """End the session"""
        pass


def encode_parameter(value: Any) -> Dict[str, bytes]:
    """Encode a parameter as an Ion binary value holder"""
    return {'IonBinary': dumps(value, binary=True)}


def decode_value(holder: Dict[str, Any]) -> Any:
    """Decode an Ion binary or Ion text value holder"""
    if 'IonBinary' in holder:
        return loads(holder['IonBinary'])
    if 'IonText' in holder:
        return loads(holder['IonText'])
    raise LedgerClientError(f"Unsupported value holder: {sorted(holder)}")


def translate_client_error(error: ClientError) -> LedgerError:
    """
    Translate a botocore ClientError into the ledger error taxonomy

    Args:
        error: Error raised by the boto3 client

    Returns:
        LedgerError subclass matching the service error code
    """
    details = error.response.get('Error', {})
    code = details.get('Code')
    message = details.get('Message') or str(error)
    status_code = error.response.get('ResponseMetadata', {}).get('HTTPStatusCode')

    if code == INVALID_SESSION_CODE:
        return InvalidSessionError(message)
    if code == OCC_CONFLICT_CODE:
        return OccConflictError(message)
    return LedgerServiceError(message, status_code=status_code, error_code=code)


class Boto3SessionClient(SessionClient):
    """SessionClient backed by boto3's 'qldb-session' SendCommand API"""

    def __init__(self,
                 region_name: Optional[str] = None,
                 endpoint_url: Optional[str] = None,
                 boto_client: Any = None,
                 value_decoder: Optional[Callable[[Dict[str, Any]], Any]] = None,
                 parameter_encoder: Optional[Callable[[Any], Dict[str, Any]]] = None):
        """
        Initialize the boto3 session client

        Args:
            region_name: AWS region (defaults to AWS_REGION env var)
            endpoint_url: Optional endpoint override
            boto_client: Pre-built 'qldb-session' client (skips boto3.client)
            value_decoder: Converts a returned value holder into a row
                (defaults to Ion decoding)
            parameter_encoder: Converts a parameter into a value holder
                (defaults to Ion binary)
        """
        self.region_name = region_name or os.getenv("AWS_REGION")
        self.endpoint_url = endpoint_url
        self._client = boto_client or boto3.client(
            'qldb-session',
            region_name=self.region_name,
            endpoint_url=self.endpoint_url
        )
        self.value_decoder = value_decoder or decode_value
        self.parameter_encoder = parameter_encoder or encode_parameter

    def _send_command(self, **command) -> Dict[str, Any]:
        try:
            return self._client.send_command(**command)
        except ClientError as e:
            ledger_error = translate_client_error(e)
            logger.debug(
                "ledger_command_failed",
                command=[name for name in command if name != 'SessionToken'],
                kind=ledger_error.kind.value,
                error=str(e)
            )
            raise ledger_error from e
        except BotoCoreError as e:
            raise LedgerClientError(str(e)) from e

    def _page(self, raw_page: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'values': [self.value_decoder(holder) for holder in raw_page.get('Values', [])],
            'next_page_token': raw_page.get('NextPageToken'),
        }

    def start_session(self, ledger_name: str) -> Tuple[str, str]:
        response = self._send_command(StartSession={'LedgerName': ledger_name})
        session_token = response['StartSession']['SessionToken']
        session_id = response.get('ResponseMetadata', {}).get('RequestId', '')
        return session_token, session_id

    def start_transaction(self, session_token: str) -> str:
        response = self._send_command(SessionToken=session_token, StartTransaction={})
        return response['StartTransaction']['TransactionId']

    def execute_statement(self,
                          session_token: str,
                          transaction_id: str,
                          statement: str,
                          parameters: List[Any]) -> Dict[str, Any]:
        response = self._send_command(
            SessionToken=session_token,
            ExecuteStatement={
                'TransactionId': transaction_id,
                'Statement': statement,
                'Parameters': [self.parameter_encoder(p) for p in parameters],
            }
        )
        return self._page(response['ExecuteStatement']['FirstPage'])

    def fetch_page(self,
                   session_token: str,
                   transaction_id: str,
                   next_page_token: str) -> Dict[str, Any]:
        response = self._send_command(
            SessionToken=session_token,
            FetchPage={'TransactionId': transaction_id, 'NextPageToken': next_page_token}
        )
        return self._page(response['FetchPage']['Page'])

    def commit_transaction(self,
                           session_token: str,
                           transaction_id: str,
                           commit_digest: bytes) -> str:
        response = self._send_command(
            SessionToken=session_token,
            CommitTransaction={'TransactionId': transaction_id, 'CommitDigest': commit_digest}
        )
        return response['CommitTransaction']['TransactionId']

    def abort_transaction(self, session_token: str) -> None:
        self._send_command(SessionToken=session_token, AbortTransaction={})

    def end_session(self, session_token: str) -> None:
        self._send_command(SessionToken=session_token, EndSession={})
