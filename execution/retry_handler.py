"""
Retry Handler - Retry policy and backoff for ledger transactions
"""

import random
import time
from dataclasses import dataclass
from typing import Dict

from infrastructure.config import (
    DEFAULT_BACKOFF_BASE_MS,
    DEFAULT_BACKOFF_CAP_MS,
    DEFAULT_RETRY_LIMIT,
    DriverConfig,
)
from infrastructure.errors import ErrorKind, classify_error


@dataclass(frozen=True)
class RetryRule:
    """How the engine reacts to one kind of failure"""
    retryable: bool
    replace_session: bool
    abort_transaction: bool


RETRY_RULES: Dict[ErrorKind, RetryRule] = {
    ErrorKind.USER_ABORT: RetryRule(retryable=False, replace_session=False, abort_transaction=True),
    # The old transaction died with the session
    ErrorKind.SESSION_INVALID: RetryRule(retryable=True, replace_session=True, abort_transaction=False),
    # The conflict already terminated the transaction
    ErrorKind.OCC_CONFLICT: RetryRule(retryable=True, replace_session=False, abort_transaction=False),
    ErrorKind.TRANSIENT_SERVICE: RetryRule(retryable=True, replace_session=False, abort_transaction=True),
    ErrorKind.CLIENT_ERROR: RetryRule(retryable=False, replace_session=False, abort_transaction=True),
    ErrorKind.RESOURCE_CLOSED: RetryRule(retryable=False, replace_session=False, abort_transaction=True),
}


class RetryHandler:
    """Decides whether a failed attempt is retried and how long to wait"""

    def __init__(self,
                 retry_limit: int = DEFAULT_RETRY_LIMIT,
                 base_delay_ms: int = DEFAULT_BACKOFF_BASE_MS,
                 max_delay_ms: int = DEFAULT_BACKOFF_CAP_MS):
        """
        Initialize retry handler

        Args:
            retry_limit: Maximum number of retries (not attempts) per execution
            base_delay_ms: Base of the exponential backoff
            max_delay_ms: Cap of the exponential backoff

        Raises:
            ValueError: If retry_limit is negative
        """
        if retry_limit < 0:
            raise ValueError(f"retry_limit must be non-negative, got {retry_limit}")

        self._retry_limit = retry_limit
        self._base_delay_ms = base_delay_ms
        self._max_delay_ms = max_delay_ms

    @classmethod
    def from_config(cls, config: DriverConfig) -> 'RetryHandler':
        return cls(
            retry_limit=config.retry_limit,
            base_delay_ms=config.backoff_base_ms,
            max_delay_ms=config.backoff_cap_ms
        )

    @property
    def retry_limit(self) -> int:
        return self._retry_limit

    @property
    def base_delay_ms(self) -> int:
        return self._base_delay_ms

    @property
    def max_delay_ms(self) -> int:
        return self._max_delay_ms

    def rule_for(self, error: BaseException) -> RetryRule:
        return RETRY_RULES[classify_error(error)]

    def should_retry(self, error: BaseException, attempt: int) -> bool:
        """
        Determine if error should trigger retry

        Args:
            error: Exception that ended the attempt
            attempt: Retries performed so far (0 on the first attempt)

        Returns:
            True if should retry, False otherwise
        """
        if attempt >= self._retry_limit:
            return False

        return self.rule_for(error).retryable

    def get_delay(self, attempt: int) -> float:
        """
        Calculate delay before the next retry (full jitter)

        Args:
            attempt: 1-based retry number

        Returns:
            Delay in seconds, in [0, (max_delay_ms + 1) / 1000)
        """
        exponential_backoff = min(self._max_delay_ms, self._base_delay_ms ** attempt)
        return random.random() * (exponential_backoff + 1) / 1000.0

    def sleep_before_retry(self, attempt: int) -> float:
        delay = self.get_delay(attempt)
        time.sleep(delay)
        return delay
