"""
Driver Configuration - Ledger connection and retry settings

Settings come from explicit arguments or environment variables, with an
optional .env file loaded first:
    LEDGER_NAME             Ledger to connect to (required)
    LEDGER_RETRY_LIMIT      Retries per execute call (default 4)
    LEDGER_BACKOFF_BASE_MS  Exponential backoff base (default 10)
    LEDGER_BACKOFF_CAP_MS   Backoff ceiling in milliseconds (default 5000)
    AWS_REGION              Region of the ledger
    LEDGER_ENDPOINT_URL     Endpoint override (e.g. for a local emulator)
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

DEFAULT_RETRY_LIMIT = 4
DEFAULT_BACKOFF_BASE_MS = 10
DEFAULT_BACKOFF_CAP_MS = 5000


@dataclass(frozen=True)
class DriverConfig:
    """Immutable driver settings"""
    ledger_name: str
    retry_limit: int = DEFAULT_RETRY_LIMIT
    backoff_base_ms: int = DEFAULT_BACKOFF_BASE_MS
    backoff_cap_ms: int = DEFAULT_BACKOFF_CAP_MS
    region_name: Optional[str] = None
    endpoint_url: Optional[str] = None

    def validate(self) -> 'DriverConfig':
        """
        Check setting ranges

        Returns:
            self, for chaining

        Raises:
            ValueError: If any setting is out of range
        """
        if not self.ledger_name:
            raise ValueError("ledger_name is required")
        if self.retry_limit < 0:
            raise ValueError(f"retry_limit must be non-negative, got {self.retry_limit}")
        if self.backoff_base_ms <= 0 or self.backoff_cap_ms <= 0:
            raise ValueError("backoff_base_ms and backoff_cap_ms must be positive")
        return self

    @classmethod
    def from_env(cls, env_file: Optional[Union[str, Path]] = None) -> 'DriverConfig':
        """
        Build configuration from environment variables

        Args:
            env_file: Optional .env file loaded before reading the environment
                (existing variables are not overridden)

        Returns:
            Validated DriverConfig

        Raises:
            ValueError: If LEDGER_NAME is missing or a value is invalid
        """
        if env_file and Path(env_file).exists():
            load_dotenv(env_file)

        ledger_name = os.getenv("LEDGER_NAME")
        if not ledger_name:
            raise ValueError("LEDGER_NAME required")

        try:
            config = cls(
                ledger_name=ledger_name,
                retry_limit=int(os.getenv("LEDGER_RETRY_LIMIT", DEFAULT_RETRY_LIMIT)),
                backoff_base_ms=int(os.getenv("LEDGER_BACKOFF_BASE_MS", DEFAULT_BACKOFF_BASE_MS)),
                backoff_cap_ms=int(os.getenv("LEDGER_BACKOFF_CAP_MS", DEFAULT_BACKOFF_CAP_MS)),
                region_name=os.getenv("AWS_REGION"),
                endpoint_url=os.getenv("LEDGER_ENDPOINT_URL"),
            )
        except ValueError as e:
            raise ValueError(f"Invalid ledger driver setting: {e}") from e

        return config.validate()
