"""
Executable - Contract for retried execution against a ledger
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional


class Executable(ABC):
    """
    An abstract base class representing retried execution against a ledger
    """

    @abstractmethod
    def execute_statement(self,
                          statement: str,
                          *parameters: Any,
                          on_retry: Optional[Callable[[int], None]] = None) -> Any:
        """
        Implicitly start a transaction, execute the statement, and commit the transaction, retrying up to the
        retry limit if an OCC conflict or retriable exception occurs.
        """

    @abstractmethod
    def execute_lambda(self,
                       query_lambda: Callable[..., Any],
                       on_retry: Optional[Callable[[int], None]] = None) -> Any:
        """
        Implicitly start a transaction, execute the function, and commit the transaction, retrying up to the
        retry limit if an OCC conflict or retriable exception occurs.
        """

    @abstractmethod
    def execute_action(self,
                       action: Callable[..., Any],
                       on_retry: Optional[Callable[[int], None]] = None) -> None:
        """
        Same as execute_lambda, for work that returns nothing.
        """

    @abstractmethod
    def list_table_names(self) -> List[str]:
        """
        Names of the active tables in the ledger.
        """

    @abstractmethod
    def start_transaction(self) -> Any:
        """
        Start a transaction the caller commits or aborts, with no automatic retry.
        """
