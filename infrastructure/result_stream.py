"""
Result Stream - Lazy, single-pass view over the rows of one statement

Pages after the first are fetched on demand through the owning transaction.
Once that transaction commits or aborts, the stream can no longer be read.
"""

from typing import Any, Dict, Iterator

from .errors import TransactionClosedError

_EXHAUSTED = object()


class Result:
    """Forward-only iterator over statement rows"""

    def __init__(self, transaction, first_page: Dict[str, Any]):
        """
        Initialize result stream

        Args:
            transaction: Transaction that produced the rows
            first_page: First page returned by the statement execution
        """
        self._transaction = transaction
        self._rows: Iterator[Any] = iter(first_page.get('values', []))
        self._next_page_token = first_page.get('next_page_token')

    def __iter__(self) -> 'Result':
        return self

    def __next__(self) -> Any:
        while True:
            if self._transaction.is_closed:
                raise TransactionClosedError(
                    f"Result of transaction {self._transaction.transaction_id} is no longer readable"
                )

            row = next(self._rows, _EXHAUSTED)
            if row is not _EXHAUSTED:
                return row

            if self._next_page_token is None:
                raise StopIteration

            page = self._transaction.fetch_page(self._next_page_token)
            self._rows = iter(page.get('values', []))
            self._next_page_token = page.get('next_page_token')
