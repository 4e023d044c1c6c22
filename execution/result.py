"""
Buffered Result - In-memory copy of a result stream
"""

from typing import Any, Iterable, Iterator, List


class BufferedResult:
    """Fully materialized rows that stay readable after commit"""

    def __init__(self, rows: Iterable[Any]):
        self._rows: List[Any] = list(rows)

    @classmethod
    def buffer_result(cls, result: Iterable[Any]) -> 'BufferedResult':
        """
        Drain a live result into memory

        Args:
            result: Live result stream (must still be readable)

        Returns:
            BufferedResult holding every remaining row
        """
        return cls(result)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BufferedResult):
            return NotImplemented
        return self._rows == other._rows

    def __repr__(self) -> str:
        return f"BufferedResult({self._rows!r})"
