import heapq
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .records import LogRecord

StatusKey = Optional[int]


class PartitionIndex:
    """
    Records grouped by status, NULL status included as its own partition.

    Every partition keeps its records in ingestion order, and `scan` over
    several partitions merges them back into that order, so a status-scoped
    query sees the same sequence a filtered full scan would.
    """

    def __init__(self, records: Sequence[LogRecord]):
        self._partitions: Dict[StatusKey, List[Tuple[int, LogRecord]]] = {}
        for seq, record in enumerate(records):
            self._partitions.setdefault(record.status, []).append((seq, record))
        self._total = len(records)

    def __len__(self) -> int:
        return self._total

    def __contains__(self, status: StatusKey) -> bool:
        return status in self._partitions

    def keys(self) -> List[StatusKey]:
        """Status keys in order of first appearance."""
        return list(self._partitions)

    def sizes(self) -> Dict[StatusKey, int]:
        return {status: len(rows) for status, rows in self._partitions.items()}

    def partition(self, status: StatusKey) -> Tuple[LogRecord, ...]:
        return tuple(record for _, record in self._partitions.get(status, ()))

    def scan(self, statuses: Iterable[StatusKey]) -> Iterator[LogRecord]:
        """Records whose status is in `statuses`, in ingestion order; other partitions are never touched."""
        selected = [self._partitions[s] for s in set(statuses) if s in self._partitions]
        for _, record in heapq.merge(*selected, key=lambda row: row[0]):
            yield record
