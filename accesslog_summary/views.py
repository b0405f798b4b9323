"""
Reference implementation of the six report views.

Each view is a pure function over an immutable record sequence (or the
partition index built from it) and returns rows as (key, count) tuples.
Rows are ordered by descending count; equal counts keep the order in which
their key was first seen. The traffic trend is the exception and is ordered
chronologically.
"""
from collections import Counter
from typing import AbstractSet, Iterable, List, Optional, Sequence, Tuple, TypeVar

from .partitions import PartitionIndex
from .records import LogRecord

K = TypeVar("K")


def _ranked(keys: Iterable[K]) -> List[Tuple[K, int]]:
    # most_common() keeps first-encountered order among equal counts
    return Counter(keys).most_common()


def total_count(records: Sequence[LogRecord]) -> int:
    return len(records)


def status_distribution(records: Sequence[LogRecord]) -> List[Tuple[Optional[int], int]]:
    return _ranked(r.status for r in records)


def top_pages(records: Sequence[LogRecord], n: int = 3) -> List[Tuple[str, int]]:
    return _ranked(r.url for r in records)[:n]


def agent_distribution(records: Sequence[LogRecord]) -> List[Tuple[str, int]]:
    return _ranked(r.user_agent for r in records)


def suspicious_ips(
    index: PartitionIndex,
    failure_statuses: AbstractSet[int] = frozenset({404, 500}),
    min_failures: int = 3,
) -> List[Tuple[str, int]]:
    """IPs with more than `min_failures` requests answered with one of `failure_statuses`."""
    ranked = _ranked(r.ip for r in index.scan(failure_statuses))
    return [(ip, count) for ip, count in ranked if count > min_failures]


def traffic_trend(records: Sequence[LogRecord]) -> List[Tuple[str, int]]:
    """Requests per minute, oldest first. Timestamps shorter than a minute key are left out."""
    counts = Counter(r.time_minute for r in records)
    counts.pop(None, None)
    return sorted(counts.items())
