from typing import Any, Callable, List, Sequence, Tuple

import pandas as pd

from ..records import MINUTE_KEY_LENGTH, LogRecord
from ..results import (
    STATUS_CODES,
    SUSPICIOUS_IPS,
    TOTAL_REQUESTS,
    TRAFFIC_SOURCES,
    TRAFFIC_TRENDS,
    VISITED_PAGES,
    result_set,
)
from .base import Engine


def records_frame(records: Sequence[LogRecord]) -> pd.DataFrame:
    """One row per record; `seq` is the ingestion position used for tie-breaking."""
    return pd.DataFrame({
        "seq": pd.Series(range(len(records)), dtype="int64"),
        "ip": pd.Series([r.ip for r in records], dtype="object"),
        "timestamp": pd.Series([r.timestamp for r in records], dtype="object"),
        "url": pd.Series([r.url for r in records], dtype="object"),
        "status": pd.Series([r.status for r in records], dtype="Int64"),
        "user_agent": pd.Series([r.user_agent for r in records], dtype="object"),
    })


def _as_status(value: Any):
    return None if pd.isna(value) else int(value)


def _ranked(frame: pd.DataFrame, column: str, convert: Callable[[Any], Any] = str) -> List[Tuple[Any, int]]:
    if frame.empty:
        return []
    grouped = frame.groupby(column, dropna=False, sort=False).agg(
        count=("seq", "size"),
        first_seen=("seq", "min"),
    )
    grouped = grouped.sort_values(["count", "first_seen"], ascending=[False, True], kind="stable")
    return [(convert(key), int(count)) for key, count in zip(grouped.index, grouped["count"])]


class PandasEngine(Engine):
    name = "pandas"

    def __init__(self, records, index, config):
        super().__init__(records, index, config)
        self._frame = records_frame(records)
        self._failures = records_frame(list(index.scan(config.failure_statuses)))

    def total_requests(self):
        return result_set(TOTAL_REQUESTS, [(int(len(self._frame)),)])

    def status_codes(self):
        return result_set(STATUS_CODES, _ranked(self._frame, "status", _as_status))

    def visited_pages(self):
        return result_set(VISITED_PAGES, _ranked(self._frame, "url")[: self.config.top_n])

    def traffic_sources(self):
        return result_set(TRAFFIC_SOURCES, _ranked(self._frame, "user_agent"))

    def suspicious_ips(self):
        rows = _ranked(self._failures, "ip")
        return result_set(SUSPICIOUS_IPS, [row for row in rows if row[1] > self.config.min_failures])

    def traffic_trends(self):
        if self._frame.empty:
            return result_set(TRAFFIC_TRENDS, [])
        ts = self._frame["timestamp"]
        minutes = ts[ts.str.len() >= MINUTE_KEY_LENGTH].str[:MINUTE_KEY_LENGTH]
        counts = minutes.groupby(minutes).size().sort_index()
        return result_set(TRAFFIC_TRENDS, [(str(key), int(n)) for key, n in counts.items()])
