from typing import Any, List, Sequence, Tuple

import polars as pl

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

SCHEMA = {
    "seq": pl.Int64,
    "ip": pl.Utf8,
    "timestamp": pl.Utf8,
    "url": pl.Utf8,
    "status": pl.Int64,
    "user_agent": pl.Utf8,
}


def records_frame(records: Sequence[LogRecord]) -> pl.DataFrame:
    return pl.DataFrame(
        {
            "seq": list(range(len(records))),
            "ip": [r.ip for r in records],
            "timestamp": [r.timestamp for r in records],
            "url": [r.url for r in records],
            "status": [r.status for r in records],
            "user_agent": [r.user_agent for r in records],
        },
        schema=SCHEMA,
    )


def _ranked(frame: pl.DataFrame, column: str) -> pl.DataFrame:
    # nulls form their own group
    return (
        frame.group_by(column)
        .agg(
            pl.len().alias("count"),
            pl.col("seq").min().alias("first_seen"),
        )
        .sort(["count", "first_seen"], descending=[True, False])
    )


def _rows(frame: pl.DataFrame, key: str, value: str = "count") -> List[Tuple[Any, int]]:
    return list(zip(frame[key].to_list(), frame[value].to_list()))


class PolarsEngine(Engine):
    name = "polars"

    def __init__(self, records, index, config):
        super().__init__(records, index, config)
        self._frame = records_frame(records)
        self._failures = records_frame(list(index.scan(config.failure_statuses)))

    def total_requests(self):
        return result_set(TOTAL_REQUESTS, [(self._frame.height,)])

    def status_codes(self):
        return result_set(STATUS_CODES, _rows(_ranked(self._frame, "status"), "status"))

    def visited_pages(self):
        top = _ranked(self._frame, "url").head(self.config.top_n)
        return result_set(VISITED_PAGES, _rows(top, "url"))

    def traffic_sources(self):
        return result_set(TRAFFIC_SOURCES, _rows(_ranked(self._frame, "user_agent"), "user_agent"))

    def suspicious_ips(self):
        counts = _ranked(self._failures, "ip").filter(pl.col("count") > self.config.min_failures)
        return result_set(SUSPICIOUS_IPS, _rows(counts, "ip"))

    def traffic_trends(self):
        trend = (
            self._frame.filter(pl.col("timestamp").str.len_chars() >= MINUTE_KEY_LENGTH)
            .select(pl.col("timestamp").str.slice(0, MINUTE_KEY_LENGTH).alias("time_minute"))
            .group_by("time_minute")
            .agg(pl.len().alias("requests"))
            .sort("time_minute")
        )
        return result_set(TRAFFIC_TRENDS, _rows(trend, "time_minute", "requests"))
