import logging

import duckdb

from ..records import MINUTE_KEY_LENGTH
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
from .pandas_engine import records_frame

logger = logging.getLogger(__name__)

TABLE_DDL = """
CREATE TABLE {table} (
    seq BIGINT,
    ip VARCHAR,
    "timestamp" VARCHAR,
    url VARCHAR,
    status INTEGER,
    user_agent VARCHAR
)
"""

# Ranked group counts: descending count, then first occurrence.
RANKED_SQL = """
SELECT {column}, cnt
FROM (
    SELECT {column}, COUNT(*) AS cnt, MIN(seq) AS first_seen
    FROM {table}
    GROUP BY {column}
)
{where}
ORDER BY cnt DESC, first_seen
{limit}
"""

TREND_SQL = f"""
SELECT substr("timestamp", 1, {MINUTE_KEY_LENGTH}) AS time_minute, COUNT(*) AS requests
FROM access_logs
WHERE length("timestamp") >= {MINUTE_KEY_LENGTH}
GROUP BY time_minute
ORDER BY time_minute
"""


class DuckDBEngine(Engine):
    """
    Loads the batch into an in-memory DuckDB database and answers every view
    with SQL. Records with a failure status are loaded into their own table
    from the partition index, so the suspicious-IP query never reads the
    other partitions.
    """

    name = "duckdb"

    def __init__(self, records, index, config):
        super().__init__(records, index, config)
        self._con = duckdb.connect(database=":memory:")
        try:
            self._load("access_logs", records)
            self._load("failed_requests", list(index.scan(config.failure_statuses)))
        except Exception:
            self._con.close()
            raise

    def _load(self, table, records):
        self._con.execute(TABLE_DDL.format(table=table))
        if not records:
            return
        frame = records_frame(records)
        self._con.register("records_df", frame)
        try:
            self._con.execute(f"INSERT INTO {table} SELECT * FROM records_df")
        finally:
            self._con.unregister("records_df")
        logger.debug("loaded %d rows into duckdb table %s", len(records), table)

    def _query(self, sql, params=None):
        # one cursor per call; views run on different threads
        cursor = self._con.cursor()
        try:
            return cursor.execute(sql, params or []).fetchall()
        finally:
            cursor.close()

    def _ranked(self, column, table="access_logs", where="", limit=""):
        return self._query(RANKED_SQL.format(column=column, table=table, where=where, limit=limit))

    def total_requests(self):
        return result_set(TOTAL_REQUESTS, self._query("SELECT COUNT(*) FROM access_logs"))

    def status_codes(self):
        return result_set(STATUS_CODES, self._ranked("status"))

    def visited_pages(self):
        return result_set(VISITED_PAGES, self._ranked("url", limit=f"LIMIT {int(self.config.top_n)}"))

    def traffic_sources(self):
        return result_set(TRAFFIC_SOURCES, self._ranked("user_agent"))

    def suspicious_ips(self):
        where = f"WHERE cnt > {int(self.config.min_failures)}"
        return result_set(SUSPICIOUS_IPS, self._ranked("ip", table="failed_requests", where=where))

    def traffic_trends(self):
        return result_set(TRAFFIC_TRENDS, self._query(TREND_SQL))

    def close(self):
        self._con.close()
