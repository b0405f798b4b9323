from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple

TOTAL_REQUESTS = "total_requests"
STATUS_CODES = "status_codes"
VISITED_PAGES = "visited_pages"
TRAFFIC_SOURCES = "traffic_sources"
SUSPICIOUS_IPS = "suspicious_ips"
TRAFFIC_TRENDS = "traffic_trends"

# Output names in the order reports are produced, with their column names.
COLUMNS: Dict[str, Tuple[str, ...]] = {
    TOTAL_REQUESTS: ("total_requests",),
    STATUS_CODES: ("status", "count"),
    VISITED_PAGES: ("url", "visits"),
    TRAFFIC_SOURCES: ("user_agent", "count"),
    SUSPICIOUS_IPS: ("ip", "failed_requests"),
    TRAFFIC_TRENDS: ("time_minute", "requests"),
}
VIEW_NAMES = tuple(COLUMNS)

Row = Tuple[Any, ...]


@dataclass(frozen=True)
class ResultSet:
    name: str
    columns: Tuple[str, ...]
    rows: Tuple[Row, ...]

    def __len__(self) -> int:
        return len(self.rows)

    def as_dicts(self) -> List[Dict[str, Any]]:
        return [dict(zip(self.columns, row)) for row in self.rows]


def result_set(name: str, rows: Iterable[Row]) -> ResultSet:
    """Build a ResultSet for one of the known output names."""
    if name not in COLUMNS:
        raise KeyError(f"unknown result set {name!r}")
    return ResultSet(name=name, columns=COLUMNS[name], rows=tuple(tuple(row) for row in rows))
