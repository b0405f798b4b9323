from typing import Callable, Dict, Sequence

from ..config import AnalysisConfig
from ..partitions import PartitionIndex
from ..records import LogRecord
from ..results import (
    STATUS_CODES,
    SUSPICIOUS_IPS,
    TOTAL_REQUESTS,
    TRAFFIC_SOURCES,
    TRAFFIC_TRENDS,
    VISITED_PAGES,
    ResultSet,
)


class Engine:
    """
    Computes the six report views over one immutable batch.

    Subclasses load the records into their own representation once, in
    __init__; after that every view method only reads shared state, so the
    views can run concurrently.
    """

    name = ""

    def __init__(self, records: Sequence[LogRecord], index: PartitionIndex, config: AnalysisConfig):
        self.records = records
        self.index = index
        self.config = config

    def total_requests(self) -> ResultSet:
        raise NotImplementedError

    def status_codes(self) -> ResultSet:
        raise NotImplementedError

    def visited_pages(self) -> ResultSet:
        raise NotImplementedError

    def traffic_sources(self) -> ResultSet:
        raise NotImplementedError

    def suspicious_ips(self) -> ResultSet:
        raise NotImplementedError

    def traffic_trends(self) -> ResultSet:
        raise NotImplementedError

    def views(self) -> Dict[str, Callable[[], ResultSet]]:
        return {
            TOTAL_REQUESTS: self.total_requests,
            STATUS_CODES: self.status_codes,
            VISITED_PAGES: self.visited_pages,
            TRAFFIC_SOURCES: self.traffic_sources,
            SUSPICIOUS_IPS: self.suspicious_ips,
            TRAFFIC_TRENDS: self.traffic_trends,
        }

    def close(self) -> None:
        pass
