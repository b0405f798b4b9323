from .. import views
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


class PythonEngine(Engine):
    """Plain-Python engine built on the reference views."""

    name = "python"

    def total_requests(self):
        return result_set(TOTAL_REQUESTS, [(views.total_count(self.records),)])

    def status_codes(self):
        return result_set(STATUS_CODES, views.status_distribution(self.records))

    def visited_pages(self):
        return result_set(VISITED_PAGES, views.top_pages(self.records, self.config.top_n))

    def traffic_sources(self):
        return result_set(TRAFFIC_SOURCES, views.agent_distribution(self.records))

    def suspicious_ips(self):
        rows = views.suspicious_ips(self.index, self.config.failure_statuses, self.config.min_failures)
        return result_set(SUSPICIOUS_IPS, rows)

    def traffic_trends(self):
        return result_set(TRAFFIC_TRENDS, views.traffic_trend(self.records))
