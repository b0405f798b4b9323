from collections import Counter

import pytest

from accesslog_summary import views
from accesslog_summary.partitions import PartitionIndex
from accesslog_summary.records import parse_lines


def _records(rows):
    records, _ = parse_lines([",".join(map(str, row)) for row in rows], skip_header=False)
    return records


def test_example_batch(example_records):
    index = PartitionIndex(example_records)
    assert views.total_count(example_records) == 3
    assert views.status_distribution(example_records) == [(404, 2), (200, 1)]
    assert views.top_pages(example_records, 1) == [("/home", 3)]
    assert views.agent_distribution(example_records) == [("Chrome/90.0", 3)]
    assert views.suspicious_ips(index) == []
    assert views.traffic_trend(example_records) == [("2024-02-01 10:15", 2), ("2024-02-01 10:16", 1)]


def test_empty_input_gives_empty_views():
    assert views.total_count([]) == 0
    assert views.status_distribution([]) == []
    assert views.top_pages([], 3) == []
    assert views.agent_distribution([]) == []
    assert views.suspicious_ips(PartitionIndex([])) == []
    assert views.traffic_trend([]) == []


def test_status_distribution_partitions_all_records(generated_records):
    rows = views.status_distribution(generated_records)
    assert sum(count for _, count in rows) == len(generated_records)
    assert len({status for status, _ in rows}) == len(rows)
    assert None in dict(rows)
    counts = [count for _, count in rows]
    assert counts == sorted(counts, reverse=True)


def test_null_status_group_counts_empty_status():
    records = _records([
        ("1.1.1.1", "2024-02-01 10:00:00", "/", "", "ua"),
        ("1.1.1.1", "2024-02-01 10:00:01", "/", 200, "ua"),
        ("1.1.1.1", "2024-02-01 10:00:02", "/", "", "ua"),
    ])
    assert views.status_distribution(records) == [(None, 2), (200, 1)]


def test_top_pages_ties_keep_first_occurrence():
    records = _records([
        ("ip", "2024-02-01 10:00:00", "/b", 200, "ua"),
        ("ip", "2024-02-01 10:00:00", "/a", 200, "ua"),
        ("ip", "2024-02-01 10:00:00", "/c", 200, "ua"),
        ("ip", "2024-02-01 10:00:00", "/c", 200, "ua"),
        ("ip", "2024-02-01 10:00:00", "/a", 200, "ua"),
        ("ip", "2024-02-01 10:00:00", "/d", 200, "ua"),
    ])
    assert views.top_pages(records, 2) == [("/a", 2), ("/c", 2)]
    assert views.top_pages(records, 3) == [("/a", 2), ("/c", 2), ("/b", 1)]
    assert views.top_pages(records, 0) == []


def test_top_pages_is_prefix_of_url_distribution(generated_records):
    full = Counter(r.url for r in generated_records)
    top = views.top_pages(generated_records, 3)
    assert len(top) == 3
    assert all(full[url] == count for url, count in top)
    assert [c for _, c in top] == sorted((c for _, c in top), reverse=True)
    assert top[-1][1] >= max(c for url, c in full.items() if url not in dict(top))


def test_grouping_is_exact():
    records = _records([
        ("ip", "t", "/", 200, "Chrome"),
        ("ip", "t", "/", 200, "chrome"),
        ("ip", "t", "/", 200, "Chrome "),
        ("ip", "t", "/", 200, "Chrome"),
    ])
    assert views.agent_distribution(records) == [("Chrome", 2), ("chrome", 1), ("Chrome ", 1)]


def _failures(ip, status, n):
    return [(ip, "2024-02-01 10:00:00", "/x", status, "ua")] * n


def test_suspicious_ips_threshold_is_strict():
    records = _records(
        _failures("1.1.1.1", 404, 3)
        + _failures("2.2.2.2", 404, 2)
        + _failures("2.2.2.2", 500, 2)
        + _failures("3.3.3.3", 403, 10)
        + _failures("4.4.4.4", 500, 6)
        + _failures("1.1.1.1", 200, 5)
    )
    index = PartitionIndex(records)
    assert views.suspicious_ips(index) == [("4.4.4.4", 6), ("2.2.2.2", 4)]
    assert views.suspicious_ips(index, min_failures=2) == [("4.4.4.4", 6), ("2.2.2.2", 4), ("1.1.1.1", 3)]
    assert views.suspicious_ips(index, failure_statuses={403}) == [("3.3.3.3", 10)]


def test_suspicious_ips_only_counts_failure_statuses(generated_records):
    index = PartitionIndex(generated_records)
    failures = Counter(r.ip for r in generated_records if r.status in (404, 500))
    rows = views.suspicious_ips(index)
    assert rows
    for ip, count in rows:
        assert count > 3
        assert failures[ip] == count


def test_traffic_trend_is_chronological_and_skips_short_timestamps():
    records = _records([
        ("ip", "2024-02-01 10:16:00", "/", 200, "ua"),
        ("ip", "2024-02-01 10:15:59", "/", 200, "ua"),
        ("ip", "2024-02-01 09:59:59", "/", 200, "ua"),
        ("ip", "2024-02-01 10:16", "/", 200, "ua"),
        ("ip", "2024-02-01", "/", 200, "ua"),
        ("ip",),
    ])
    assert views.traffic_trend(records) == [
        ("2024-02-01 09:59", 1),
        ("2024-02-01 10:15", 1),
        ("2024-02-01 10:16", 2),
    ]


def test_traffic_trend_counts_every_full_timestamp(generated_records):
    rows = views.traffic_trend(generated_records)
    keys = [key for key, _ in rows]
    assert keys == sorted(keys)
    assert sum(c for _, c in rows) == sum(1 for r in generated_records if len(r.timestamp) >= 16)


@pytest.mark.parametrize("view", [
    views.status_distribution,
    views.agent_distribution,
    views.traffic_trend,
    lambda records: views.top_pages(records, 3),
    lambda records: views.suspicious_ips(PartitionIndex(records)),
])
def test_views_are_idempotent(generated_records, view):
    snapshot = list(generated_records)
    assert view(generated_records) == view(generated_records)
    assert generated_records == snapshot
