from accesslog_summary.partitions import PartitionIndex
from accesslog_summary.records import parse_lines


def _records(*statuses):
    lines = [f"10.0.0.{i},2024-02-01 10:00:0{i % 10},/p,{s},ua" for i, s in enumerate(statuses)]
    records, _ = parse_lines(lines, skip_header=False)
    return records


def test_partitions_are_disjoint_and_cover_all_records(generated_records):
    index = PartitionIndex(generated_records)
    sizes = index.sizes()
    assert sum(sizes.values()) == len(generated_records) == len(index)
    seen = set()
    for status in index.keys():
        members = index.partition(status)
        assert all(r.status == status for r in members)
        ids = {id(r) for r in members}
        assert not ids & seen
        seen |= ids
    assert len(seen) == len(generated_records)


def test_null_status_is_its_own_partition():
    index = PartitionIndex(_records(200, "", 404, "x", 200))
    assert index.keys() == [200, None, 404]
    assert index.sizes() == {200: 2, None: 2, 404: 1}
    assert None in index
    assert 0 not in index


def test_scan_returns_selected_partitions_in_ingestion_order():
    records = _records(404, 200, 500, 404, 302, 500)
    index = PartitionIndex(records)
    scanned = list(index.scan({404, 500}))
    assert scanned == [records[0], records[2], records[3], records[5]]


def test_scan_unknown_status_and_empty_index():
    index = PartitionIndex(_records(200))
    assert list(index.scan({404})) == []
    assert index.partition(404) == ()
    assert list(PartitionIndex([]).scan({404, 500})) == []
