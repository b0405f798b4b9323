import itertools

import pytest
from botocore.exceptions import ClientError

from accesslog_summary.generator import generate_lines
from accesslog_summary.records import parse_lines

HEADER = "ip,timestamp,url,status,user_agent"

EXAMPLE_LINES = [
    HEADER,
    "192.168.1.1,2024-02-01 10:15:01,/home,200,Chrome/90.0",
    "192.168.1.1,2024-02-01 10:15:05,/home,404,Chrome/90.0",
    "192.168.1.1,2024-02-01 10:16:00,/home,404,Chrome/90.0",
]


class _Body:
    def __init__(self, data):
        self._data = data

    def read(self):
        return self._data


class FakeS3:
    """Just enough of the boto3 S3 client for the readers and sinks."""

    def __init__(self, objects=None):
        self.objects = dict(objects or {})

    def get_paginator(self, operation):
        assert operation == "list_objects_v2"
        return self

    def paginate(self, Bucket, Prefix):
        keys = sorted(key for bucket, key in self.objects if bucket == Bucket and key.startswith(Prefix))
        if keys:
            yield {"Contents": [{"Key": key} for key in keys]}
        else:
            yield {"KeyCount": 0}

    def get_object(self, Bucket, Key):
        if (Bucket, Key) not in self.objects:
            raise ClientError({"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject")
        return {"Body": _Body(self.objects[(Bucket, Key)])}

    def put_object(self, Bucket, Key, Body):
        self.objects[(Bucket, Key)] = Body if isinstance(Body, bytes) else Body.encode("utf-8")

    def delete_objects(self, Bucket, Delete):
        for obj in Delete["Objects"]:
            self.objects.pop((Bucket, obj["Key"]), None)


class BrokenS3(FakeS3):
    def paginate(self, Bucket, Prefix):
        raise ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "ListObjectsV2")


@pytest.fixture
def fake_s3():
    return FakeS3()


@pytest.fixture
def example_records():
    records, _ = parse_lines(EXAMPLE_LINES)
    return records


@pytest.fixture
def generated_records():
    lines = list(itertools.islice(generate_lines(seed=7, corrupt_rate=0.05), 3000))
    records, _ = parse_lines(lines, skip_header=False)
    return records


@pytest.fixture
def log_dir(tmp_path):
    directory = tmp_path / "logs"
    directory.mkdir()
    (directory / "part-0.csv").write_text("\n".join(EXAMPLE_LINES) + "\n")
    (directory / "part-1.csv").write_text(
        "\n".join([
            HEADER,
            "10.0.0.5,2024-02-01 10:17:30,/login,500,curl/7.68.0",
            "10.0.0.5,2024-02-01 10:17:31,/login,,curl/7.68.0",
            "10.0.0.5,2024-02-01 10:17",
        ]) + "\n"
    )
    (directory / ".hidden").write_text("should,not,be,read,at all\n")
    return directory
