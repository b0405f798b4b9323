import json
import logging
import pathlib
import shutil

import boto3
import pandas as pd
from botocore.exceptions import BotoCoreError, ClientError

from .config import DEFAULT_NULL_TOKEN
from .errors import ConfigError, LogIOError
from .records import parse_s3_url
from .results import ResultSet

logger = logging.getLogger(__name__)

# every result set is written as a single part file inside its own directory
PART_FILE = "000000_0"


class LocalSink:
    def __init__(self, root: pathlib.Path):
        self._root = pathlib.Path(root)

    def __str__(self):
        return str(self._root)

    def __call__(self, name: str, payload: str) -> str:
        target = self._root / name
        try:
            if target.is_dir():
                shutil.rmtree(target)
            elif target.exists():
                target.unlink()
            target.mkdir(parents=True)
            path = target / PART_FILE
            with open(path, "w", encoding="utf-8", newline="") as file:
                file.write(payload)
        except OSError as exc:
            raise LogIOError(f"cannot write {target}: {exc}") from exc
        return str(path)


class S3Sink:
    def __init__(self, bucket: str, prefix: str, client=None):
        self._bucket = bucket
        self._prefix = prefix
        self._s3 = client or boto3.client("s3")

    def __str__(self):
        return f"s3://{self._bucket}/{self._prefix}"

    def _key(self, *parts: str) -> str:
        return "/".join(p for p in (self._prefix, *parts) if p)

    def __call__(self, name: str, payload: str) -> str:
        directory = self._key(name) + "/"
        key = self._key(name, PART_FILE)
        try:
            paginator = self._s3.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self._bucket, Prefix=directory):
                stale = [{"Key": obj["Key"]} for obj in page.get("Contents", [])]
                if stale:
                    self._s3.delete_objects(Bucket=self._bucket, Delete={"Objects": stale})
            self._s3.put_object(Bucket=self._bucket, Key=key, Body=payload.encode("utf-8"))
        except (BotoCoreError, ClientError) as exc:
            raise LogIOError(f"cannot write s3://{self._bucket}/{key}: {exc}") from exc
        return f"s3://{self._bucket}/{key}"


def sink_for(destination: str, client=None):
    """Pick a sink from the destination: s3://bucket/prefix or a local directory."""
    if "://" in destination and not destination.startswith("s3://"):
        raise ConfigError(f"unsupported output location {destination!r}")
    if destination.startswith("s3://"):
        bucket, prefix = parse_s3_url(destination)
        return S3Sink(bucket, prefix, client=client)
    return LocalSink(pathlib.Path(destination))


class ResultExporter:
    """
    Serializes result sets and hands them to a sink under their logical name.

    Writing a name that already has content replaces it entirely.
    """

    def __init__(self, sink, fmt: str = "text", delimiter: str = ",", null_token: str = DEFAULT_NULL_TOKEN):
        if fmt not in ("text", "json"):
            raise ConfigError(f"unknown output format {fmt!r}")
        self.sink = sink
        self.fmt = fmt
        self.delimiter = delimiter
        self.null_token = null_token

    def serialize(self, result: ResultSet) -> str:
        if not result.rows:
            return ""
        if self.fmt == "json":
            return "".join(json.dumps(row, ensure_ascii=False) + "\n" for row in result.as_dicts())
        # object dtype keeps ints as ints next to missing values
        frame = pd.DataFrame(list(result.rows), columns=list(result.columns), dtype=object)
        return frame.to_csv(
            sep=self.delimiter,
            header=False,
            index=False,
            na_rep=self.null_token,
            lineterminator="\n",
        )

    def export(self, result: ResultSet) -> str:
        location = self.sink(result.name, self.serialize(result))
        logger.info("exported %s (%d rows) to %s", result.name, len(result), location)
        return location

    def export_all(self, results):
        return {result.name: self.export(result) for result in results}
