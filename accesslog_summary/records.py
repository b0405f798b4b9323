import io
import logging
import pathlib
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple
from urllib.parse import urlparse

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .config import AnalysisConfig
from .errors import ConfigError, LogIOError

logger = logging.getLogger(__name__)

FIELD_COUNT = 5
MINUTE_KEY_LENGTH = 16  # "YYYY-MM-DD HH:MM"

# Records whose status is missing or not an integer all share this key.
NULL_STATUS = None
STATUS_MIN = -(2 ** 31)
STATUS_MAX = 2 ** 31 - 1


@dataclass(frozen=True)
class LogRecord:
    ip: str
    timestamp: str
    url: str
    status: Optional[int]
    user_agent: str

    @property
    def time_minute(self) -> Optional[str]:
        """Timestamp truncated to the minute, or None when it is too short to truncate."""
        if len(self.timestamp) < MINUTE_KEY_LENGTH:
            return None
        return self.timestamp[:MINUTE_KEY_LENGTH]


@dataclass(frozen=True)
class ParsedBatch:
    records: Tuple[LogRecord, ...]
    malformed: int = 0
    files: int = 0

    def __len__(self) -> int:
        return len(self.records)


def parse_status(value: str) -> Optional[int]:
    """Parse the status column; empty, non-integer and out-of-range values become NULL_STATUS."""
    text = value.strip()
    if not text.lstrip("+-").isdigit():
        return NULL_STATUS
    try:
        status = int(text)
    except ValueError:
        return NULL_STATUS
    # same as a cast to a 32-bit INT column: out of range is NULL
    if not STATUS_MIN <= status <= STATUS_MAX:
        return NULL_STATUS
    return status


def _parse(line: str, delimiter: str) -> Tuple[LogRecord, int]:
    # the user agent is last, so it keeps any delimiter it contains
    fields = line.rstrip("\r\n").split(delimiter, FIELD_COUNT - 1)
    found = len(fields)
    fields += [""] * (FIELD_COUNT - found)
    ip, timestamp, url, status, user_agent = fields
    record = LogRecord(
        ip=ip,
        timestamp=timestamp,
        url=url,
        status=parse_status(status),
        user_agent=user_agent,
    )
    return record, found


def parse_line(line: str, delimiter: str = ",") -> LogRecord:
    """Turn one delimited line into a LogRecord. Never raises on bad content."""
    record, _ = _parse(line, delimiter)
    return record


def parse_lines(
    lines: Iterable[str],
    delimiter: str = ",",
    skip_header: bool = True,
) -> Tuple[List[LogRecord], int]:
    """
    Parse a stream of lines into records.

    Rows with missing fields or an unparseable status are still emitted
    (with empty strings / NULL_STATUS filled in) and counted as malformed.
    Returns the records in input order and the malformed row count.
    """
    records: List[LogRecord] = []
    malformed = 0
    for lineno, line in enumerate(lines, start=1):
        if skip_header and lineno == 1:
            continue
        record, found = _parse(line, delimiter)
        if found < FIELD_COUNT or record.status is NULL_STATUS:
            malformed += 1
            logger.debug("malformed row at line %d (%d fields, status=%r)", lineno, found, record.status)
        records.append(record)
    return records, malformed


def parse_s3_url(url: str) -> Tuple[str, str]:
    """Extracts bucket name and prefix from an s3:// URL."""
    parsed = urlparse(url)
    if parsed.scheme != "s3":
        raise ConfigError("Input must be an s3:// URL")
    if not parsed.netloc:
        raise ConfigError(f"missing bucket name in {url!r}")
    prefix = parsed.path.lstrip("/").rstrip("/")
    return parsed.netloc, prefix


def _read_local_file(path: pathlib.Path) -> Iterator[str]:
    try:
        with open(path, "r", encoding="utf-8", errors="replace", newline="\n") as f:
            yield from f
    except OSError as exc:
        raise LogIOError(f"cannot read {path}: {exc}") from exc


def _local_files(source: str) -> Iterator[Tuple[str, Iterator[str]]]:
    path = pathlib.Path(source)
    if path.is_file():
        yield str(path), _read_local_file(path)
        return
    if not path.is_dir():
        raise LogIOError(f"input path does not exist: {source}")
    for child in sorted(path.iterdir()):
        if child.name.startswith(".") or not child.is_file():
            continue
        yield str(child), _read_local_file(child)


def _s3_files(source: str, client) -> Iterator[Tuple[str, Iterator[str]]]:
    bucket_name, prefix = parse_s3_url(source)
    s3 = client or boto3.client("s3")
    found = False
    try:
        paginator = s3.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=bucket_name, Prefix=prefix):
            if "Contents" not in page:
                continue
            for obj in page["Contents"]:
                key = obj["Key"]
                if key.endswith("/"):
                    continue
                found = True
                response = s3.get_object(Bucket=bucket_name, Key=key)
                body = response["Body"].read().decode("utf-8", errors="replace")
                # rows end at \n only, as for local files
                yield f"s3://{bucket_name}/{key}", io.StringIO(body, newline="\n")
    except (BotoCoreError, ClientError) as exc:
        raise LogIOError(f"cannot read s3://{bucket_name}/{prefix}: {exc}") from exc
    if not found:
        raise LogIOError(f"no objects found under s3://{bucket_name}/{prefix}")


def read_files(source: str, client=None) -> Iterator[Tuple[str, Iterator[str]]]:
    """Yield (name, lines) for every input file under a local path or s3:// prefix."""
    if source.startswith("s3://"):
        return _s3_files(source, client)
    return _local_files(source)


def load_batch(source: str, config: AnalysisConfig = AnalysisConfig(), client=None) -> ParsedBatch:
    """Read and parse every file under `source`; the header is skipped per file."""
    records: List[LogRecord] = []
    malformed = 0
    files = 0
    for name, lines in read_files(source, client=client):
        parsed, bad = parse_lines(lines, delimiter=config.delimiter, skip_header=config.skip_header)
        logger.debug("read %d records from %s", len(parsed), name)
        records.extend(parsed)
        malformed += bad
        files += 1

    if malformed:
        logger.warning("%d of %d rows were malformed and kept with NULL/empty fields", malformed, len(records))
    logger.info("ingested %d records from %d file(s) under %s", len(records), files, source)
    return ParsedBatch(records=tuple(records), malformed=malformed, files=files)
