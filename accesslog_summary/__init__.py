from .config import AnalysisConfig
from .errors import AccessLogError, ConfigError, LogIOError
from .exporter import LocalSink, ResultExporter, S3Sink, sink_for
from .partitions import PartitionIndex
from .records import NULL_STATUS, LogRecord, ParsedBatch, load_batch, parse_line, parse_lines
from .results import VIEW_NAMES, ResultSet
from .runner import Report, analyze, run

__version__ = "0.1.0"

__all__ = [
    "AccessLogError",
    "AnalysisConfig",
    "ConfigError",
    "LocalSink",
    "LogIOError",
    "LogRecord",
    "NULL_STATUS",
    "ParsedBatch",
    "PartitionIndex",
    "Report",
    "ResultExporter",
    "ResultSet",
    "S3Sink",
    "VIEW_NAMES",
    "analyze",
    "load_batch",
    "parse_line",
    "parse_lines",
    "run",
    "sink_for",
]
