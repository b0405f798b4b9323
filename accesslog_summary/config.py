from dataclasses import dataclass, field
from typing import FrozenSet

from .errors import ConfigError

ENGINES = ("python", "pandas", "polars", "duckdb")
OUTPUT_FORMATS = ("text", "json")

# Hive writes NULL as \N in delimited text output
DEFAULT_NULL_TOKEN = "\\N"


@dataclass(frozen=True)
class AnalysisConfig:
    delimiter: str = ","
    skip_header: bool = True
    top_n: int = 3
    failure_statuses: FrozenSet[int] = field(default_factory=lambda: frozenset({404, 500}))
    # an IP is suspicious when its failure count is strictly greater than this
    min_failures: int = 3
    engine: str = "python"
    workers: int = 6
    output_format: str = "text"
    null_token: str = DEFAULT_NULL_TOKEN

    def __post_init__(self):
        if len(self.delimiter) != 1:
            raise ConfigError(f"delimiter must be a single character, got {self.delimiter!r}")
        if self.top_n < 0:
            raise ConfigError("top_n must be >= 0")
        if self.min_failures < 0:
            raise ConfigError("min_failures must be >= 0")
        if self.workers < 1:
            raise ConfigError("workers must be >= 1")
        if self.engine not in ENGINES:
            raise ConfigError(f"unknown engine {self.engine!r}, expected one of {', '.join(ENGINES)}")
        if self.output_format not in OUTPUT_FORMATS:
            raise ConfigError(f"unknown output format {self.output_format!r}")
        # accept any iterable of ints from callers
        object.__setattr__(self, "failure_statuses", frozenset(int(s) for s in self.failure_statuses))
