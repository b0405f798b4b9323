import concurrent.futures
import logging
import time
from dataclasses import dataclass
from typing import Dict, Tuple, TypedDict

from .config import AnalysisConfig
from .engines import create_engine
from .partitions import PartitionIndex
from .records import ParsedBatch, load_batch
from .results import VIEW_NAMES, ResultSet

logger = logging.getLogger(__name__)


class Summary(TypedDict):
    engine: str
    records: int
    malformed: int
    files: int
    elapsed_seconds: float


@dataclass(frozen=True)
class Report:
    summary: Summary
    results: Tuple[ResultSet, ...]

    def __getitem__(self, name: str) -> ResultSet:
        for result in self.results:
            if result.name == name:
                return result
        raise KeyError(name)


def analyze(batch: ParsedBatch, config: AnalysisConfig = AnalysisConfig()) -> Report:
    """Build the partition index once, then compute every view on its own worker thread."""
    start_time = time.time()
    index = PartitionIndex(batch.records)
    engine = create_engine(batch.records, index, config)
    computed: Dict[str, ResultSet] = {}
    try:
        with concurrent.futures.ThreadPoolExecutor(max_workers=config.workers) as executor:
            futures = {executor.submit(view): name for name, view in engine.views().items()}
            for future in concurrent.futures.as_completed(futures):
                name = futures[future]
                computed[name] = future.result()
                logger.info("%s: %d rows", name, len(computed[name]))
    finally:
        engine.close()

    elapsed_time = time.time() - start_time
    summary: Summary = {
        "engine": engine.name,
        "records": len(batch),
        "malformed": batch.malformed,
        "files": batch.files,
        "elapsed_seconds": round(elapsed_time, 4),
    }
    return Report(summary=summary, results=tuple(computed[name] for name in VIEW_NAMES))


def run(source: str, config: AnalysisConfig = AnalysisConfig(), client=None) -> Report:
    batch = load_batch(source, config, client=client)
    return analyze(batch, config)
