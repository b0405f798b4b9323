import argparse
import logging
import sys
import time

from .config import DEFAULT_NULL_TOKEN, ENGINES, OUTPUT_FORMATS, AnalysisConfig
from .errors import AccessLogError
from .exporter import ResultExporter, sink_for
from .runner import run

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Summarize a batch of web-server access logs.")
    parser.add_argument("input", type=str, help="Log file, directory of log files, or s3:// prefix (e.g., s3://my-bucket/logs)")
    parser.add_argument("--output", type=str, help="Directory or s3:// prefix to export the result sets to.")
    parser.add_argument("--engine", choices=ENGINES, default="python", help="Engine that computes the views.")
    parser.add_argument("--delimiter", default=",", help="Field delimiter of the input lines.")
    parser.add_argument("--no-header", action="store_true", help="Input files have no header line.")
    parser.add_argument("--top-n", type=int, default=3, help="Number of most visited pages to report.")
    parser.add_argument(
        "--failure-status",
        type=int,
        action="append",
        dest="failure_statuses",
        help="Status counted as a failure for suspicious-IP detection (repeatable, default: 404 and 500).",
    )
    parser.add_argument("--min-failures", type=int, default=3, help="Report IPs with strictly more failures than this.")
    parser.add_argument("--workers", type=int, default=6, help="Views computed in parallel.")
    parser.add_argument("--format", choices=OUTPUT_FORMATS, default="text", dest="output_format")
    parser.add_argument("--null-token", default=DEFAULT_NULL_TOKEN, help="Text written for NULL values in text output.")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def config_from_args(args: argparse.Namespace) -> AnalysisConfig:
    return AnalysisConfig(
        delimiter=args.delimiter,
        skip_header=not args.no_header,
        top_n=args.top_n,
        failure_statuses=frozenset(args.failure_statuses or (404, 500)),
        min_failures=args.min_failures,
        engine=args.engine,
        workers=args.workers,
        output_format=args.output_format,
        null_token=args.null_token,
    )


def print_report(report) -> None:
    print("\n--- RESULTS ---")
    summary = report.summary
    print(f"Engine: {summary['engine']}")
    print(f"Records: {summary['records']} ({summary['malformed']} malformed) from {summary['files']} file(s)")
    for result in report.results:
        print(f"\n{result.name} ({', '.join(result.columns)}):")
        for row in result.rows:
            print("  " + "\t".join("NULL" if value is None else str(value) for value in row))
    print("---------------")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    start_time = time.time()
    try:
        config = config_from_args(args)
        report = run(args.input, config)
        if args.output:
            exporter = ResultExporter(
                sink_for(args.output),
                fmt=config.output_format,
                delimiter=config.delimiter,
                null_token=config.null_token,
            )
            exporter.export_all(report.results)
    except AccessLogError as exc:
        logger.error("%s", exc)
        return 1
    elapsed_time = time.time() - start_time

    print_report(report)
    print(f"Execution Time (Wall Clock): {elapsed_time:.4f} seconds")
    return 0


if __name__ == "__main__":
    sys.exit(main())
