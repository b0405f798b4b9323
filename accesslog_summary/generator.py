import concurrent.futures
import datetime
import logging
import pathlib
import random
import uuid
from typing import Callable, Dict, Iterator, List, Tuple

import boto3

logger = logging.getLogger(__name__)

HEADER = "ip,timestamp,url,status,user_agent"

WORKLOADS: Dict[str, Tuple[int, int]] = {
    # prefix : (files, rows per file)
    "tiny": (1, 100),
    "small": (4, 2_500),
    "medium": (16, 10_000),
    "large": (64, 50_000),
}

IPS = [f"192.168.1.{n}" for n in range(1, 21)] + ["10.0.0.5", "10.0.0.9", "172.16.4.2"]
URLS = ["/home", "/login", "/products", "/cart", "/checkout", "/about", "/api/orders", "/admin"]
STATUSES = [200, 200, 200, 200, 201, 301, 302, 400, 403, 404, 404, 500]
USER_AGENTS = [
    "Mozilla/5.0 Chrome/90.0",
    "Mozilla/5.0 Firefox/88.0",
    "Mozilla/5.0 Safari/14.1",
    "curl/7.68.0",
    "python-requests/2.25.1",
]


class _LocalWriter:
    def __init__(self, dir: pathlib.Path):
        self._dir = dir
        self._dir.mkdir(parents=True, exist_ok=True)

    def __call__(self, lines: List[str]) -> str:
        name = f"{uuid.uuid4()}.csv"
        with open(self._dir / name, "w", encoding="utf-8") as file:
            file.write("\n".join([HEADER, *lines]) + "\n")
        logger.info("wrote %s", self._dir / name)
        return name


class _S3Writer:
    def __init__(self, bucket: str, prefix: str, client=None):
        self._bucket = bucket
        self._prefix = prefix
        self._s3 = client or boto3.client("s3")

    def __call__(self, lines: List[str]) -> str:
        payload = "\n".join([HEADER, *lines]) + "\n"
        key = f"{self._prefix}/{uuid.uuid4()}.csv"
        self._s3.put_object(Bucket=self._bucket, Key=key, Body=payload.encode("utf-8"))
        logger.info("wrote s3://%s/%s", self._bucket, key)
        return key


def _corrupt(line: str, rng: random.Random) -> str:
    ip, timestamp, url, _, user_agent = line.split(",", 4)
    if rng.random() < 0.5:
        return ",".join([ip, timestamp, url, "", user_agent])
    return ",".join([ip, timestamp, url])


def generate_lines(seed: int = 42, corrupt_rate: float = 0.01) -> Iterator[str]:
    """Endless stream of access-log lines with increasing timestamps."""
    rng = random.Random(seed)
    now = datetime.datetime(2024, 2, 1, 10, 0, 0)
    while True:
        now += datetime.timedelta(seconds=rng.randint(0, 20))
        line = ",".join([
            rng.choice(IPS),
            now.strftime("%Y-%m-%d %H:%M:%S"),
            rng.choice(URLS),
            str(rng.choice(STATUSES)),
            rng.choice(USER_AGENTS),
        ])
        if rng.random() < corrupt_rate:
            line = _corrupt(line, rng)
        yield line


def main(num_files: int, rows_per_file: int, writer: Callable[[List[str]], str],
         seed: int = 42, corrupt_rate: float = 0.01, max_workers: int = 20) -> List[str]:
    lines = generate_lines(seed=seed, corrupt_rate=corrupt_rate)
    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = []
        for _ in range(num_files):
            batch = [next(lines) for _ in range(rows_per_file)]
            futures.append(executor.submit(writer, batch))
        return [future.result() for future in futures]


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Generate access-log batches into S3 or a local directory.")
    parser.add_argument("bucket_or_dir", help="S3 bucket name or local directory path.")
    parser.add_argument("--is-bucket", action="store_true", help="Set to write to S3. Omit to write to local directory.")
    parser.add_argument("--only-size", type=str, choices=list(WORKLOADS.keys()), help="Optional: run only one workload (e.g., small).")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--corrupt-rate", type=float, default=0.01, help="Share of rows written with a missing status or truncated.")

    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    selected = {args.only_size: WORKLOADS[args.only_size]} if args.only_size else WORKLOADS
    for prefix, (files_to_create, rows_per_file) in selected.items():
        if args.is_bucket:
            print(f"\n--- Generating {files_to_create} files x {rows_per_file} rows into s3://{args.bucket_or_dir}/{prefix}/ ---")
            writer = _S3Writer(args.bucket_or_dir, prefix)
        else:
            base_dir = pathlib.Path(args.bucket_or_dir)
            print(f"\n--- Generating {files_to_create} files x {rows_per_file} rows into local path {base_dir / prefix}/ ---")
            writer = _LocalWriter(base_dir / prefix)
        main(files_to_create, rows_per_file, writer, seed=args.seed, corrupt_rate=args.corrupt_rate)
