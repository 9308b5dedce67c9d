"""Throughput benchmark for the scanner.

Run with:
    python benchmarks/benchmark_scan.py
"""

import io
from time import perf_counter

from bufscan import Scanner, buffer, scan_bytes, scan_lines, scan_words, split


def make_corpus(lines: int = 200_000) -> bytes:
    """Synthetic text with varying line lengths."""
    return b"".join(b"word " * (i % 17) + b"end\n" for i in range(lines))


def bench(name: str, data: bytes, *options) -> None:
    start = perf_counter()
    count = 0
    for _, err in Scanner(io.BytesIO(data), *options):
        if err is not None:
            raise err
        count += 1
    elapsed = perf_counter() - start
    mb = len(data) / (1024 * 1024)
    print(f"{name:<24} {count:>10} tokens  {elapsed * 1000:8.1f} ms  {mb / elapsed:8.1f} MB/s")


def main() -> None:
    data = make_corpus()
    bench("lines", data, split(scan_lines))
    bench("lines (64 KiB seed)", data, buffer(bytearray(64 * 1024), 1 << 20))
    bench("words", data, split(scan_words))
    bench("bytes (first 1 MiB)", data[: 1 << 20], split(scan_bytes))


if __name__ == "__main__":
    main()
