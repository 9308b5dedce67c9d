"""Count words on standard input without loading it into memory.

Run:
    cat big.txt | python examples/stdin/word_count.py
"""

import logging
import sys

from bufscan import Scanner, scan_words, split
from bufscan.profiling import profiled_scan

logging.basicConfig(level=logging.DEBUG if "-v" in sys.argv else logging.WARNING)

with profiled_scan() as metrics:
    count = 0
    for result in Scanner(sys.stdin.buffer, split(scan_words)):
        if not result.ok:
            print(f"reading standard input: {result.error}", file=sys.stderr)
            sys.exit(1)
        count += 1

print(count)
print(metrics.summary(), file=sys.stderr)
