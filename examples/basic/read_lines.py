"""Read lines from a byte stream — default split, zero config."""

import io

from bufscan import Scanner

for text, err in Scanner(io.BytesIO(b"golang\npython\njava\n")):
    if err is not None:
        raise SystemExit(f"reading input: {err}")
    print(text)
