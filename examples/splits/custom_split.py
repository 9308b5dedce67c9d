"""Custom split functions: validation, empty final fields, sentinel words.

Run:
    python examples/splits/custom_split.py
"""

import io

from bufscan import Scanner, SplitResult, delimited, scan_words, split, stop_on, validated


def int32(token: bytes) -> None:
    """Reject tokens that are not 32-bit decimal integers."""
    value = int(token)
    if not -(2**31) <= value < 2**31:
        raise ValueError(f"parsing {token.decode()!r}: value out of range")


def commas(data: bytes, at_eof: bool) -> SplitResult:
    """Comma-separated fields; the last field may be empty."""
    i = data.find(b",")
    if i >= 0:
        return SplitResult.emit(i + 1, data[:i])
    if not at_eof:
        return SplitResult.need_more()
    # The final token may be the empty string
    return SplitResult.final(data, len(data))


print("== validated words")
for text, err in Scanner(io.BytesIO(b"1234 5678 1234567901234567890"), split(validated(scan_words, int32))):
    if err is not None:
        print(f"Invalid input: {err}")
        break
    print(text)

print("== empty final field")
print(" ".join(repr(text) for text, _ in Scanner(io.BytesIO(b"1,2,3,4,"), split(commas))))

print("== stop word")
for text, _ in Scanner(io.BytesIO(b"1,2,STOP,4,"), split(stop_on(delimited(b","), b"STOP"))):
    print(f"Got a token {text!r}")
