"""Built-in split functions.

Each function follows the SplitFunc contract: it receives the unconsumed
bytes and the end-of-stream flag and returns a SplitResult. They are
stateless and can be shared between scanners.

The factories at the bottom build split functions from other split
functions (field separators, sentinel words, per-token validation).

Usage:
    >>> import io
    >>> from bufscan import Scanner, split
    >>> from bufscan.splits import scan_words
    >>> [t for t, _ in Scanner(io.BytesIO(b"a b  c"), split(scan_words))]
    ['a', 'b', 'c']

"""

from __future__ import annotations

from collections.abc import Callable

from bufscan.protocols import SplitFunc
from bufscan.tokens import SplitResult, SplitStatus

# Replacement character emitted for invalid UTF-8 by scan_runes
RUNE_ERROR = 0xFFFD
RUNE_ERROR_BYTES = "\ufffd".encode("utf-8")

# Code points above Latin-1 that count as whitespace for scan_words
_WIDE_SPACES = frozenset({0x1680, 0x2028, 0x2029, 0x202F, 0x205F, 0x3000})
_NARROW_SPACES = frozenset(b" \t\n\v\f\r") | {0x85, 0xA0}


def _drop_cr(data: bytes) -> bytes:
    """Drop one trailing carriage return."""
    if data and data[-1] == 0x0D:
        return data[:-1]
    return data


def _rune_width(lead: int) -> int:
    """Encoded length implied by a UTF-8 lead byte, 0 if it cannot lead."""
    if lead < 0x80:
        return 1
    if 0xC2 <= lead <= 0xDF:
        return 2
    if 0xE0 <= lead <= 0xEF:
        return 3
    if 0xF0 <= lead <= 0xF4:
        return 4
    return 0


def _full_rune(data: bytes) -> bool:
    """Whether ``data`` starts with a complete (possibly invalid) encoding."""
    width = _rune_width(data[0])
    if width == 0:
        return True
    for k in range(1, min(width, len(data))):
        if not 0x80 <= data[k] <= 0xBF:
            return True
    return len(data) >= width


def decode_rune(data: bytes, pos: int = 0) -> tuple[int, int]:
    """Decode the UTF-8 rune starting at ``pos``.

    Returns:
        ``(code_point, width)``. Invalid or truncated encodings decode as
        ``(RUNE_ERROR, 1)``.
    """
    lead = data[pos]
    if lead < 0x80:
        return lead, 1
    width = _rune_width(lead)
    if width == 0 or pos + width > len(data):
        return RUNE_ERROR, 1
    try:
        char = data[pos : pos + width].decode("utf-8")
    except UnicodeDecodeError:
        return RUNE_ERROR, 1
    return ord(char), width


def is_space(rune: int) -> bool:
    """Report whether ``rune`` separates words for scan_words."""
    if rune <= 0xFF:
        return rune in _NARROW_SPACES
    if 0x2000 <= rune <= 0x200A:
        return True
    return rune in _WIDE_SPACES


# =============================================================================
# Split functions
# =============================================================================


def scan_lines(data: bytes, at_eof: bool) -> SplitResult:
    """Split on ``\\n``, dropping one ``\\r`` before it.

    The last line may lack a terminator; at end of stream a non-empty
    remainder is delivered as the final token. An empty remainder ends
    the scan without a token.
    """
    if at_eof and not data:
        return SplitResult.need_more()
    i = data.find(b"\n")
    if i >= 0:
        return SplitResult.emit(i + 1, _drop_cr(data[:i]))
    if at_eof:
        return SplitResult.final(_drop_cr(data), len(data))
    return SplitResult.need_more()


def scan_words(data: bytes, at_eof: bool) -> SplitResult:
    """Split on runs of Unicode whitespace. Never returns an empty token."""
    size = len(data)
    start = 0
    while start < size:
        rune, width = decode_rune(data, start)
        if not is_space(rune):
            break
        start += width

    i = start
    while i < size:
        rune, width = decode_rune(data, i)
        if is_space(rune):
            return SplitResult.emit(i + width, data[start:i])
        i += width

    if at_eof and size > start:
        return SplitResult.emit(size, data[start:])
    # Skip the leading whitespace, wait for the rest of the word
    return SplitResult.skip(start)


def scan_runes(data: bytes, at_eof: bool) -> SplitResult:
    """One UTF-8 encoded rune per token.

    Invalid encodings produce the replacement character and advance one
    byte, so the output is always valid UTF-8.
    """
    if not data:
        return SplitResult.need_more()
    if data[0] < 0x80:
        return SplitResult.emit(1, data[:1])

    _, width = decode_rune(data)
    if width > 1:
        return SplitResult.emit(width, data[:width])
    if not at_eof and not _full_rune(data):
        return SplitResult.need_more()
    return SplitResult.emit(1, RUNE_ERROR_BYTES)


def scan_bytes(data: bytes, at_eof: bool) -> SplitResult:
    """One byte per token."""
    if not data:
        return SplitResult.need_more()
    return SplitResult.emit(1, data[:1])


# =============================================================================
# Factories
# =============================================================================


def delimited(sep: bytes, *, keep_trailing_empty: bool = True) -> SplitFunc:
    """Split fields separated by ``sep``.

    At end of stream the remainder is the final token, including an empty
    one after a trailing separator (``b"1,2,"`` gives ``1``, ``2``, ``""``).

    Args:
        sep: Non-empty separator
        keep_trailing_empty: Deliver the empty field after a trailing
            separator (and for empty input). When False an empty
            remainder ends the scan without a token.

    Raises:
        ValueError: If sep is empty
    """
    if not sep:
        raise ValueError("separator must not be empty")

    def split_delimited(data: bytes, at_eof: bool) -> SplitResult:
        i = data.find(sep)
        if i >= 0:
            return SplitResult.emit(i + len(sep), data[:i])
        if not at_eof:
            return SplitResult.need_more()
        if not data and not keep_trailing_empty:
            return SplitResult.final(None)
        return SplitResult.final(data, len(data))

    return split_delimited


def stop_on(inner: SplitFunc, sentinel: bytes) -> SplitFunc:
    """End the scan cleanly when ``inner`` produces ``sentinel``.

    The sentinel token itself is not emitted and nothing after it is read.
    """

    def split_until(data: bytes, at_eof: bool) -> SplitResult:
        result = inner(data, at_eof)
        if result.status is not SplitStatus.ERROR and result.token == sentinel:
            return SplitResult.final(None, result.advance)
        return result

    return split_until


def validated(inner: SplitFunc, check: Callable[[bytes], object]) -> SplitFunc:
    """Run ``check`` on every token ``inner`` produces.

    Exceptions raised by ``check`` terminate the scan: tokens before the
    failing one are delivered, then the exception, then nothing else.
    """

    def split_checked(data: bytes, at_eof: bool) -> SplitResult:
        result = inner(data, at_eof)
        if result.token is not None and result.status is not SplitStatus.ERROR:
            check(result.token)
        return result

    return split_checked


__all__ = [
    "RUNE_ERROR",
    "RUNE_ERROR_BYTES",
    "decode_rune",
    "delimited",
    "is_space",
    "scan_bytes",
    "scan_lines",
    "scan_runes",
    "scan_words",
    "stop_on",
    "validated",
]
