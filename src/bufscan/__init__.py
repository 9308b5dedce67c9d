"""
bufscan — Incremental tokenization of byte streams

Reads a binary stream a buffer at a time and hands out tokens (lines,
words, runes, delimited fields, or anything a split function decides)
without loading the whole input. Zero runtime dependencies.

Quick Start:
    >>> import io
    >>> from bufscan import Scanner
    >>> for text, err in Scanner(io.BytesIO(b"golang\\npython\\njava\\n")):
    ...     if err is not None:
    ...         raise err
    ...     print(text)
    golang
    python
    java

Custom Split Functions:
    >>> from bufscan import Scanner, SplitResult, split
    >>> def commas(data, at_eof):
    ...     i = data.find(b",")
    ...     if i >= 0:
    ...         return SplitResult.emit(i + 1, data[:i])
    ...     if not at_eof:
    ...         return SplitResult.need_more()
    ...     return SplitResult.final(data, len(data))
    >>> [t for t, _ in Scanner(io.BytesIO(b"1,2,3,4,"), split(commas))]
    ['1', '2', '3', '4', '']

Reading standard input:
    >>> import sys
    >>> for line, err in Scanner(sys.stdin.buffer):  # doctest: +SKIP
    ...     ...
"""

from bufscan.config import (
    MAX_SCAN_TOKEN_SIZE,
    START_BUFFER_SIZE,
    ScanConfig,
    ScanOption,
    buffer,
    encoding,
    get_scan_config,
    reset_scan_config,
    scan_config_context,
    set_scan_config,
    split,
)
from bufscan.errors import (
    AdvanceTooFarError,
    BadReadCountError,
    BufscanError,
    InvalidSplitResultError,
    NegativeAdvanceError,
    NoProgressError,
    ScannerStateError,
    SplitContractError,
    TokenTooLongError,
)
from bufscan.profiling import ScanAccumulator, get_scan_accumulator, profiled_scan
from bufscan.protocols import Source, SplitFunc
from bufscan.reader import BufferedSourceReader, FillResult, ScanBuffer
from bufscan.scanner import Scanner, ScannerState, new_scanner
from bufscan.splits import (
    delimited,
    scan_bytes,
    scan_lines,
    scan_runes,
    scan_words,
    stop_on,
    validated,
)
from bufscan.tokens import ScanResult, SplitResult, SplitStatus

__version__ = "0.1.0"

__all__ = [
    # Scanner
    "Scanner",
    "ScannerState",
    "new_scanner",
    "ScanResult",
    "SplitResult",
    "SplitStatus",
    # Options and configuration
    "ScanConfig",
    "ScanOption",
    "MAX_SCAN_TOKEN_SIZE",
    "START_BUFFER_SIZE",
    "buffer",
    "encoding",
    "split",
    "get_scan_config",
    "set_scan_config",
    "reset_scan_config",
    "scan_config_context",
    # Split functions
    "scan_lines",
    "scan_words",
    "scan_runes",
    "scan_bytes",
    "delimited",
    "stop_on",
    "validated",
    # Reader
    "BufferedSourceReader",
    "FillResult",
    "ScanBuffer",
    # Protocols
    "Source",
    "SplitFunc",
    # Profiling
    "ScanAccumulator",
    "get_scan_accumulator",
    "profiled_scan",
    # Errors
    "BufscanError",
    "TokenTooLongError",
    "SplitContractError",
    "NegativeAdvanceError",
    "AdvanceTooFarError",
    "InvalidSplitResultError",
    "NoProgressError",
    "BadReadCountError",
    "ScannerStateError",
]
