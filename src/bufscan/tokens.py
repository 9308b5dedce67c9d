"""Result types exchanged between split functions, scanner and consumer.

A split function answers every call with a SplitResult. The tagged
status keeps four outcomes apart that a single error channel would blur:

- CONTINUE with no token: need more data (or skip ``advance`` bytes)
- CONTINUE with a token: one token is ready
- FINAL: the final-token sentinel, stop after (optionally) emitting
- ERROR: terminate the scan with ``error``

The consumer receives ScanResult pairs.

Thread Safety:
SplitResult and ScanResult are immutable and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import NamedTuple


class SplitStatus(Enum):
    """Status tag of a SplitResult."""

    CONTINUE = auto()  # Token ready, or need more data
    FINAL = auto()  # Last token; end the scan cleanly
    ERROR = auto()  # Terminal failure


@dataclass(frozen=True, slots=True)
class SplitResult:
    """Answer of one split function call.

    Attributes:
        advance: Bytes of input to consume
        token: Token bytes, or None for "no token". ``b""`` is a real,
            empty token.
        status: SplitStatus tag
        error: Exception to surface when status is ERROR

    Usage:
            >>> SplitResult.emit(4, b"abc")
            SplitResult(advance=4, token=b'abc', status=<SplitStatus.CONTINUE: 1>, error=None)
            >>> SplitResult.need_more().token is None
            True

    """

    advance: int = 0
    token: bytes | None = None
    status: SplitStatus = SplitStatus.CONTINUE
    error: BaseException | None = None

    @classmethod
    def need_more(cls) -> SplitResult:
        """Request more data without consuming anything."""
        return _NEED_MORE

    @classmethod
    def emit(cls, advance: int, token: bytes) -> SplitResult:
        """Emit ``token`` and consume ``advance`` bytes."""
        return cls(advance, token)

    @classmethod
    def skip(cls, advance: int) -> SplitResult:
        """Consume ``advance`` bytes without emitting a token."""
        return cls(advance)

    @classmethod
    def final(cls, token: bytes | None, advance: int = 0) -> SplitResult:
        """Final-token sentinel.

        Args:
            token: Last token to emit, or None to stop without emitting
            advance: Bytes consumed (validated, otherwise unused)
        """
        return cls(advance, token, SplitStatus.FINAL)

    @classmethod
    def fail(cls, error: BaseException) -> SplitResult:
        """Terminate the scan with ``error``."""
        return cls(0, None, SplitStatus.ERROR, error)


_NEED_MORE = SplitResult()


class ScanResult(NamedTuple):
    """One item of a scan: a token's text or the terminal error.

    Unpacks as ``text, err``. When ``error`` is set, ``text`` is empty and
    the result is the last one of the scan.
    """

    text: str
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        """True when this result carries a token."""
        return self.error is None
