"""Protocols for bufscan.

Defines the contracts for byte sources and split functions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from bufscan.tokens import SplitResult


@runtime_checkable
class ReadIntoSource(Protocol):
    """Binary source that fills a caller-provided buffer.

    ``io.BufferedReader``, ``io.BytesIO`` and ``sys.stdin.buffer`` all
    implement this.
    """

    def readinto(self, buffer: memoryview, /) -> int | None:
        """Read into ``buffer``.

        Returns:
            Bytes written, 0 at end of stream, or None when a
            non-blocking source has no data available yet.
        """
        ...


@runtime_checkable
class ReadSource(Protocol):
    """Binary source that returns up to ``size`` bytes per call."""

    def read(self, size: int, /) -> bytes | None:
        """Read up to ``size`` bytes.

        Returns:
            Bytes read, ``b""`` at end of stream, or None when a
            non-blocking source has no data available yet.
        """
        ...


Source = ReadIntoSource | ReadSource


class SplitFunc(Protocol):
    """Strategy deciding where the next token ends.

    Called with the unconsumed bytes and the end-of-stream flag. Must be
    deterministic for identical arguments. May raise instead of returning
    ``SplitResult.fail``; both terminate the scan with that error.

    Thread Safety:
        Implementations should be stateless. The scanner never calls a
        split function from more than one thread at a time.

    """

    def __call__(self, data: bytes, at_eof: bool, /) -> SplitResult: ...
