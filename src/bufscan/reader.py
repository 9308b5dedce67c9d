"""Scan buffer and buffered source reader.

ScanBuffer owns the bytes read so far and implements the growth policy:
compact when the consumed prefix is worth reclaiming, otherwise double
the capacity up to a hard maximum. BufferedSourceReader fills the free
tail of a ScanBuffer from the source, one read call per request.

Buffer layout:

    0           start             end            capacity
    |  consumed  |   unconsumed    |     free      |

Invariant: capacity >= end >= start >= 0.

Thread Safety:
Both classes are owned by a single Scanner and are not shared.

"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

from bufscan.config import START_BUFFER_SIZE
from bufscan.errors import BadReadCountError, NoProgressError, TokenTooLongError
from bufscan.utils.logger import get_logger

if TYPE_CHECKING:
    from bufscan.protocols import Source

logger = get_logger(__name__)

# Consecutive reads returning no data before giving up
MAX_EMPTY_READS = 100

# Largest single read. Bounds the unconsumed region, which every split
# call copies, no matter how large the buffer is.
MAX_READ_SIZE = START_BUFFER_SIZE


class ScanBuffer:
    """Growable byte region holding unconsumed input.

    Usage:
            >>> buf = ScanBuffer(bytearray(8))
            >>> buf.capacity, buf.start, buf.end
            (8, 0, 0)

    """

    __slots__ = ("data", "start", "end")

    def __init__(self, data: bytearray | None = None) -> None:
        """Initialize with an optional seed buffer.

        Args:
            data: Caller-supplied storage; its length is the initial
                capacity. Empty when omitted; the first grow allocates.
        """
        self.data: bytearray = data if data is not None else bytearray()
        self.start: int = 0
        self.end: int = 0

    @property
    def capacity(self) -> int:
        return len(self.data)

    @property
    def unconsumed(self) -> int:
        return self.end - self.start

    @property
    def free(self) -> int:
        return len(self.data) - self.end

    def pending(self) -> bytes:
        """Copy of the unconsumed region.

        Reads are capped at MAX_READ_SIZE, so this stays close to the
        current token's size even in a large buffer.
        """
        return bytes(self.data[self.start : self.end])

    def consume(self, count: int) -> None:
        """Mark ``count`` unconsumed bytes as consumed."""
        self.start += count

    def compact(self) -> bool:
        """Move unconsumed bytes to the front.

        Only done when the buffer is full or more than half of it is
        consumed prefix.

        Returns:
            True if bytes were moved.
        """
        start = self.start
        if start == 0:
            return False
        capacity = len(self.data)
        if self.end != capacity and start <= capacity // 2:
            return False
        size = self.end - start
        self.data[0:size] = self.data[start : self.end]
        self.start = 0
        self.end = size
        return True

    def grow(self, max_size: int) -> int:
        """Double the capacity, capped at ``max_size``.

        Unconsumed bytes are copied to the front of the new storage.

        Returns:
            New capacity.

        Raises:
            TokenTooLongError: If the capacity already reached max_size.
        """
        capacity = len(self.data)
        if capacity >= max_size:
            raise TokenTooLongError(max_size)
        new_size = min(capacity * 2 or START_BUFFER_SIZE, max_size)
        size = self.end - self.start
        new_data = bytearray(new_size)
        new_data[0:size] = self.data[self.start : self.end]
        self.data = new_data
        self.start = 0
        self.end = size
        return new_size

    def clear(self) -> None:
        """Drop all buffered bytes and free the storage."""
        self.data = bytearray()
        self.start = 0
        self.end = 0


class FillResult(NamedTuple):
    """Outcome of one fill request."""

    count: int
    eof: bool


class BufferedSourceReader:
    """Pulls bytes from a source into a ScanBuffer on demand.

    The source is borrowed: the reader never closes it, never seeks, and
    stops calling it once it has reported end of stream.

    Thread Safety:
        Owned by one Scanner. Not safe for concurrent use.

    """

    __slots__ = ("_source", "_readinto", "_read", "_empty_reads", "eof", "reads", "bytes_read")

    def __init__(self, source: Source) -> None:
        """Initialize reader.

        Args:
            source: Binary stream with ``readinto`` or ``read``

        Raises:
            TypeError: If source has neither method
        """
        self._source = source
        self._readinto = getattr(source, "readinto", None)
        self._read = getattr(source, "read", None)
        if self._readinto is None and self._read is None:
            raise TypeError(f"source must have readinto() or read(), got {type(source).__name__}")
        self._empty_reads = 0
        self.eof = False
        self.reads = 0
        self.bytes_read = 0

    def fill(self, buffer: ScanBuffer) -> FillResult:
        """Append newly read bytes at ``buffer.end``.

        Makes exactly one read call of at most MAX_READ_SIZE bytes. A
        source that has no data yet (a non-blocking stream returning None)
        gives ``FillResult(0, False)``; that is not end of stream.

        Returns:
            Bytes appended and whether the source is exhausted.

        Raises:
            BadReadCountError: Source reported an impossible count.
            NoProgressError: Too many consecutive reads without data.
            Exception: Anything the source raises, unchanged.
        """
        if self.eof:
            return FillResult(0, True)
        free = min(buffer.free, MAX_READ_SIZE)
        count = self._read_into(buffer, free)
        self.reads += 1

        if count is None:
            self._empty_reads += 1
            if self._empty_reads >= MAX_EMPTY_READS:
                raise NoProgressError(f"{MAX_EMPTY_READS} consecutive reads returned no data")
            return FillResult(0, False)
        if count < 0 or count > free:
            raise BadReadCountError(count, free)

        self._empty_reads = 0
        if count == 0:
            self.eof = True
            logger.debug("Source exhausted after %d bytes", self.bytes_read)
            return FillResult(0, True)
        buffer.end += count
        self.bytes_read += count
        return FillResult(count, False)

    def _read_into(self, buffer: ScanBuffer, free: int) -> int | None:
        """Read into the free tail of ``buffer`` without moving ``end``."""
        end = buffer.end
        if self._readinto is not None:
            with memoryview(buffer.data) as whole, whole[end : end + free] as view:
                return self._readinto(view)

        chunk = self._read(free)
        if chunk is None:
            return None
        if not isinstance(chunk, (bytes, bytearray, memoryview)):
            raise TypeError(f"source must be binary, read() returned {type(chunk).__name__}")
        count = len(chunk)
        if count <= free:
            buffer.data[end : end + count] = chunk
        return count
