"""Incremental token scanner.

Drives the read/split loop over a ScanBuffer:

1. Ask the split function for a token in the unconsumed bytes
2. If it needs more, make room (compact or grow) and read once
3. Repeat until a token, the final-token sentinel, an error, or EOF

Work happens only when the consumer asks for the next token. A single
read may return more bytes than the current token needs; the surplus
stays buffered for the next request and is never read twice.

Thread Safety:
Scanner instances are single-use and single-consumer. Create one per
source. All state is instance-local; no shared mutable state.

"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum, auto
from typing import TYPE_CHECKING

from bufscan.config import ScanOption, apply_options, get_scan_config
from bufscan.errors import (
    AdvanceTooFarError,
    BufscanError,
    InvalidSplitResultError,
    NegativeAdvanceError,
    NoProgressError,
    ScannerStateError,
    TokenTooLongError,
)
from bufscan.profiling import get_scan_accumulator
from bufscan.reader import BufferedSourceReader, ScanBuffer
from bufscan.tokens import ScanResult, SplitResult, SplitStatus
from bufscan.utils.logger import get_logger

if TYPE_CHECKING:
    from bufscan.protocols import Source

logger = get_logger(__name__)

# Consecutive empty tokens at EOF without advancing before giving up
MAX_EMPTY_TOKENS = 100


class ScannerState(Enum):
    """Scanner lifecycle.

    - READY: more tokens may follow
    - DONE: ended cleanly (EOF, final-token sentinel, or closed)
    - ERRORED: ended with a terminal error

    """

    READY = auto()
    DONE = auto()
    ERRORED = auto()


class Scanner:
    """Pull-based tokenizer over a binary stream.

    Two ways to consume it. Iterate it once for ``(text, error)`` pairs:

            >>> import io
            >>> for text, err in Scanner(io.BytesIO(b"golang\\npython\\n")):
            ...     print(text)
            golang
            python

    Or drive the cursor directly:

            >>> s = Scanner(io.BytesIO(b"a\\nb"))
            >>> while s.scan():
            ...     s.token
            b'a'
            b'b'
            >>> s.err is None
            True

    At most one error is surfaced, always last, paired with empty text.
    Errors from the source and from the split function come through
    unchanged.

    Thread Safety:
        Not safe for concurrent use. Drain from one flow of control.

    """

    __slots__ = (
        "_config",
        "_split",
        "_max_token_size",
        "_buffer",
        "_reader",
        "_token",
        "_err",
        "_read_err",  # Source error waiting for the final EOF split call
        "_empties",
        "_state",
        "_iterated",
        "_acc",
    )

    def __init__(self, source: Source, *options: ScanOption) -> None:
        """Initialize scanner.

        Args:
            source: Binary stream with ``readinto`` or ``read``; borrowed,
                never closed
            *options: Options applied in order to the context default
                config (``split(...)``, ``buffer(...)``, ``encoding(...)``)
        """
        default = get_scan_config()
        config = apply_options(default, options)
        seed = config.initial_buffer
        if seed is not None and seed is default.initial_buffer:
            # Context defaults are shared; only the seed's capacity carries over
            seed = bytearray(len(seed))
        self._config = config
        self._split = config.split
        self._max_token_size = config.max_token_size
        self._buffer = ScanBuffer(seed)
        self._reader = BufferedSourceReader(source)
        self._token: bytes | None = None
        self._err: BaseException | None = None
        self._read_err: BaseException | None = None
        self._empties = 0
        self._state = ScannerState.READY
        self._iterated = False

        self._acc = get_scan_accumulator()
        if self._acc is not None:
            self._acc.scanners += 1

    # =========================================================================
    # Low-level API
    # =========================================================================

    @property
    def state(self) -> ScannerState:
        return self._state

    @property
    def token(self) -> bytes | None:
        """Bytes of the most recent token, or None."""
        return self._token

    @property
    def text(self) -> str:
        """Most recent token decoded with the configured codec."""
        if self._token is None:
            return ""
        return self._token.decode(self._config.encoding, self._config.errors)

    @property
    def err(self) -> BaseException | None:
        """Terminal error, or None if the scan ended cleanly (or has not ended)."""
        return self._err

    @property
    def reads(self) -> int:
        """Read calls made against the source so far."""
        return self._reader.reads

    def scan(self) -> bool:
        """Advance to the next token.

        Returns:
            True when a token is available in ``token``/``text``. False
            when the scan has ended; ``err`` then tells whether it failed.
        """
        if self._state is not ScannerState.READY:
            return False
        buf = self._buffer
        while True:
            at_eof = self._reader.eof or self._read_err is not None
            if buf.unconsumed > 0 or at_eof:
                result = self._call_split(at_eof)
                if result is None:
                    return False
                if result.status is SplitStatus.FINAL:
                    return self._final(result)
                if result.token is not None:
                    return self._emit(result.token, result.advance, at_eof)
                if result.advance > 0 and buf.unconsumed > 0:
                    continue
                if at_eof:
                    return self._finish()

            try:
                self._make_room()
            except TokenTooLongError as exc:
                return self._fail(exc)
            self._fill()

    def close(self) -> None:
        """Stop scanning and release the buffer.

        Never reads from the source. The source itself is left open.
        """
        if self._state is ScannerState.READY:
            self._state = ScannerState.DONE
        self._buffer.clear()

    # =========================================================================
    # Iteration API
    # =========================================================================

    def __iter__(self) -> Iterator[ScanResult]:
        """Iterate ``ScanResult`` pairs. Allowed once per scanner.

        Raises:
            ScannerStateError: If the scanner was already iterated
        """
        if self._iterated:
            raise ScannerStateError("scanner cursor already consumed; create a new Scanner")
        self._iterated = True
        return self._results()

    def _results(self) -> Iterator[ScanResult]:
        try:
            while self.scan():
                try:
                    text = self.text
                except (UnicodeDecodeError, LookupError) as exc:
                    self._fail(exc)
                    break
                yield ScanResult(text)
            if self._err is not None:
                yield ScanResult("", self._err)
        finally:
            self.close()

    def __enter__(self) -> Scanner:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # =========================================================================
    # Loop steps
    # =========================================================================

    def _call_split(self, at_eof: bool) -> SplitResult | None:
        """Run the split function and check its answer.

        Returns:
            The validated result, or None after failing the scan.
        """
        data = self._buffer.pending()
        try:
            result = self._split(data, at_eof)
        except Exception as exc:
            self._fail(exc)
            return None

        error = _check_result(result, len(data))
        if error is not None:
            self._fail(error)
            return None

        self._buffer.consume(result.advance)
        return result

    def _emit(self, token: bytes, advance: int, at_eof: bool) -> bool:
        if not at_eof or advance > 0:
            self._empties = 0
        else:
            self._empties += 1
            if self._empties > MAX_EMPTY_TOKENS:
                return self._fail(
                    NoProgressError(f"{MAX_EMPTY_TOKENS} empty tokens at end of stream without progress")
                )
        self._token = token
        if self._acc is not None:
            self._acc.tokens += 1
        return True

    def _final(self, result: SplitResult) -> bool:
        """Handle the final-token sentinel: emit its token (if any), then stop.

        A pending read error still ends the scan, after the final token.
        """
        self._buffer.clear()
        if self._read_err is not None:
            self._fail(self._read_err)
        else:
            self._state = ScannerState.DONE
        self._token = result.token
        if result.token is None:
            logger.debug("Scan ended by final-token sentinel without a token")
            return False
        if self._acc is not None:
            self._acc.tokens += 1
        return True

    def _finish(self) -> bool:
        """End of data with no further token."""
        self._token = None
        if self._read_err is not None:
            return self._fail(self._read_err)
        self._state = ScannerState.DONE
        self._buffer.clear()
        return False

    def _fail(self, error: BaseException) -> bool:
        logger.debug("Scan failed: %s", error)
        self._err = error
        self._token = None
        self._state = ScannerState.ERRORED
        self._buffer.clear()
        if self._acc is not None:
            self._acc.errors += 1
        return False

    def _make_room(self) -> None:
        """Ensure the buffer has free space for the next read.

        Raises:
            TokenTooLongError: If growing would exceed max_token_size
        """
        buf = self._buffer
        buf.compact()
        if buf.free > 0:
            return
        old = buf.capacity
        new = buf.grow(self._max_token_size)
        logger.debug("Grew scan buffer %d -> %d bytes", old, new)
        if self._acc is not None:
            if old == 0:
                self._acc.record_alloc(new)
            else:
                self._acc.record_grow(new)

    def _fill(self) -> None:
        """Read until bytes arrive, the source ends, or it fails.

        Source errors are recorded, not raised: the split function still
        gets one end-of-stream call over what is buffered.
        """
        while True:
            try:
                count, eof = self._reader.fill(self._buffer)
            except Exception as exc:
                logger.debug("Read failed: %s", exc)
                self._read_err = exc
                return
            if self._acc is not None:
                self._acc.record_read(count)
            if count > 0 or eof:
                return

def _check_result(result: object, available: int) -> BaseException | None:
    """Return the contract violation in a split result, if any."""
    if not isinstance(result, SplitResult):
        return InvalidSplitResultError(f"expected SplitResult, got {type(result).__name__}", available)
    if not isinstance(result.status, SplitStatus):
        return InvalidSplitResultError(f"unknown status {result.status!r}", available)
    if result.status is SplitStatus.ERROR:
        return result.error or BufscanError("split function returned ERROR without an error")
    advance = result.advance
    if type(advance) is not int:
        return InvalidSplitResultError(f"advance must be int, got {type(advance).__name__}", available)
    if advance < 0:
        return NegativeAdvanceError(advance, available)
    if advance > available:
        return AdvanceTooFarError(advance, available)
    if result.token is not None and not isinstance(result.token, bytes):
        return InvalidSplitResultError(
            f"token must be bytes or None, got {type(result.token).__name__}", available, advance
        )
    return None


def new_scanner(source: Source, *options: ScanOption) -> Iterator[ScanResult]:
    """Create a Scanner and return its ``(text, error)`` iterator.

    Example:
        >>> import io
        >>> list(new_scanner(io.BytesIO(b"x\\ny\\n")))
        [ScanResult(text='x', error=None), ScanResult(text='y', error=None)]
    """
    return iter(Scanner(source, *options))
