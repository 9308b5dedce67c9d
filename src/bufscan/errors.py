"""Exception classes for bufscan.

Scanning errors are surfaced as the last ``(text, error)`` result of a
scan rather than raised out of the iteration. The classes here are the
errors the engine itself produces; errors from the source or from a
split function are surfaced unchanged.
"""

from __future__ import annotations


class BufscanError(Exception):
    """Base exception for all bufscan errors.

    Subclass this for specific error categories.
    """

    pass


class TokenTooLongError(BufscanError):
    """A token did not fit in the largest allowed scan buffer.

    Produced when the buffer is full, has already reached the configured
    maximum, and the split function still has not found a token boundary.
    """

    def __init__(self, max_token_size: int) -> None:
        """Initialize with the limit that was hit.

        Args:
            max_token_size: Configured maximum buffer size in bytes
        """
        self.max_token_size = max_token_size
        super().__init__(f"token too long (max {max_token_size} bytes)")


class SplitContractError(BufscanError):
    """A split function returned a result that breaks its contract.

    This signals a programming error in the split function, not bad input.
    """

    def __init__(self, message: str, advance: int | None, available: int) -> None:
        """Initialize contract error.

        Args:
            message: Description of the violation
            advance: Advance count the split function returned, or None
                when the result carried no usable count
            available: Number of unconsumed bytes it was given
        """
        self.advance = advance
        self.available = available
        if advance is None:
            super().__init__(f"{message} (available={available})")
        else:
            super().__init__(f"{message} (advance={advance}, available={available})")


class NegativeAdvanceError(SplitContractError):
    """Split function returned a negative advance count."""

    def __init__(self, advance: int, available: int) -> None:
        super().__init__("split function returned negative advance count", advance, available)


class AdvanceTooFarError(SplitContractError):
    """Split function advanced beyond the data it was given."""

    def __init__(self, advance: int, available: int) -> None:
        super().__init__("split function returned advance count beyond input", advance, available)


class InvalidSplitResultError(SplitContractError):
    """Split function returned a value of the wrong shape.

    Covers anything other than a SplitResult, a non-integer advance, a
    token that is neither None nor bytes, and an unknown status.
    """

    def __init__(self, detail: str, available: int, advance: int | None = None) -> None:
        super().__init__(f"split function returned an invalid result: {detail}", advance, available)


class NoProgressError(BufscanError):
    """Repeated calls made no progress.

    Raised by the reader after too many consecutive empty reads, and
    produced by the scanner when a split function keeps returning empty
    tokens at end of stream without advancing.
    """

    pass


class BadReadCountError(BufscanError):
    """The source reported an impossible number of bytes read."""

    def __init__(self, count: int, capacity: int) -> None:
        """Initialize with the reported and allowed counts.

        Args:
            count: Byte count the source reported
            capacity: Free space that was offered to the source
        """
        self.count = count
        self.capacity = capacity
        super().__init__(f"source returned invalid read count {count} (capacity {capacity})")


class ScannerStateError(BufscanError):
    """Scanner used in a way its lifecycle does not allow.

    Raised, not surfaced, when a scanner is iterated a second time.
    Invalid options fail earlier, when built, with TypeError, ValueError
    or LookupError.
    """

    pass
