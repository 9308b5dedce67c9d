"""Error-path tests.

Every terminal condition must surface as exactly one error result, last,
paired with empty text, and nothing may be produced after it.
"""

import io

import pytest

from bufscan import (
    AdvanceTooFarError,
    BadReadCountError,
    BufscanError,
    InvalidSplitResultError,
    NegativeAdvanceError,
    NoProgressError,
    Scanner,
    ScannerState,
    ScannerStateError,
    ScanResult,
    SplitContractError,
    SplitResult,
    TokenTooLongError,
    buffer,
    scan_words,
    split,
)

# =========================================================================
# Helpers
# =========================================================================


class FailAfter:
    """Source that serves ``data`` in chunks, then raises ``error``."""

    def __init__(self, data: bytes, error: BaseException, chunk: int = 4096) -> None:
        self._data = data
        self._error = error
        self._chunk = chunk
        self.reads = 0

    def read(self, size: int) -> bytes:
        self.reads += 1
        if not self._data:
            raise self._error
        size = min(size, self._chunk)
        chunk, self._data = self._data[:size], self._data[size:]
        return chunk


class NeverReady:
    """Non-blocking source that never has data."""

    def read(self, size: int) -> None:
        return None


def _assert_terminal(results: list[ScanResult], error_type: type[BaseException]) -> BaseException:
    assert results, "expected at least the error result"
    *tokens, last = results
    assert all(r.error is None for r in tokens)
    assert last.text == ""
    assert isinstance(last.error, error_type)
    return last.error


# =========================================================================
# Error construction and formatting
# =========================================================================


class TestErrorFormatting:
    def test_token_too_long(self) -> None:
        err = TokenTooLongError(64)
        assert "64" in str(err)
        assert isinstance(err, BufscanError)

    def test_negative_advance(self) -> None:
        err = NegativeAdvanceError(-1, 3)
        assert "negative" in str(err)
        assert (err.advance, err.available) == (-1, 3)
        assert isinstance(err, SplitContractError)

    def test_advance_too_far(self) -> None:
        err = AdvanceTooFarError(9, 3)
        assert "advance=9" in str(err)
        assert "available=3" in str(err)
        assert isinstance(err, SplitContractError)

    def test_invalid_result_without_advance(self) -> None:
        err = InvalidSplitResultError("expected SplitResult, got tuple", 3)
        assert "available=3" in str(err)
        assert "advance=" not in str(err)
        assert err.advance is None
        assert isinstance(err, SplitContractError)

    def test_bad_read_count(self) -> None:
        err = BadReadCountError(-2, 10)
        assert "-2" in str(err)
        assert isinstance(err, BufscanError)


# =========================================================================
# Source errors
# =========================================================================


class TestReadErrors:
    def test_error_before_any_data(self) -> None:
        error = OSError("unplugged")
        results = list(Scanner(FailAfter(b"", error)))
        assert results == [ScanResult("", error)]

    def test_buffered_tokens_delivered_first(self) -> None:
        error = OSError("connection reset")
        scanner = Scanner(FailAfter(b"a\nb\npartial", error))
        results = list(scanner)

        assert [r.text for r in results[:-1]] == ["a", "b", "partial"]
        assert _assert_terminal(results, OSError) is error
        assert scanner.state is ScannerState.ERRORED

    def test_error_after_words(self) -> None:
        error = ConnectionError("gone")
        results = list(Scanner(FailAfter(b"one two", error), split(scan_words)))
        assert [r.text for r in results[:-1]] == ["one", "two"]
        assert _assert_terminal(results, ConnectionError) is error

    def test_no_reads_after_error(self) -> None:
        source = FailAfter(b"x", OSError("boom"))
        scanner = Scanner(source)
        list(scanner)
        reads = source.reads
        assert not scanner.scan()
        assert source.reads == reads

    def test_never_ready_source(self) -> None:
        results = list(Scanner(NeverReady()))
        _assert_terminal(results, NoProgressError)

    def test_keyboard_interrupt_not_captured(self) -> None:
        class Interrupted:
            def read(self, size: int) -> bytes:
                raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            list(Scanner(Interrupted()))


# =========================================================================
# Split contract violations
# =========================================================================


class TestSplitContract:
    def test_negative_advance(self) -> None:
        results = list(Scanner(io.BytesIO(b"abc"), split(lambda data, at_eof: SplitResult(-1))))
        err = _assert_terminal(results, NegativeAdvanceError)
        assert err.available == 3

    def test_advance_too_far(self) -> None:
        def greedy(data: bytes, at_eof: bool) -> SplitResult:
            return SplitResult.emit(len(data) + 1, data)

        results = list(Scanner(io.BytesIO(b"abc"), split(greedy)))
        err = _assert_terminal(results, AdvanceTooFarError)
        assert (err.advance, err.available) == (4, 3)

    def test_final_token_advance_checked(self) -> None:
        def bad_final(data: bytes, at_eof: bool) -> SplitResult:
            if not at_eof:
                return SplitResult.need_more()
            return SplitResult.final(data, len(data) + 10)

        results = list(Scanner(io.BytesIO(b"abc"), split(bad_final)))
        assert len(results) == 1
        _assert_terminal(results, AdvanceTooFarError)

    def test_error_status_without_error(self) -> None:
        from bufscan.tokens import SplitStatus

        def vague(data: bytes, at_eof: bool) -> SplitResult:
            return SplitResult(0, None, SplitStatus.ERROR)

        results = list(Scanner(io.BytesIO(b"abc"), split(vague)))
        _assert_terminal(results, BufscanError)

    def test_tuple_result(self) -> None:
        def go_style(data: bytes, at_eof: bool) -> tuple:
            return len(data), data, None

        results = list(Scanner(io.BytesIO(b"abc"), split(go_style)))  # type: ignore[arg-type]
        assert len(results) == 1
        err = _assert_terminal(results, InvalidSplitResultError)
        assert "tuple" in str(err)

    def test_str_token(self) -> None:
        def text_token(data: bytes, at_eof: bool) -> SplitResult:
            return SplitResult.emit(len(data), data.decode())  # type: ignore[arg-type]

        results = list(Scanner(io.BytesIO(b"abc"), split(text_token)))
        assert len(results) == 1
        err = _assert_terminal(results, InvalidSplitResultError)
        assert err.advance == 3

    def test_non_int_advance(self) -> None:
        def float_advance(data: bytes, at_eof: bool) -> SplitResult:
            return SplitResult.emit(float(len(data)), data)  # type: ignore[arg-type]

        results = list(Scanner(io.BytesIO(b"abc"), split(float_advance)))
        assert len(results) == 1
        _assert_terminal(results, InvalidSplitResultError)

    def test_invalid_final_token(self) -> None:
        def bad_final(data: bytes, at_eof: bool) -> SplitResult:
            return SplitResult.final(list(data), len(data))  # type: ignore[arg-type]

        results = list(Scanner(io.BytesIO(b"abc"), split(bad_final)))
        assert len(results) == 1
        _assert_terminal(results, InvalidSplitResultError)

    def test_endless_empty_tokens_at_eof(self) -> None:
        def empty_forever(data: bytes, at_eof: bool) -> SplitResult:
            if not at_eof:
                return SplitResult.need_more()
            return SplitResult.emit(0, b"")

        results = list(Scanner(io.BytesIO(b""), split(empty_forever)))
        _assert_terminal(results, NoProgressError)
        assert len(results) == 101


# =========================================================================
# Lifecycle misuse
# =========================================================================


class TestLifecycle:
    def test_reiteration_raises(self) -> None:
        scanner = Scanner(io.BytesIO(b"a\n"))
        iter(scanner)
        with pytest.raises(ScannerStateError):
            list(scanner)

    def test_split_option_requires_callable(self) -> None:
        with pytest.raises(TypeError):
            split(b",")  # type: ignore[arg-type]

    def test_too_long_then_stops(self) -> None:
        scanner = Scanner(io.BytesIO(b"short\n" + b"y" * 40 + b"\nlater\n"), buffer(bytearray(8), 16))
        results = list(scanner)
        assert results[0] == ScanResult("short")
        _assert_terminal(results, TokenTooLongError)
        assert "later" not in [r.text for r in results]
