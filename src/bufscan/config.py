"""ContextVar-based scanner configuration for bufscan.

A Scanner starts from the active default ScanConfig and applies its
options in order. The default is held in a ContextVar, so each thread
(and each asyncio task) can set its own without affecting others.

Usage:
    # Options at construction
    scanner = Scanner(stream, split(scan_words), buffer(bytearray(256), 1 << 20))

    # Defaults for every scanner created in a block
    with scan_config_context(ScanConfig(max_token_size=1 << 20)):
        for text, err in Scanner(stream):
            ...

    # From external configuration
    config = ScanConfig.from_dict({"max_token_size": 1 << 20})

"""

import codecs
from collections.abc import Callable
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, replace
from typing import Iterator

from bufscan.protocols import SplitFunc
from bufscan.splits import scan_lines

# Default upper bound on the scan buffer, and so on token size
MAX_SCAN_TOKEN_SIZE = 64 * 1024

# Capacity of the first allocation when no seed buffer is given
START_BUFFER_SIZE = 4096


@dataclass(frozen=True, slots=True)
class ScanConfig:
    """Immutable scanner configuration.

    Attributes:
        split: Split function (defaults to line splitting)
        initial_buffer: Caller-supplied seed buffer. Its length is the
            initial capacity. A seed passed with the ``buffer()`` option is
            written into until the scanner grows past it; a seed in the
            context default only sets the capacity, since that config is
            shared by every scanner created under it.
        max_token_size: Largest size the scan buffer may grow to. A token
            that does not fit fails the scan with TokenTooLongError.
        encoding: Codec used to turn token bytes into text
        errors: Codec error handler. The default, "surrogateescape",
            keeps arbitrary bytes recoverable via ``text.encode(...)``.

    """

    split: SplitFunc = scan_lines
    initial_buffer: bytearray | None = None
    max_token_size: int = MAX_SCAN_TOKEN_SIZE
    encoding: str = "utf-8"
    errors: str = "surrogateescape"

    def __post_init__(self) -> None:
        if self.max_token_size <= 0:
            raise ValueError(f"max_token_size must be positive, got {self.max_token_size}")
        if self.initial_buffer is not None and not isinstance(self.initial_buffer, bytearray):
            raise TypeError(
                f"initial_buffer must be a bytearray, got {type(self.initial_buffer).__name__}"
            )
        _check_codec(self.encoding, self.errors)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "ScanConfig":
        """Create ScanConfig from dictionary.

        Only includes keys that are valid ScanConfig fields; unknown keys
        are silently ignored.

        Args:
            config_dict: Dictionary with config values. Keys should match
                ScanConfig attribute names.

        Returns:
            New ScanConfig instance with values from dict.

        Example:
            >>> config = ScanConfig.from_dict({
            ...     "max_token_size": 1024,
            ...     "unknown_key": "ignored",
            ... })
            >>> config.max_token_size
            1024

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered)


# An option maps a config to the adjusted config
ScanOption = Callable[[ScanConfig], ScanConfig]


def split(func: SplitFunc) -> ScanOption:
    """Option: use ``func`` instead of line splitting."""
    if not callable(func):
        raise TypeError(f"split function must be callable, got {type(func).__name__}")

    def apply(config: ScanConfig) -> ScanConfig:
        return replace(config, split=func)

    return apply


def buffer(buf: bytearray, max_token_size: int) -> ScanOption:
    """Option: seed buffer and maximum buffer size.

    Args:
        buf: Initial buffer; its length is the initial capacity
        max_token_size: Upper bound on buffer growth
    """

    def apply(config: ScanConfig) -> ScanConfig:
        return replace(config, initial_buffer=buf, max_token_size=max_token_size)

    return apply


def encoding(name: str, errors: str = "surrogateescape") -> ScanOption:
    """Option: codec used to produce token text.

    Raises:
        LookupError: If the codec or the error handler is unknown
    """
    _check_codec(name, errors)

    def apply(config: ScanConfig) -> ScanConfig:
        return replace(config, encoding=name, errors=errors)

    return apply


def apply_options(config: ScanConfig, options: tuple[ScanOption, ...]) -> ScanConfig:
    """Apply ``options`` to ``config`` in order."""
    for option in options:
        config = option(config)
    return config


def _check_codec(name: str, errors: str) -> None:
    """Raise LookupError for an unknown codec or error handler."""
    codecs.lookup(name)
    codecs.lookup_error(errors)


# Module-level default config (reused, never recreated)
_DEFAULT_CONFIG: ScanConfig = ScanConfig()

_scan_config: ContextVar[ScanConfig] = ContextVar(
    "scan_config",
    default=_DEFAULT_CONFIG,
)


def get_scan_config() -> ScanConfig:
    """Get the default configuration for new scanners in this context."""
    return _scan_config.get()


def set_scan_config(config: ScanConfig) -> None:
    """Set the default configuration for new scanners in this context."""
    _scan_config.set(config)


def reset_scan_config() -> None:
    """Reset to the built-in default configuration."""
    _scan_config.set(_DEFAULT_CONFIG)


@contextmanager
def scan_config_context(config: ScanConfig) -> Iterator[None]:
    """Context manager for temporary default changes.

    Example:
        >>> with scan_config_context(ScanConfig(max_token_size=16)):
        ...     get_scan_config().max_token_size
        16

    Restores the previous config even if an exception is raised.
    """
    previous = _scan_config.get()
    _scan_config.set(config)
    try:
        yield
    finally:
        _scan_config.set(previous)


__all__ = [
    "MAX_SCAN_TOKEN_SIZE",
    "START_BUFFER_SIZE",
    "ScanConfig",
    "ScanOption",
    "apply_options",
    "buffer",
    "encoding",
    "get_scan_config",
    "reset_scan_config",
    "scan_config_context",
    "set_scan_config",
    "split",
]
