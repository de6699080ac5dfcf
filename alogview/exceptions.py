"""Exceptions for alogview."""

from __future__ import annotations


class AlogviewError(Exception):
    """Base exception for all alogview errors.

    Catching this exception handles any error raised by the parser, the
    process census, the filters or the log collector.
    """


class ConfigError(AlogviewError):
    """Raised when the adb configuration is unusable.

    Examples are an empty ``ADB`` environment variable, requesting both a
    USB device and an emulator, or an adb executable that cannot be found.
    """


class LogLineParseError(AlogviewError):
    """Raised when a line does not match the threadtime logcat format.

    This error is recoverable: the caller is expected to log a warning,
    discard the line and continue with the next one.
    """

    def __init__(self, line: str) -> None:
        super().__init__(f'line did not match expected format: "{line}"')
        self.line = line


class ProcessListError(AlogviewError):
    """Raised when the process listing cannot be read.

    The package filter cannot be seeded without this snapshot, so the
    error is fatal for the whole run.
    """


class LifecycleGrammarError(AlogviewError):
    """Raised when a matched lifecycle record carries a non-numeric pid.

    The lifecycle grammars only capture digits, so this signals that a
    grammar and its extraction logic have drifted apart.
    """


class CollectorError(AlogviewError):
    """Raised when the ``adb logcat`` process cannot be started or fails."""
