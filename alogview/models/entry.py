"""Data models for log entries."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# Type definitions
LogLevel = Literal["V", "D", "I", "W", "E", "F"]


class LogEntry(BaseModel):
    """A structured log entry representing a single line of logcat output.

    Entries are frozen: filters only read them, and assigning to a field
    raises a ``ValidationError``.

    Attributes:
        raw: The original line without its trailing newline, used for display.
        timestamp: The ``MM-DD HH:MM:SS.mmm`` date/time string, kept as text.
        pid: Process ID that generated the log.
        tid: Thread ID that generated the log.
        level: Log severity level. Must be one of:
            - "V": Verbose
            - "D": Debug
            - "I": Info
            - "W": Warning
            - "E": Error
            - "F": Fatal
        tag: The log tag with surrounding whitespace removed. May be empty.
        message: The rest of the line after the tag separator, verbatim.
    """

    model_config = ConfigDict(frozen=True)

    raw: str
    timestamp: str
    pid: int = Field(ge=0)
    tid: int = Field(ge=0)
    level: LogLevel
    tag: str
    message: str
