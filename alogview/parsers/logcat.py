"""Logcat line parser."""

from __future__ import annotations

import logging

from ..config import DEFAULT_LOG_LINE_GRAMMAR, LogLineGrammar
from ..exceptions import LogLineParseError
from ..models import LogEntry, LogLevel

logger = logging.getLogger(__name__)


class ThreadTimeLogParser:
    """Parser for the threadtime log format.

    Format: date time pid tid level tag: message
    Example: 10-24 22:14:41.150  123  123 D TestTag1: first test message

    The tag may be missing entirely (``D: message``), in which case the entry
    gets an empty tag.
    """

    def __init__(self, grammar: LogLineGrammar = DEFAULT_LOG_LINE_GRAMMAR) -> None:
        """Initialize the parser.

        Args:
            grammar: Compiled line grammar and session marker prefix.
        """
        self.grammar = grammar

    def is_session_marker(self, line: str) -> bool:
        """Return True for ``--------- beginning of ...`` buffer markers."""
        return line.startswith(self.grammar.session_marker)

    def parse(self, line: str) -> LogEntry:
        """Parse one line.

        Args:
            line: The raw line. A trailing newline is removed and the rest is
                kept as ``LogEntry.raw``.

        Returns:
            A LogEntry object.

        Raises:
            LogLineParseError: If the line does not match the grammar, or its
                pid/tid columns are not integers.
        """
        raw = line.rstrip("\r\n")
        match = self.grammar.pattern.match(raw)
        if not match:
            raise LogLineParseError(raw)

        timestamp, pid_str, tid_str, level_str, tag, message = match.groups()

        try:
            pid = int(pid_str)
            tid = int(tid_str)
        except ValueError as e:
            raise LogLineParseError(raw) from e

        # The grammar only admits V, D, I, W, E and F
        level: LogLevel = level_str  # type: ignore

        return LogEntry(
            raw=raw,
            timestamp=timestamp,
            pid=pid,
            tid=tid,
            level=level,
            tag=tag.strip(),
            message=message,
        )

    def feed(self, line: str) -> LogEntry | None:
        """Parse a line from the log stream, skipping what cannot be shown.

        Session markers are dropped silently. Lines that fail to parse are
        reported as a warning and dropped; the stream carries on.

        Args:
            line: The raw line.

        Returns:
            The parsed entry, or None if the line was skipped.
        """
        if self.is_session_marker(line):
            return None
        try:
            return self.parse(line)
        except LogLineParseError as e:
            logger.warning("%s", e)
            return None
