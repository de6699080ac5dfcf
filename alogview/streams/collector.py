"""Async log collection from an ``adb logcat`` subprocess."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import aclosing

from ..config import AdbConfig
from ..exceptions import CollectorError
from ..models import LogEntry
from ..parsers import ThreadTimeLogParser

# Configure module logger
logger = logging.getLogger(__name__)

# Longest line accepted from adb; asyncio's default of 64 KiB is too small for
# some stack dumps
LINE_LIMIT = 1024 * 1024


class LogcatCollector:
    """Runs ``adb logcat`` and turns its output into log entries.

    The subprocess is started lazily when iteration begins and killed when
    the iterator is closed early. adb's stderr is passed through to ours.

    Usage:
        ```python
        collector = LogcatCollector(AdbConfig.from_env())
        async with aclosing(collector.entries()) as entries:
            async for entry in entries:
                print(entry.raw)
        ```
    """

    def __init__(
        self,
        adb: AdbConfig,
        parser: ThreadTimeLogParser | None = None,
    ) -> None:
        """Initialize the collector.

        Args:
            adb: adb invocation settings.
            parser: Parser for the threadtime lines. Defaults to one using the
                default grammar.
        """
        self.adb = adb
        self.parser = parser or ThreadTimeLogParser()
        self._process: asyncio.subprocess.Process | None = None

    async def lines(self) -> AsyncIterator[str]:
        """Yield the decoded output lines of ``adb logcat`` until it exits.

        Raises:
            CollectorError: If adb cannot be started or exits with a non-zero
                status.
        """
        cmd = self.adb.logcat_command()
        logger.debug("Starting log collection: %s", " ".join(cmd))

        try:
            self._process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                limit=LINE_LIMIT,
            )
        except OSError as e:
            raise CollectorError(f"Failed to run {cmd[0]}: {e}") from e

        process = self._process
        try:
            if process.stdout is None:
                raise CollectorError("adb logcat has no stdout pipe")

            while True:
                try:
                    line_bytes = await process.stdout.readline()
                except ValueError:
                    # The reader drops what it buffered; the rest of the
                    # line arrives as a fragment and fails to parse
                    logger.warning(
                        "Skipping logcat line longer than %d bytes", LINE_LIMIT
                    )
                    continue
                if not line_bytes:
                    # EOF
                    break
                yield line_bytes.decode("utf-8", errors="replace")

            returncode = await process.wait()
            if returncode != 0:
                raise CollectorError(f"adb logcat exited with status {returncode}")
        finally:
            if process.returncode is None:
                try:
                    process.kill()
                except ProcessLookupError:
                    pass

    async def entries(self) -> AsyncIterator[LogEntry]:
        """Yield parsed entries, skipping session markers and malformed lines.

        Raises:
            CollectorError: As for `lines`.
        """
        async with aclosing(self.lines()) as lines:
            async for line in lines:
                entry = self.parser.feed(line)
                if entry is not None:
                    yield entry
