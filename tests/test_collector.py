"""Tests for the adb logcat collector."""

import logging
from contextlib import aclosing
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from alogview.config import AdbConfig
from alogview.exceptions import CollectorError
from alogview.streams import LogcatCollector

# Fixtures


@pytest.fixture
def mock_process():
    process = MagicMock()
    process.stdout = AsyncMock()
    process.returncode = 0
    process.wait = AsyncMock(return_value=0)
    process.kill = MagicMock()
    return process


@pytest.fixture
def mock_create_subprocess(mock_process):
    with patch("asyncio.create_subprocess_exec", new_callable=AsyncMock) as mock:
        mock.return_value = mock_process
        yield mock


# Tests


@pytest.mark.asyncio
async def test_lines_runs_logcat(mock_create_subprocess, mock_process) -> None:
    """Test the command line and the decoded output."""
    mock_process.stdout.readline.side_effect = [b"first\n", "café\n".encode(), b""]

    collector = LogcatCollector(AdbConfig(adb_path="adb", use_device=True))
    lines = [line async for line in collector.lines()]

    assert lines == ["first\n", "café\n"]
    args = mock_create_subprocess.call_args[0]
    assert args == ("adb", "-d", "logcat")
    mock_process.kill.assert_not_called()


@pytest.mark.asyncio
async def test_lines_replaces_undecodable_bytes(
    mock_create_subprocess, mock_process
) -> None:
    """Test that invalid UTF-8 does not stop the stream."""
    mock_process.stdout.readline.side_effect = [b"bad \xff byte\n", b""]

    lines = [line async for line in LogcatCollector(AdbConfig()).lines()]

    assert lines == ["bad � byte\n"]


@pytest.mark.asyncio
async def test_entries_skips_markers_and_bad_lines(
    mock_create_subprocess, mock_process, caplog
) -> None:
    """Test that markers vanish silently and malformed lines are warned about."""
    mock_process.stdout.readline.side_effect = [
        b"--------- beginning of main\n",
        b"10-24 22:14:41.150 123 123 D TestTag1: first test message\n",
        b"not a log line\n",
        b"10-24 22:14:41.150 456 456 D TestTag2: second test message\n",
        b"",
    ]

    with caplog.at_level(logging.WARNING, logger="alogview"):
        entries = [e async for e in LogcatCollector(AdbConfig()).entries()]

    assert [(e.pid, e.tag) for e in entries] == [(123, "TestTag1"), (456, "TestTag2")]
    assert len(caplog.records) == 1
    assert "not a log line" in caplog.records[0].getMessage()


@pytest.mark.asyncio
async def test_oversized_line_is_skipped(
    mock_create_subprocess, mock_process, caplog
) -> None:
    """Test that a line over the reader limit is warned about and skipped."""
    mock_process.stdout.readline.side_effect = [
        ValueError("Separator is not found, and chunk exceed the limit"),
        b"10-24 22:14:41.150 123 123 D TestTag1: first test message\n",
        b"",
    ]

    with caplog.at_level(logging.WARNING, logger="alogview"):
        entries = [e async for e in LogcatCollector(AdbConfig()).entries()]

    assert [e.message for e in entries] == ["first test message"]
    assert "longer than 1048576 bytes" in caplog.text
    mock_process.kill.assert_not_called()


@pytest.mark.asyncio
async def test_nonzero_exit_raises(mock_create_subprocess, mock_process) -> None:
    """Test that a failing adb is reported after its output is drained."""
    mock_process.stdout.readline.side_effect = [
        b"10-24 22:14:41.150 123 123 D TestTag1: first test message\n",
        b"",
    ]
    mock_process.wait.return_value = 1
    mock_process.returncode = 1

    received = []
    with pytest.raises(CollectorError, match="status 1"):
        async for entry in LogcatCollector(AdbConfig()).entries():
            received.append(entry)

    assert len(received) == 1


@pytest.mark.asyncio
async def test_launch_failure_raises(mock_create_subprocess) -> None:
    """Test that a missing adb executable is fatal."""
    mock_create_subprocess.side_effect = FileNotFoundError(2, "No such file")

    with pytest.raises(CollectorError, match="Failed to run adb"):
        async for _ in LogcatCollector(AdbConfig()).lines():
            pass


@pytest.mark.asyncio
async def test_early_close_kills_adb(mock_create_subprocess, mock_process) -> None:
    """Test that closing the iterator early kills the subprocess."""
    mock_process.returncode = None
    mock_process.stdout.readline.side_effect = [
        b"10-24 22:14:41.150 123 123 D TestTag1: first test message\n",
        b"10-24 22:14:41.150 123 123 D TestTag1: more\n",
    ]

    async with aclosing(LogcatCollector(AdbConfig()).entries()) as entries:
        async for _ in entries:
            break

    mock_process.kill.assert_called_once()
