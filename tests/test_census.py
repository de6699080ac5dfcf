"""Tests for the process census."""

import logging
import subprocess

import pytest

from alogview.census import census, take_census
from alogview.config import AdbConfig
from alogview.exceptions import ProcessListError

PS_OUTPUT = """\
USER           PID  PPID     VSZ    RSS WCHAN            ADDR S NAME
root             1     0   31340   2456 SyS_epoll_wait      0 S init
system         612     1 1462536 131932 SyS_epoll_wait      0 S system_server
u0_a52        3204   411 1281672  80232 SyS_epoll_wait      0 S com.example.test
u0_a52        3215   411 1281672  80232 SyS_epoll_wait      0 S com.example.test:remote
u0_a60        4100   411 1281672  80232 SyS_epoll_wait      0 S com.example.other
u0_a61        4200   411 1281672  80232 SyS_epoll_wait      0 S my app name
garbage line that is not a process row
u0_a52        5001   411 1281672  80232 SyS_epoll_wait      0 S com.example.test
"""


def test_census_collects_tracked_pids() -> None:
    """Test that only pids of tracked packages are returned."""
    pids = census(PS_OUTPUT.splitlines(), {"com.example.test"})
    assert pids == {3204, 5001}


def test_census_exact_name_match() -> None:
    """Test that sub-process names are not treated as the package."""
    pids = census(PS_OUTPUT.splitlines(), {"com.example.test:remote"})
    assert pids == {3215}


def test_census_name_with_spaces() -> None:
    """Test that the name column runs to the end of the line."""
    pids = census(PS_OUTPUT.splitlines(), {"my app name"})
    assert pids == {4200}


def test_census_multiple_packages() -> None:
    """Test tracking more than one package."""
    pids = census(PS_OUTPUT.splitlines(), ["com.example.test", "com.example.other"])
    assert pids == {3204, 4100, 5001}


def test_census_skips_unmatched_lines() -> None:
    """Test that header and malformed rows are ignored."""
    lines = ["USER PID PPID VSZ RSS WCHAN ADDR S NAME", "", "junk"]
    assert census(lines, {"NAME"}) == set()


def test_census_handles_crlf() -> None:
    """Test that the Windows line endings of adb shell are removed."""
    lines = ["u0_a52  3204  411 1281672 80232 SyS_epoll_wait 0 S com.example.test\r\n"]
    assert census(lines, {"com.example.test"}) == {3204}


def test_census_no_packages() -> None:
    """Test that an empty package set yields no pids."""
    assert census(PS_OUTPUT.splitlines(), set()) == set()


def test_take_census_runs_ps(mocker) -> None:
    """Test that take_census runs adb shell ps with the device selectors."""
    mock_run = mocker.patch("subprocess.run")
    mock_run.return_value.stdout = PS_OUTPUT

    adb = AdbConfig(adb_path="adb", serial="emulator-5554")
    pids = take_census(adb, {"com.example.test"})

    assert pids == {3204, 5001}
    args = mock_run.call_args[0][0]
    assert args == ["adb", "-s", "emulator-5554", "shell", "ps"]


def test_take_census_warns_when_nothing_found(mocker, caplog) -> None:
    """Test the warning when no tracked package is running."""
    mock_run = mocker.patch("subprocess.run")
    mock_run.return_value.stdout = PS_OUTPUT

    with caplog.at_level(logging.WARNING, logger="alogview"):
        pids = take_census(AdbConfig(), {"com.not.running"})

    assert pids == set()
    assert "no running processes" in caplog.text


def test_take_census_command_failure(mocker) -> None:
    """Test that a failing adb is fatal."""
    mock_run = mocker.patch("subprocess.run")
    mock_run.side_effect = subprocess.CalledProcessError(
        1, ["adb"], stderr="error: no devices/emulators found"
    )

    with pytest.raises(ProcessListError, match="no devices"):
        take_census(AdbConfig(), {"com.example.test"})


def test_take_census_launch_failure(mocker) -> None:
    """Test that a missing adb executable is fatal."""
    mock_run = mocker.patch("subprocess.run")
    mock_run.side_effect = FileNotFoundError(2, "No such file or directory")

    with pytest.raises(ProcessListError, match="Failed to run adb"):
        take_census(AdbConfig(), {"com.example.test"})
