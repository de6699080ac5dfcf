"""One-shot snapshot of the processes running on the device."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterable

from .config import DEFAULT_PROCESS_LIST_GRAMMAR, AdbConfig, ProcessListGrammar
from .exceptions import ProcessListError

logger = logging.getLogger(__name__)


def census(
    lines: Iterable[str],
    packages: Iterable[str],
    grammar: ProcessListGrammar = DEFAULT_PROCESS_LIST_GRAMMAR,
) -> set[int]:
    """Collect the pids of running processes named after a tracked package.

    Rows that do not match the grammar, such as the header row, are skipped.

    Args:
        lines: Lines of ``ps`` output.
        packages: Package names to look for. Names must match exactly.
        grammar: The ``ps`` row grammar.

    Returns:
        The set of matching pids.
    """
    wanted = set(packages)
    pids: set[int] = set()

    for line in lines:
        match = grammar.pattern.search(line.rstrip("\r\n"))
        if match is None:
            continue

        pid_str, name = match.groups()
        if name in wanted:
            pids.add(int(pid_str))

    return pids


def take_census(
    adb: AdbConfig,
    packages: Iterable[str],
    grammar: ProcessListGrammar = DEFAULT_PROCESS_LIST_GRAMMAR,
) -> set[int]:
    """Run ``adb shell ps`` and return the pids of the tracked packages.

    Args:
        adb: adb invocation settings.
        packages: Package names to look for.
        grammar: The ``ps`` row grammar.

    Returns:
        The set of matching pids.

    Raises:
        ProcessListError: If adb cannot be started or exits with an error.
    """
    cmd = adb.ps_command()
    logger.debug("Taking process census: %s", " ".join(cmd))

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=True,
        )
    except OSError as e:
        raise ProcessListError(f"Failed to run {cmd[0]}: {e}") from e
    except subprocess.CalledProcessError as e:
        raise ProcessListError(
            f"Failed to list processes (exit status {e.returncode}): "
            f"{(e.stderr or '').strip()}"
        ) from e

    pids = census(result.stdout.splitlines(), packages, grammar)
    if not pids:
        logger.warning("no running processes found for the given package(s)")
    return pids
