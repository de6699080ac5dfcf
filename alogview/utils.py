"""Utility functions for alogview.

This module provides adb lookup and logging configuration.
"""

from __future__ import annotations

import functools
import logging
import shutil
import sys


@functools.lru_cache(maxsize=1)
def resolve_adb() -> str:
    """Find the adb executable on PATH.

    Callers that want a different adb set the ``ADB`` environment variable
    instead, see `AdbConfig.from_env`.

    Returns:
        Path to the adb executable.

    Raises:
        FileNotFoundError: If adb is not on PATH.
    """
    path = shutil.which("adb")
    if path is None:
        raise FileNotFoundError(
            "Could not find 'adb' in PATH; install platform-tools or set $ADB."
        )
    return path


def enable_debug(level: str | int = "INFO") -> None:
    """Enable diagnostic logging for alogview.

    Configures the 'alogview' logger only; the root logger is left alone.
    Diagnostics go to stderr so they never mix with the rendered log lines
    on stdout.

    Args:
        level: Logging level (e.g., "DEBUG", "WARNING", logging.DEBUG).
    """
    logger = logging.getLogger("alogview")
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter("%(name)s: %(levelname)s: %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
