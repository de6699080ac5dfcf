"""Terminal output of log entries."""

from __future__ import annotations

import sys
from enum import IntEnum
from typing import TextIO

from .models import LogEntry, LogLevel

RESET = "\033[0m"


class Color(IntEnum):
    """ANSI foreground color numbers."""

    BLACK = 0
    RED = 1
    GREEN = 2
    YELLOW = 3
    BLUE = 4
    MAGENTA = 5
    CYAN = 6
    WHITE = 7


LEVEL_COLORS: dict[str, Color] = {
    "V": Color.WHITE,
    "D": Color.CYAN,
    "I": Color.GREEN,
    "W": Color.YELLOW,
    "E": Color.RED,
    "F": Color.MAGENTA,
}


def termfg(color: Color) -> str:
    return f"\033[3{int(color)}m"


def color_for_level(level: LogLevel | str) -> str:
    """Return the escape sequence for a log level, or "" if it has no color."""
    color = LEVEL_COLORS.get(level)
    return termfg(color) if color is not None else ""


class TerminalRenderer:
    """Writes the raw line of every entry, colored by its level."""

    def __init__(self, stream: TextIO | None = None, color: bool = True) -> None:
        self.stream = stream or sys.stdout
        self.color = color

    def __call__(self, entry: LogEntry) -> None:
        if self.color:
            self.stream.write(f"{color_for_level(entry.level)}{entry.raw}{RESET}\n")
        else:
            self.stream.write(f"{entry.raw}\n")
        self.stream.flush()
