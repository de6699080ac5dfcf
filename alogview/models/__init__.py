from .entry import LogEntry, LogLevel

__all__ = ["LogEntry", "LogLevel"]
