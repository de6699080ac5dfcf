from .logcat import ThreadTimeLogParser

__all__ = ["ThreadTimeLogParser"]
