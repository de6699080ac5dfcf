from .collector import LogcatCollector

__all__ = ["LogcatCollector"]
