"""alogview package.

This package follows ``adb logcat`` output and narrows it down to the lines
logged by a set of application packages and/or carrying a set of tags. Pids
of the tracked packages are learned from a process snapshot taken at start
and then from the activity manager's start/died/killed announcements found
in the log stream itself, so restarted apps stay visible.

Quick Start:
    ```python
    import asyncio
    from functools import partial

    from alogview import (
        AdbConfig,
        LogcatCollector,
        Pipeline,
        TerminalRenderer,
        build_filter_chain,
        take_census,
    )

    adb = AdbConfig.from_env()
    filters = build_filter_chain(
        tags=["MyTag"],
        packages=["com.example.app"],
        census_func=partial(take_census, adb),
    )
    asyncio.run(
        Pipeline(filters).run(LogcatCollector(adb).entries(), TerminalRenderer())
    )
    ```
"""

__version__ = "1.0.0"

from .census import census, take_census
from .config import AdbConfig, LifecycleGrammar, LogLineGrammar, ProcessListGrammar
from .exceptions import (
    AlogviewError,
    CollectorError,
    ConfigError,
    LifecycleGrammarError,
    LogLineParseError,
    ProcessListError,
)
from .filters import PackageFilter, StreamFilter, TagFilter
from .models import LogEntry
from .parsers import ThreadTimeLogParser
from .pipeline import Pipeline, build_filter_chain, filter_entries
from .render import TerminalRenderer, color_for_level
from .streams import LogcatCollector
from .utils import enable_debug, resolve_adb

__all__ = [
    "LogEntry",
    "ThreadTimeLogParser",
    "census",
    "take_census",
    "StreamFilter",
    "TagFilter",
    "PackageFilter",
    "Pipeline",
    "build_filter_chain",
    "filter_entries",
    "LogcatCollector",
    "TerminalRenderer",
    "color_for_level",
    "AdbConfig",
    "LogLineGrammar",
    "ProcessListGrammar",
    "LifecycleGrammar",
    "resolve_adb",
    "enable_debug",
    "AlogviewError",
    "CollectorError",
    "ConfigError",
    "LifecycleGrammarError",
    "LogLineParseError",
    "ProcessListError",
]
