"""Log filtering logic."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from re import Match

from .config import DEFAULT_LIFECYCLE_GRAMMAR, LifecycleGrammar
from .exceptions import LifecycleGrammarError
from .models import LogEntry

logger = logging.getLogger(__name__)

CensusFunc = Callable[[frozenset[str]], Iterable[int]]


def _to_set(values: str | Iterable[str]) -> frozenset[str]:
    if isinstance(values, str):
        return frozenset({values})
    return frozenset(values)


class StreamFilter(ABC):
    """A single stage of the filter pipeline.

    A filter decides, one entry at a time and in stream order, whether an
    entry is passed on. Implementations may update private state while
    deciding, so the same instance must not be shared between pipelines.
    """

    @abstractmethod
    def check(self, entry: LogEntry) -> bool:
        """Decide whether the entry is passed on.

        Args:
            entry: The log entry to check.

        Returns:
            True if the entry passes, False if it is dropped.
        """
        ...

    def __call__(self, entry: LogEntry) -> bool:
        return self.check(entry)


class TagFilter(StreamFilter):
    """Passes entries whose tag is one of the accepted tags."""

    def __init__(self, tags: str | Iterable[str]) -> None:
        self.tags = _to_set(tags)

    def check(self, entry: LogEntry) -> bool:
        return entry.tag in self.tags

    def __repr__(self) -> str:
        return f"TagFilter({sorted(self.tags)!r})"


class PackageFilter(StreamFilter):
    """Passes entries logged by processes of the tracked packages.

    The filter keeps a set of pids believed to belong to the tracked packages.
    It is seeded once, from a process census, and afterwards follows the
    activity manager's lifecycle announcements found in the stream itself:

    - ``Start proc PID:PACKAGE/USER`` for a tracked package adds PID.
    - ``Process PACKAGE (pid PID) has died: ...`` and
      ``Killing PID:PACKAGE/USER ...: ...`` remove PID when either the
      package is tracked or PID is already tracked.

    Announcements that change the pid set are passed on as well. The
    grammars are tried in the order start, died, killed and the first one
    that matches decides; an announcement that matches but concerns nobody
    we track is then judged like any other entry, by its own pid.

    Examples:
        >>> f = PackageFilter(["com.example.app"], pids={1234})
        >>> f.check(entry)
    """

    def __init__(
        self,
        packages: str | Iterable[str],
        pids: Iterable[int] | None = None,
        grammar: LifecycleGrammar = DEFAULT_LIFECYCLE_GRAMMAR,
    ) -> None:
        """Initialize the filter.

        Args:
            packages: Package name(s) to track.
            pids: Initial pids of the tracked packages, usually from a census.
            grammar: Supervisor tag and lifecycle grammars.
        """
        self.packages = _to_set(packages)
        self.pids: set[int] = set(pids) if pids is not None else set()
        self.grammar = grammar

    @classmethod
    def from_census(
        cls,
        packages: str | Iterable[str],
        census_func: CensusFunc,
        grammar: LifecycleGrammar = DEFAULT_LIFECYCLE_GRAMMAR,
    ) -> PackageFilter:
        """Create a filter seeded with a snapshot of the running processes.

        Args:
            packages: Package name(s) to track.
            census_func: Called once with the package names; returns the pids
                currently running under those names.
            grammar: Supervisor tag and lifecycle grammars.

        Returns:
            The seeded filter.
        """
        tracked = _to_set(packages)
        pids = set(census_func(tracked))
        logger.debug(
            "Seeded package filter for %s with pids %s", sorted(tracked), sorted(pids)
        )
        return cls(tracked, pids=pids, grammar=grammar)

    def check(self, entry: LogEntry) -> bool:
        if entry.tag == self.grammar.supervisor_tag and entry.level == "I":
            if self._check_lifecycle(entry.message):
                return True
        return entry.pid in self.pids

    def _check_lifecycle(self, message: str) -> bool | None:
        """Apply the lifecycle grammars to a supervisor message.

        Returns:
            True if the message was a lifecycle announcement about a tracked
            process (the pid set has been updated), False if it matched a
            grammar but concerns nobody tracked, None if no grammar matched.
        """
        match = self.grammar.start.search(message)
        if match:
            pid = _group_pid(match, 1)
            if match.group(2) in self.packages:
                self.pids.add(pid)
                logger.debug("Tracking pid %d of %s", pid, match.group(2))
                return True
            return False

        match = self.grammar.died.search(message)
        if match:
            return self._forget(match.group(1), _group_pid(match, 2))

        match = self.grammar.killed.search(message)
        if match:
            return self._forget(match.group(2), _group_pid(match, 1))

        return None

    def _forget(self, package: str, pid: int) -> bool:
        if package in self.packages or pid in self.pids:
            self.pids.discard(pid)
            logger.debug("Forgetting pid %d of %s", pid, package)
            return True
        return False

    def __repr__(self) -> str:
        return f"PackageFilter({sorted(self.packages)!r}, pids={sorted(self.pids)!r})"


def _group_pid(match: Match[str], group: int) -> int:
    text = match.group(group)
    try:
        return int(text)
    except ValueError as e:
        raise LifecycleGrammarError(
            f"lifecycle grammar {match.re.pattern!r} captured non-numeric pid {text!r}"
        ) from e
