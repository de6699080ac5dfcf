"""Filter pipeline composition.

A pipeline connects a source of log entries, any number of filters and a
sink. Every stage runs as its own asyncio task and hands entries to the next
stage through a queue holding at most one entry, so a stage takes one entry,
decides, passes on at most one entry and only then asks for the next one.
Entries leave the pipeline in the order they entered it.

Usage:
    ```python
    filters = build_filter_chain(tags=["MyTag"], packages=["com.example.app"],
                                 census_func=my_census)
    await Pipeline(filters).run(collector.entries(), renderer)
    ```
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import AsyncIterable, Awaitable, Callable, Iterable, Iterator
from typing import Any

from .filters import CensusFunc, PackageFilter, StreamFilter, TagFilter, _to_set
from .models import LogEntry

logger = logging.getLogger(__name__)

Sink = Callable[[LogEntry], Awaitable[None] | None]

# Relayed after the last entry so every stage drains and exits
_END: Any = object()


def build_filter_chain(
    tags: str | Iterable[str] | None = None,
    packages: str | Iterable[str] | None = None,
    census_func: CensusFunc | None = None,
) -> list[StreamFilter]:
    """Assemble the filters requested on the command line.

    The order is fixed: the tag filter comes first, then the package filter.
    Either is omitted when nothing was requested for it; with neither, the
    chain is empty and every entry is passed through.

    Args:
        tags: Accepted tag(s). A single string is one tag.
        packages: Tracked package name(s).
        census_func: Seeds the package filter; required when packages are given.

    Returns:
        The ordered list of filters.

    Raises:
        ValueError: If packages are given without a census function.
    """
    filters: list[StreamFilter] = []

    tag_set = _to_set(tags or ())
    if tag_set:
        filters.append(TagFilter(tag_set))

    package_set = _to_set(packages or ())
    if package_set:
        if census_func is None:
            raise ValueError("a census function is required to filter by package")
        filters.append(PackageFilter.from_census(package_set, census_func))

    logger.debug("Filter chain: %s", filters)
    return filters


def filter_entries(
    entries: Iterable[LogEntry], filters: Iterable[StreamFilter]
) -> Iterator[LogEntry]:
    """Apply a filter chain to an in-memory sequence of entries.

    Each entry travels through every stage before the next entry is read,
    which is the same sequencing the asynchronous pipeline guarantees.

    Args:
        entries: Entries in stream order.
        filters: The filter chain.

    Yields:
        The entries that pass every filter, in their original order.
    """
    stream: Iterator[LogEntry] = iter(entries)
    for stage in filters:
        stream = filter(stage, stream)
    yield from stream


class Pipeline:
    """Runs a filter chain with one asyncio task per stage."""

    def __init__(self, filters: Iterable[StreamFilter] = ()) -> None:
        """Initialize the pipeline.

        Args:
            filters: Filters in the order entries pass through them.
        """
        self.filters = list(filters)

    async def run(self, source: AsyncIterable[LogEntry], sink: Sink) -> None:
        """Feed the source through the filters into the sink.

        Returns once the source is exhausted and every stage has drained.
        If any stage raises, the other stages are cancelled and the
        exception propagates.

        Args:
            source: Entries in stream order.
            sink: Called with every surviving entry; may be a coroutine
                function.
        """
        queues: list[asyncio.Queue[Any]] = [
            asyncio.Queue(maxsize=1) for _ in range(len(self.filters) + 1)
        ]

        tasks = [
            asyncio.create_task(self._pump(source, queues[0]), name="Pipeline-Source")
        ]
        for index, stage in enumerate(self.filters):
            tasks.append(
                asyncio.create_task(
                    self._relay(stage, queues[index], queues[index + 1]),
                    name=f"Pipeline-Filter-{index}",
                )
            )
        tasks.append(
            asyncio.create_task(self._deliver(queues[-1], sink), name="Pipeline-Sink")
        )

        try:
            await asyncio.gather(*tasks)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _pump(
        self, source: AsyncIterable[LogEntry], out: asyncio.Queue[Any]
    ) -> None:
        async for entry in source:
            await out.put(entry)
        await out.put(_END)

    async def _relay(
        self,
        stage: StreamFilter,
        inbox: asyncio.Queue[Any],
        out: asyncio.Queue[Any],
    ) -> None:
        while True:
            entry = await inbox.get()
            if entry is _END:
                await out.put(_END)
                return
            if stage(entry):
                await out.put(entry)

    async def _deliver(self, inbox: asyncio.Queue[Any], sink: Sink) -> None:
        while True:
            entry = await inbox.get()
            if entry is _END:
                return
            result = sink(entry)
            if inspect.isawaitable(result):
                await result
