"""alogview command line: filter logcat output by package and tag."""

from __future__ import annotations

import argparse
import asyncio
import functools
import logging
import os
import sys
from collections.abc import Sequence
from contextlib import aclosing

from . import __version__
from .census import take_census
from .config import AdbConfig, env_flag
from .exceptions import AlogviewError
from .filters import StreamFilter
from .pipeline import Pipeline, Sink, build_filter_chain
from .render import TerminalRenderer
from .streams import LogcatCollector
from .utils import enable_debug

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="alogview",
        description="Show adb logcat output, optionally limited to packages and tags.",
    )
    parser.add_argument(
        "packages",
        nargs="*",
        metavar="packagename",
        help="Only show lines logged by processes of these application packages",
    )
    selector = parser.add_mutually_exclusive_group()
    selector.add_argument(
        "-d",
        dest="use_device",
        action="store_true",
        help="use USB device (error if multiple devices connected)",
    )
    selector.add_argument(
        "-e",
        dest="use_emulator",
        action="store_true",
        help="use TCP/IP device (error if multiple TCP/IP devices available)",
    )
    parser.add_argument(
        "-s",
        dest="serial",
        help="use device with given serial (overrides $ANDROID_SERIAL)",
    )
    parser.add_argument(
        "-t",
        dest="tags",
        action="append",
        default=[],
        metavar="TAG",
        help="Only show lines with this tag (may be repeated)",
    )
    parser.add_argument(
        "--no-color",
        dest="no_color",
        action="store_true",
        help="Do not color lines by level (also disabled by $NO_COLOR)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print debug diagnostics to stderr",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


async def run(adb: AdbConfig, filters: Sequence[StreamFilter], sink: Sink) -> None:
    """Collect logcat output and feed it through the filters into the sink.

    Args:
        adb: adb invocation settings.
        filters: The filter chain.
        sink: Receives every surviving entry.
    """
    collector = LogcatCollector(adb)
    async with aclosing(collector.entries()) as entries:
        await Pipeline(filters).run(entries, sink)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the ``alogview`` command.

    Returns:
        The process exit status.
    """
    args = build_parser().parse_args(argv)
    enable_debug(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        adb = AdbConfig.from_env(
            use_device=args.use_device,
            use_emulator=args.use_emulator,
            serial=args.serial,
        )
        filters = build_filter_chain(
            tags=args.tags,
            packages=args.packages,
            census_func=functools.partial(take_census, adb),
        )
        renderer = TerminalRenderer(color=not (args.no_color or env_flag("NO_COLOR")))
        asyncio.run(run(adb, filters, renderer))
    except AlogviewError as e:
        logger.error("%s", e)
        return 1
    except BrokenPipeError:
        logger.error("output closed")
        # The interpreter flushes stdout again on exit
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        return 1
    except KeyboardInterrupt:
        return 130
    return 0
