"""Immutable configuration values: grammars and adb invocation settings.

Every regular expression used by alogview is compiled once, here, and handed
to the parser, the census and the package filter through their constructors.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from re import Pattern

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .exceptions import ConfigError
from .utils import resolve_adb


class LogLineGrammar(BaseModel):
    """Grammar of a threadtime logcat line.

    Format: ``MM-DD HH:MM:SS.mmm  PID  TID  LEVEL[ TAG]: MESSAGE``.
    The tag is optional, at least sometimes missing.
    """

    model_config = ConfigDict(frozen=True)

    # Group 1: Date and time (MM-DD hh:mm:ss.sss)
    # Group 2: PID
    # Group 3: TID
    # Group 4: Level
    # Group 5: Tag (untrimmed, may be empty)
    # Group 6: Message
    pattern: Pattern[str] = re.compile(
        r"(\d\d-\d\d \d\d:\d\d:\d\d\.\d\d\d)\s+(\d+)\s+(\d+)\s+([VDIWEF])(.*?):\s+(.*)$"
    )
    session_marker: str = "--------- beginning of"


class ProcessListGrammar(BaseModel):
    """Grammar of one ``ps`` output row.

    The columns are ``USER PID PPID VSZ RSS WCHAN ADDR S NAME``; NAME runs to
    the end of the line and may contain spaces.
    """

    model_config = ConfigDict(frozen=True)

    pattern: Pattern[str] = re.compile(
        r"\w+\s+(\d+)\s+\d+\s+\d+\s+\d+\s+\w+\s+\w+\s+[A-Z]\s+(.*)$"
    )


class LifecycleGrammar(BaseModel):
    """Process lifecycle announcements emitted by the activity manager.

    Attributes:
        supervisor_tag: Tag under which the announcements are logged.
        start: ``Start proc ${pid}:${package}/${user} ...``
            Groups: pid, package.
        died: ``Process ${package} (pid ${pid}) has died: ${reason}``
            Groups: package, pid.
        killed: ``Killing ${pid}:${package}/${user} (adj ${n}): ${reason}``
            Groups: pid, package.
    """

    model_config = ConfigDict(frozen=True)

    supervisor_tag: str = "ActivityManager"
    start: Pattern[str] = re.compile(r"Start proc (\d+):([A-Za-z0-9_.]+)/\w+")
    died: Pattern[str] = re.compile(
        r"Process ([A-Za-z0-9_.]+) \(pid (\d+)\) has died: .*$"
    )
    killed: Pattern[str] = re.compile(r"Killing (\d+):([A-Za-z0-9_.]+)/\w+ [^:]+: .*$")


class AdbConfig(BaseModel):
    """How to invoke adb and which device to talk to.

    Attributes:
        adb_path: Path or name of the adb executable.
        use_device: Pass ``-d`` (the single USB device).
        use_emulator: Pass ``-e`` (the single TCP/IP device or emulator).
        serial: Pass ``-s SERIAL``.
        logcat_args: Arguments of the log collection command.
        ps_args: Arguments of the process listing command.
    """

    model_config = ConfigDict(frozen=True)

    adb_path: str = Field(default="adb", min_length=1)
    use_device: bool = False
    use_emulator: bool = False
    serial: str | None = None
    logcat_args: tuple[str, ...] = ("logcat",)
    ps_args: tuple[str, ...] = ("shell", "ps")

    @model_validator(mode="after")
    def _check_selectors(self) -> AdbConfig:
        if self.use_device and self.use_emulator:
            raise ValueError("-e and -d must not be specified both")
        return self

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **kwargs: object,
    ) -> AdbConfig:
        """Build a configuration, honouring the ``ADB`` environment variable.

        Args:
            environ: Environment to read. Defaults to ``os.environ``.
            **kwargs: Remaining ``AdbConfig`` fields.

        Returns:
            The validated configuration.

        Raises:
            ConfigError: If ``ADB`` is set to an empty string, adb cannot be
                found, or the fields do not validate.
        """
        env = os.environ if environ is None else environ
        if "ADB" in env:
            if not env["ADB"]:
                raise ConfigError(
                    "ADB environment variable must not be set to empty string"
                )
            adb_path = env["ADB"]
        else:
            try:
                adb_path = resolve_adb()
            except FileNotFoundError as e:
                raise ConfigError(str(e)) from e

        try:
            return cls(adb_path=adb_path, **kwargs)
        except ValidationError as e:
            messages = "; ".join(err["msg"] for err in e.errors())
            raise ConfigError(f"invalid parameters: {messages}") from e

    def selector_args(self) -> list[str]:
        """Return the device selection flags placed before the adb command."""
        args: list[str] = []
        if self.use_device:
            args.append("-d")
        if self.use_emulator:
            args.append("-e")
        if self.serial:
            args.extend(["-s", self.serial])
        return args

    def command(self, *args: str) -> list[str]:
        """Build a full adb command line.

        Args:
            *args: The adb subcommand and its arguments.

        Returns:
            List of command arguments.
        """
        return [self.adb_path, *self.selector_args(), *args]

    def logcat_command(self) -> list[str]:
        return self.command(*self.logcat_args)

    def ps_command(self) -> list[str]:
        return self.command(*self.ps_args)


def env_flag(name: str, environ: Mapping[str, str] | None = None) -> bool:
    """Return True if the environment variable is set, whatever its value."""
    env = os.environ if environ is None else environ
    return name in env


DEFAULT_LOG_LINE_GRAMMAR = LogLineGrammar()
DEFAULT_PROCESS_LIST_GRAMMAR = ProcessListGrammar()
DEFAULT_LIFECYCLE_GRAMMAR = LifecycleGrammar()

__all__ = [
    "AdbConfig",
    "LifecycleGrammar",
    "LogLineGrammar",
    "ProcessListGrammar",
    "DEFAULT_LIFECYCLE_GRAMMAR",
    "DEFAULT_LOG_LINE_GRAMMAR",
    "DEFAULT_PROCESS_LIST_GRAMMAR",
    "env_flag",
]
