"""Host log levels and their translation to Sentry severities."""
import logging
import warnings
from enum import Enum, IntEnum
from typing import Dict


class Level(IntEnum):
    """Ordinal levels used by buffered log records."""

    ERROR = 0x01
    WARNING = 0x02
    INFO = 0x04
    TRACE = 0x08
    PROFILE = 0x40
    PROFILE_BEGIN = 0x50
    PROFILE_END = 0x60


class Severity(str, Enum):
    """Severity levels understood by Sentry."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


_SEVERITIES: Dict[int, Severity] = {
    Level.PROFILE: Severity.DEBUG,
    Level.PROFILE_BEGIN: Severity.DEBUG,
    Level.PROFILE_END: Severity.DEBUG,
    Level.TRACE: Severity.DEBUG,
    Level.WARNING: Severity.WARNING,
    Level.ERROR: Severity.ERROR,
    Level.INFO: Severity.INFO,
}

_LEVEL_NAMES: Dict[int, str] = {
    Level.ERROR: "error",
    Level.WARNING: "warning",
    Level.INFO: "info",
    Level.TRACE: "debug",
    Level.PROFILE_BEGIN: "debug",
    Level.PROFILE_END: "debug",
}


def get_log_level(level: int) -> Severity:
    """
    Translates a host log level to a Sentry severity.

    Args:
        level: The record level, e.g. Level.ERROR or Level.TRACE.

    Returns:
        The matching Severity. Unknown levels are reported as info.
    """
    return _SEVERITIES.get(level, Severity.INFO)


def get_level_name(level: int) -> str:
    """
    Returns the legacy text name of a level. Unknown levels map to "error".

    Deprecated: use get_log_level() instead.
    """
    warnings.warn(
        "get_level_name() is deprecated, use get_log_level() instead",
        DeprecationWarning,
        stacklevel=2,
    )
    return _LEVEL_NAMES.get(level, "error")


def from_stdlib_level(levelno: int) -> Level:
    """Maps a standard library logging level number onto a host level."""
    if levelno >= logging.ERROR:
        return Level.ERROR
    if levelno >= logging.WARNING:
        return Level.WARNING
    if levelno >= logging.INFO:
        return Level.INFO
    return Level.TRACE
