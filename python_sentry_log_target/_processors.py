"""structlog processors shaping log lines, and their inverse for Sentry payloads."""
import sys
from typing import Any, Dict, Mapping

from structlog.types import EventDict, WrappedLogger

# Keys kept at the top level of a JSON log line; everything else goes under "details".
STANDARD_FIELDS = {"timestamp", "log_level", "logger", "message", "tags", "exc_info"}

# Line metadata that Sentry records on its own.
LINE_METADATA = {"timestamp", "log_level", "logger"}


def remove_processors_meta_safe(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Drops ProcessorFormatter's "_record" and "_from_structlog" keys if present."""
    event_dict.pop("_record", None)
    event_dict.pop("_from_structlog", None)
    return event_dict


def resolve_exc_info(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Replaces an "exc_info" flag or exception with its (type, value, traceback)
    tuple, taken while the exception is being handled. Buffered records are
    rendered later, when sys.exc_info() no longer holds it. An empty exc_info
    is dropped.
    """
    exc_info = event_dict.get("exc_info")
    if exc_info is None:
        return event_dict

    if isinstance(exc_info, BaseException):
        exc_info = (type(exc_info), exc_info, exc_info.__traceback__)
    elif not isinstance(exc_info, tuple):
        exc_info = sys.exc_info() if exc_info else (None, None, None)

    if exc_info[1] is None:
        event_dict.pop("exc_info")
    else:
        event_dict["exc_info"] = exc_info
    return event_dict


def rename_and_flatten_fields(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Renames structlog's "event" to "message" and "level" to an upper-case
    "log_level".
    """
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")

    if "level" in event_dict:
        event_dict["log_level"] = event_dict.pop("level").upper()

    return event_dict


def nest_custom_fields(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Moves every non-standard key under "details" and drops internal "_" keys.

    Args:
        logger: The wrapped logger instance
        method_name: The name of the method called (e.g., 'info', 'error')
        event_dict: The current state of the log entry

    Returns:
        The event dictionary with custom fields nested under "details"
    """
    details: Dict[str, Any] = {}

    for key in list(event_dict.keys()):
        if key.startswith("_"):
            event_dict.pop(key)
        elif key not in STANDARD_FIELDS:
            details[key] = event_dict.pop(key)

    if details:
        event_dict["details"] = details

    return event_dict


def payload_from_event_dict(event_dict: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Turns a processed event dict back into a structured record payload.

    "details" is flattened into the top level, line metadata and internal keys
    are dropped and a leftover "event" key becomes "message". An exc_info
    tuple becomes the "exception" entry unless one was given explicitly.
    "tags" and "exception" entries pass through untouched.
    """
    payload = dict(event_dict)
    details = payload.pop("details", None) or {}
    exc_info = payload.pop("exc_info", None)

    for key in list(payload.keys()):
        if key in LINE_METADATA or key.startswith("_"):
            payload.pop(key)

    payload.update(details)

    if "event" in payload and "message" not in payload:
        payload["message"] = payload.pop("event")

    if isinstance(exc_info, tuple) and isinstance(exc_info[1], BaseException):
        payload.setdefault("exception", exc_info[1])

    return payload
