"""Buffered logging handler exporting standard library records to a SentryTarget."""
import logging
from fnmatch import fnmatchcase
from logging.handlers import BufferingHandler
from typing import Iterable

from ._processors import payload_from_event_dict
from .levels import from_stdlib_level
from .payload import LogRecord
from .target import SentryTarget

DEFAULT_EXPORT_INTERVAL = 1000

# Records from the SDK and from this package would feed back into the export.
DEFAULT_EXCEPT_CATEGORIES = (
    "sentry_sdk",
    "sentry_sdk.*",
    "python_sentry_log_target",
    "python_sentry_log_target.*",
)


class CategoryFilter(logging.Filter):
    """
    Accepts records whose logger name matches one of ``categories`` (all when
    empty) and none of ``except_categories``. Both take glob patterns.
    """

    def __init__(self, categories: Iterable[str] = (), except_categories: Iterable[str] = ()):
        super().__init__()
        self.categories = tuple(categories)
        self.except_categories = tuple(except_categories)

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if self.categories and not any(fnmatchcase(name, p) for p in self.categories):
            return False
        return not any(fnmatchcase(name, p) for p in self.except_categories)


def to_log_record(record: logging.LogRecord) -> LogRecord:
    """
    Converts a standard library record into a target record.

    Records coming from structlog carry the processed event dict as their
    message; it is turned back into a structured payload. Other dict messages
    are used as is, an exception logged directly becomes an error payload and
    a record with exc_info carries its exception next to the message.
    """
    msg = record.msg

    if isinstance(msg, dict) and hasattr(record, "_logger"):
        payload = payload_from_event_dict(msg)
    elif isinstance(msg, dict):
        payload = msg
    elif isinstance(msg, BaseException) and not record.args:
        payload = msg
    elif record.exc_info and record.exc_info[1] is not None:
        payload = {"message": record.getMessage(), "exception": record.exc_info[1]}
    else:
        payload = record.getMessage()

    return LogRecord(payload, from_stdlib_level(record.levelno), record.name)


class SentryHandler(BufferingHandler):
    """
    Buffers records and exports them through a SentryTarget on flush.

    The buffer is flushed when it reaches ``capacity`` records and when the
    handler is closed (logging.shutdown() does this at interpreter exit). It
    is cleared once the target's export returns. An explicit flush() that
    fails keeps the buffer; a flush triggered by logging drops the batch and
    reports the error through handleError().

    Args:
        target: The SentryTarget receiving the records.
        capacity: Number of buffered records that triggers an export.
        level: Minimum level of records to buffer.
        categories: Logger name patterns to accept; empty accepts all.
        except_categories: Logger name patterns to reject.
    """

    def __init__(
        self,
        target: SentryTarget,
        capacity: int = DEFAULT_EXPORT_INTERVAL,
        level: int = logging.NOTSET,
        categories: Iterable[str] = (),
        except_categories: Iterable[str] = DEFAULT_EXCEPT_CATEGORIES,
    ):
        super().__init__(capacity)
        self.setLevel(level)
        self.target = target
        self.addFilter(CategoryFilter(categories, except_categories))

    def emit(self, record: logging.LogRecord) -> None:
        self.buffer.append(record)
        if self.shouldFlush(record):
            try:
                self.flush()
            except Exception:
                # The batch may be partly dispatched; it is never replayed.
                self.buffer.clear()
                self.handleError(record)

    def flush(self) -> None:
        self.acquire()
        try:
            if not self.buffer:
                return
            self.target.export([to_log_record(record) for record in self.buffer])
            self.buffer.clear()
        finally:
            self.release()
