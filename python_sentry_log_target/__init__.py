"""
python-sentry-log-target: ships buffered log records to Sentry as structured events.

Each record (payload, level, category) becomes one Sentry event with its own
isolated scope. Structured payloads may carry "msg"/"message", "tags" and an
"exception" next to arbitrary extra data; an exception logged on its own is
captured as an exception event.

Basic Usage:
    from python_sentry_log_target import get_logger

    logger = get_logger("my-service", sentry_dsn="https://...")
    logger.error("Disk full", tags={"host": "a1"}, exception=err)

Direct Usage:
    from python_sentry_log_target import Level, LogRecord, SentryTarget

    target = SentryTarget(dsn="https://...", user_resolver=lambda: {"id": 7})
    target.export([LogRecord({"msg": "timeout", "exception": err}, Level.WARNING, "app")])
"""
from .client import ReportingClient, SentryReportingClient
from .core import get_logger, reset_configuration
from .exceptions import ConfigurationError, SentryTargetError
from .handler import CategoryFilter, SentryHandler
from .levels import Level, Severity, get_level_name, get_log_level
from .payload import LogRecord, NormalizedEvent, normalize
from .target import SentryTarget

__version__ = "0.1.0"
__all__ = [
    "CategoryFilter",
    "ConfigurationError",
    "Level",
    "LogRecord",
    "NormalizedEvent",
    "ReportingClient",
    "SentryHandler",
    "SentryReportingClient",
    "SentryTarget",
    "SentryTargetError",
    "Severity",
    "get_level_name",
    "get_log_level",
    "get_logger",
    "normalize",
    "reset_configuration",
]
