"""Core functionality for the python-sentry-log-target package."""
import logging
import sys
from typing import Any, Dict, Optional

import structlog
from structlog.stdlib import BoundLogger

from ._processors import (
    nest_custom_fields,
    remove_processors_meta_safe,
    rename_and_flatten_fields,
    resolve_exc_info,
)
from .client import ReportingClient
from .handler import DEFAULT_EXPORT_INTERVAL, SentryHandler
from .target import ExtraCallback, SentryTarget, UserResolver

_is_configured = False
_sentry_handler: Optional[SentryHandler] = None


def get_logger(
    service_name: str,
    log_level: int = logging.INFO,
    sentry_dsn: Optional[str] = None,
    sentry_client_options: Optional[Dict[str, Any]] = None,
    sentry_log_level: int = logging.ERROR,
    sentry_context: bool = True,
    sentry_extra_callback: Optional[ExtraCallback] = None,
    sentry_user_resolver: Optional[UserResolver] = None,
    sentry_export_interval: int = DEFAULT_EXPORT_INTERVAL,
    sentry_client: Optional[ReportingClient] = None,
) -> BoundLogger:
    """
    Configures and returns a JSON logger whose records are also shipped to Sentry.

    structlog is set up once per process with a processor chain producing JSON
    lines on stdout, and the standard logging library is routed through the same
    chain. When a DSN (or a ready client) is given, a SentryHandler is attached
    to the root logger: records at or above ``sentry_log_level`` are buffered
    and exported as Sentry events every ``sentry_export_interval`` records and
    at interpreter exit.

    Args:
        service_name: The name of the service; used as the logger name and the
            "category" tag of Sentry events.
        log_level: The minimum log level to output (e.g., logging.INFO, logging.DEBUG).
        sentry_dsn: Optional Sentry DSN.
        sentry_client_options: Extra options for the Sentry client (environment,
            release, sample_rate, ...).
        sentry_log_level: Minimum log level for Sentry events (default: ERROR).
        sentry_context: Whether to attach the process context dump to events.
        sentry_extra_callback: Optional ``(payload, extra) -> extra`` hook.
        sentry_user_resolver: Optional callable returning the user data of a batch.
        sentry_export_interval: Number of buffered records that triggers an export.
        sentry_client: A ReportingClient to use instead of building one from the DSN.

    Returns:
        A structlog bound logger instance ready for use.

    Example:
        >>> logger = get_logger("my-service", sentry_dsn="https://...")
        >>> logger.error("Disk full", tags={"host": "a1"}, mount="/var")
        {"log_level": "ERROR", "logger": "my-service", "timestamp": "2024-01-15T10:30:00Z",
         "message": "Disk full", "tags": {"host": "a1"}, "details": {"mount": "/var"}}
    """
    global _is_configured, _sentry_handler

    if not _is_configured:
        shared_processors = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            resolve_exc_info,
            rename_and_flatten_fields,
            nest_custom_fields,
        ]

        structlog.configure(
            processors=shared_processors + [
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

        formatter = structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                remove_processors_meta_safe,
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(ensure_ascii=False),
            ],
        )

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)

        root_logger = logging.getLogger()
        root_logger.handlers.clear()
        root_logger.addHandler(handler)
        root_logger.setLevel(log_level)

        if sentry_dsn or sentry_client is not None:
            target = SentryTarget(
                dsn=sentry_dsn or "",
                client_options=sentry_client_options,
                context=sentry_context,
                extra_callback=sentry_extra_callback,
                user_resolver=sentry_user_resolver,
                client=sentry_client,
            )
            _sentry_handler = SentryHandler(
                target, capacity=sentry_export_interval, level=sentry_log_level
            )
            root_logger.addHandler(_sentry_handler)

        _is_configured = True

    return structlog.get_logger(service_name)


def reset_configuration():
    """
    Resets the logger configuration. Useful for testing or reconfiguration.

    Pending Sentry records are exported before the handler is detached.

    Warning: This should generally not be used in production code.
    """
    global _is_configured, _sentry_handler

    if _sentry_handler is not None:
        logging.getLogger().removeHandler(_sentry_handler)
        _sentry_handler.close()
        _sentry_handler = None

    _is_configured = False
    structlog.reset_defaults()
