"""SentryTarget: ships buffered log records to Sentry."""
from typing import Any, Callable, Dict, Iterable, Optional

import structlog

from .client import ReportingClient, SentryReportingClient
from .context import DEFAULT_LOG_VARS, DEFAULT_MASK_VARS, get_context_message
from .levels import get_log_level
from .payload import Error, LogRecord, NormalizedEvent, classify, normalize

logger = structlog.get_logger(__name__)

ExtraCallback = Callable[[Any, Dict[str, Any]], Optional[Dict[str, Any]]]
UserResolver = Callable[[], Optional[Dict[str, Any]]]


class SentryTarget:
    """
    Converts log records into Sentry events, one isolated scope per record.

    Args:
        dsn: Sentry DSN for the client built by this target.
        client_options: Options passed verbatim to the Sentry client.
        context: Whether to attach the process context dump as the "context" extra.
        extra_callback: Optional ``(payload, extra) -> extra`` hook. It gets the
            original record payload and its return value replaces the extra data.
        user_resolver: Optional callable returning the user data; called once per export.
        log_vars: Context sources to dump when ``context`` is enabled.
        mask_vars: Glob patterns of context values to mask.
        client: A ReportingClient to use instead of building one from ``dsn``.

    Raises:
        ConfigurationError: The Sentry client rejected ``dsn`` or ``client_options``.

    Example:
        >>> from python_sentry_log_target import Level, LogRecord
        >>> target = SentryTarget(dsn="https://key@o0.ingest.sentry.io/0")
        >>> target.export([LogRecord({"msg": "disk full", "tags": {"host": "a1"}}, Level.ERROR, "app")])
    """

    def __init__(
        self,
        dsn: str = "",
        client_options: Optional[Dict[str, Any]] = None,
        context: bool = True,
        extra_callback: Optional[ExtraCallback] = None,
        user_resolver: Optional[UserResolver] = None,
        log_vars: Iterable[str] = DEFAULT_LOG_VARS,
        mask_vars: Iterable[str] = DEFAULT_MASK_VARS,
        client: Optional[ReportingClient] = None,
    ):
        self.context = context
        self.extra_callback = extra_callback
        self.user_resolver = user_resolver
        self.log_vars = tuple(log_vars)
        self.mask_vars = tuple(mask_vars)
        self.client = client if client is not None else SentryReportingClient(dsn, client_options)

    def get_context_message(self) -> str:
        return get_context_message(self.log_vars, self.mask_vars)

    def resolve_user(self) -> Optional[Dict[str, Any]]:
        if self.user_resolver is None:
            return None
        return self.user_resolver() or None

    def run_extra_callback(self, payload: Any, event: NormalizedEvent) -> NormalizedEvent:
        """Replaces the event's extra data with the callback result, if a callback is set."""
        if self.extra_callback is not None:
            event.extra = dict(self.extra_callback(payload, event.extra) or {})
        return event

    def export(self, records: Iterable[LogRecord]) -> None:
        """
        Sends each record to Sentry, in order.

        Errors raised by the callbacks or by the client are not caught; records
        dispatched before the failure stay dispatched.

        Args:
            records: (payload, level, category) records, usually LogRecord tuples.
        """
        user = self.resolve_user()
        count = 0

        for payload, level, category in records:
            variant = classify(payload)
            event = normalize(variant, category)

            if self.context:
                event.extra["context"] = self.get_context_message()

            event = self.run_extra_callback(payload, event)

            with self.client.scope() as scope:
                scope.set_user(user)
                for key, value in event.extra.items():
                    scope.set_extra(str(key), value)
                for key, value in event.tags.items():
                    if value:
                        scope.set_tag(str(key), value)

                if isinstance(variant, Error):
                    self.client.capture_exception(variant.error)
                else:
                    hint = {}
                    if event.attached_error is not None:
                        hint["exception"] = event.attached_error
                    self.client.capture_event(
                        {"message": event.message, "level": get_log_level(level).value},
                        hint,
                    )
            count += 1

        logger.debug("Exported log records to Sentry", count=count)
