"""Reporting client seam between the target and the Sentry SDK."""
from contextlib import contextmanager
from typing import Any, ContextManager, Dict, Iterator, Optional, Protocol

import sentry_sdk
import structlog
from sentry_sdk.integrations.excepthook import ExcepthookIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.threading import ThreadingIntegration
from sentry_sdk.utils import BadDsn, event_from_exception

from .exceptions import ConfigurationError

logger = structlog.get_logger(__name__)


class ReportingClient(Protocol):
    """What SentryTarget needs from an event-reporting client."""

    def scope(self) -> ContextManager[Any]:
        ...

    def capture_exception(self, error: BaseException) -> Optional[str]:
        ...

    def capture_event(
        self, event: Dict[str, Any], hint: Optional[Dict[str, Any]] = None
    ) -> Optional[str]:
        ...


class SentryReportingClient:
    """
    Owns one sentry_sdk.Client and reports through isolated scopes.

    The SDK's own unhandled-error listeners are disabled: sys.excepthook,
    thread exceptions and the logging integration would otherwise report the
    same failures a second time.

    Args:
        dsn: Sentry DSN. An empty DSN builds a client that sends nothing.
        client_options: Keyword options passed verbatim to sentry_sdk.Client.
            A "dsn" entry here takes precedence over the dsn argument.

    Raises:
        ConfigurationError: The SDK rejected the DSN or an option.
    """

    LISTENER_INTEGRATIONS = (ExcepthookIntegration, ThreadingIntegration, LoggingIntegration)

    def __init__(self, dsn: str = "", client_options: Optional[Dict[str, Any]] = None):
        options: Dict[str, Any] = {"dsn": dsn or None}
        options.update(client_options or {})

        disabled = list(options.pop("disabled_integrations", None) or [])
        disabled.extend(integration() for integration in self.LISTENER_INTEGRATIONS)

        try:
            self.client = sentry_sdk.Client(disabled_integrations=disabled, **options)
        except (BadDsn, TypeError) as e:
            raise ConfigurationError(f"Invalid Sentry client configuration: {e}") from e

        logger.debug("Sentry client created", dsn_configured=bool(options["dsn"]))

    @contextmanager
    def scope(self) -> Iterator[sentry_sdk.Scope]:
        """Forks a new scope bound to the owned client; it is discarded on exit."""
        with sentry_sdk.new_scope() as scope:
            scope.set_client(self.client)
            yield scope

    def capture_exception(self, error: BaseException) -> Optional[str]:
        return sentry_sdk.capture_exception(error)

    def capture_event(
        self, event: Dict[str, Any], hint: Optional[Dict[str, Any]] = None
    ) -> Optional[str]:
        """
        Sends an event through the current scope.

        An error under hint["exception"] is attached as the event's exception
        data, but the event keeps its own message and level.
        """
        hint = dict(hint or {})
        error = hint.pop("exception", None)
        if error is not None:
            exception_event, exception_hint = event_from_exception(
                error, client_options=self.client.options
            )
            event = {**exception_event, **event}
            hint.update(exception_hint)
        return sentry_sdk.capture_event(event, hint=hint)
