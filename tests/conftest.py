"""Shared pytest fixtures for the python-sentry-log-target test suite."""
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pytest

from python_sentry_log_target import SentryTarget, reset_configuration


@dataclass
class FakeScope:
    user: Any = None
    extras: Dict[str, Any] = field(default_factory=dict)
    tags: Dict[str, Any] = field(default_factory=dict)
    closed: bool = False

    def set_user(self, value: Any) -> None:
        self.user = value

    def set_extra(self, key: str, value: Any) -> None:
        self.extras[key] = value

    def set_tag(self, key: str, value: Any) -> None:
        self.tags[key] = value


@dataclass
class Capture:
    kind: str
    scope: FakeScope
    error: Optional[BaseException] = None
    event: Optional[Dict[str, Any]] = None
    hint: Optional[Dict[str, Any]] = None


class FakeReportingClient:
    """In-memory ReportingClient recording every capture with its scope."""

    def __init__(self) -> None:
        self.captures: List[Capture] = []
        self.scopes: List[FakeScope] = []
        self._current: Optional[FakeScope] = None

    @contextmanager
    def scope(self):
        scope = FakeScope()
        self.scopes.append(scope)
        self._current = scope
        try:
            yield scope
        finally:
            scope.closed = True
            self._current = None

    def capture_exception(self, error: BaseException) -> None:
        self.captures.append(Capture("exception", self._current, error=error))

    def capture_event(self, event: Dict[str, Any], hint: Optional[Dict[str, Any]] = None) -> None:
        self.captures.append(Capture("event", self._current, event=event, hint=dict(hint or {})))


@pytest.fixture
def reporting_client() -> FakeReportingClient:
    """A fake client standing in for the Sentry SDK."""
    return FakeReportingClient()


@pytest.fixture
def target(reporting_client: FakeReportingClient) -> SentryTarget:
    """A target without context dump, bound to the fake client."""
    return SentryTarget(context=False, client=reporting_client)


@pytest.fixture
def clean_logging():
    """Restores root logger state and structlog defaults around a test."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    reset_configuration()
    yield
    reset_configuration()
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
