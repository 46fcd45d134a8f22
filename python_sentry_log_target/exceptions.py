"""Errors raised by python-sentry-log-target."""


class SentryTargetError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(SentryTargetError, ValueError):
    """The Sentry client could not be built from the given DSN or options."""
