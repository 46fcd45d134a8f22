"""Log record model and its normalization into Sentry-ready events."""
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, NamedTuple, Optional, Union


class LogRecord(NamedTuple):
    """A buffered record as handed over by the host logging framework."""

    payload: Any
    level: int
    category: str


@dataclass(frozen=True)
class Scalar:
    value: Any


@dataclass(frozen=True)
class Structured:
    fields: Mapping[str, Any]


@dataclass(frozen=True)
class Error:
    error: BaseException


Payload = Union[Scalar, Structured, Error]


@dataclass
class NormalizedEvent:
    """One outgoing event, built and discarded per record."""

    message: str
    tags: Dict[str, Any]
    extra: Dict[str, Any] = field(default_factory=dict)
    attached_error: Optional[BaseException] = None


def classify(payload: Any) -> Payload:
    """Wraps a raw record payload into its variant."""
    if isinstance(payload, (Scalar, Structured, Error)):
        return payload
    if isinstance(payload, Mapping):
        return Structured(payload)
    if isinstance(payload, BaseException):
        return Error(payload)
    return Scalar(payload)


def normalize(payload: Any, category: str) -> NormalizedEvent:
    """
    Builds the event for a single record.

    Structured payloads give up their "msg"/"message", "tags" and "exception"
    entries; whatever is left becomes extra data. "tags" is only taken when
    it holds a mapping and "exception" when it holds an exception. "message"
    is read after "msg", so it wins when both are present. The caller's
    mapping is never modified.

    Args:
        payload: The raw record payload, or an already classified variant.
        category: The record category, always kept as the "category" tag.

    Returns:
        A fresh NormalizedEvent.
    """
    variant = classify(payload)
    tags: Dict[str, Any] = {"category": category}

    if isinstance(variant, Error):
        return NormalizedEvent(
            message=str(variant.error), tags=tags, attached_error=variant.error
        )

    if isinstance(variant, Scalar):
        message = "" if variant.value is None else str(variant.value)
        return NormalizedEvent(message=message, tags=tags)

    fields = dict(variant.fields)
    event = NormalizedEvent(message="", tags=tags)

    if fields.get("msg") is not None:
        event.message = str(fields.pop("msg"))
    if fields.get("message") is not None:
        event.message = str(fields.pop("message"))

    if isinstance(fields.get("tags"), Mapping):
        event.tags = {**fields.pop("tags"), "category": category}

    if isinstance(fields.get("exception"), BaseException):
        event.attached_error = fields.pop("exception")

    event.extra = fields
    return event
