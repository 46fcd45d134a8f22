"""Tests for get_logger wiring structlog output and the Sentry handler."""
import json
import logging

import pytest

from python_sentry_log_target import SentryHandler, get_logger, reset_configuration

pytestmark = pytest.mark.usefixtures("clean_logging")


def sentry_handlers():
    return [h for h in logging.getLogger().handlers if isinstance(h, SentryHandler)]


def test_json_output_to_stdout(capsys) -> None:
    logger = get_logger("svc")
    logger.info("Service started", tags={"env": "test"}, version="1.0.0")

    line = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert line["message"] == "Service started"
    assert line["log_level"] == "INFO"
    assert line["logger"] == "svc"
    assert line["tags"] == {"env": "test"}
    assert line["details"] == {"version": "1.0.0"}
    assert "timestamp" in line


def test_no_sentry_handler_without_dsn() -> None:
    get_logger("svc")
    assert sentry_handlers() == []


def test_sentry_handler_attached_once(reporting_client) -> None:
    get_logger("svc", sentry_client=reporting_client)
    get_logger("other", sentry_client=reporting_client)

    [handler] = sentry_handlers()
    assert handler.level == logging.ERROR


def test_structlog_error_reaches_sentry(reporting_client) -> None:
    logger = get_logger(
        "svc", sentry_client=reporting_client, sentry_context=False, sentry_export_interval=1
    )

    logger.info("below the sentry level")
    logger.error("disk full", tags={"host": "a1"}, mount="/var")

    [capture] = reporting_client.captures
    assert capture.event == {"message": "disk full", "level": "error"}
    assert capture.scope.tags == {"category": "svc", "host": "a1"}
    assert capture.scope.extras == {"mount": "/var"}


def test_structlog_exception_value_is_attached(reporting_client) -> None:
    logger = get_logger(
        "svc", sentry_client=reporting_client, sentry_context=False, sentry_export_interval=1
    )
    err = TimeoutError("slow")

    logger.error("timeout", exception=err)

    [capture] = reporting_client.captures
    assert capture.event["message"] == "timeout"
    assert capture.hint == {"exception": err}


def test_structlog_logged_exception_is_attached(reporting_client, capsys) -> None:
    logger = get_logger(
        "svc", sentry_client=reporting_client, sentry_context=False, sentry_export_interval=1
    )

    try:
        raise TimeoutError("slow")
    except TimeoutError:
        logger.exception("request failed")

    [capture] = reporting_client.captures
    assert capture.event == {"message": "request failed", "level": "error"}
    assert isinstance(capture.hint["exception"], TimeoutError)
    assert "exception" not in capture.scope.extras
    assert "exc_info" not in capture.scope.extras

    line = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert line["message"] == "request failed"
    assert "TimeoutError: slow" in line["exception"]
    assert "exc_info" not in line


def test_stdlib_logged_exception_is_rendered(capsys) -> None:
    get_logger("svc")

    try:
        raise ValueError("bad")
    except ValueError:
        logging.getLogger("svc.db").exception("query failed")

    line = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert line["message"] == "query failed"
    assert "ValueError: bad" in line["exception"]


def test_stdlib_records_reach_sentry(reporting_client) -> None:
    get_logger(
        "svc",
        sentry_client=reporting_client,
        sentry_context=False,
        sentry_log_level=logging.WARNING,
        sentry_export_interval=1,
        sentry_user_resolver=lambda: {"id": 7},
    )

    logging.getLogger("svc.db").warning("slow query %sms", 1200)

    [capture] = reporting_client.captures
    assert capture.event == {"message": "slow query 1200ms", "level": "warning"}
    assert capture.scope.tags == {"category": "svc.db"}
    assert capture.scope.user == {"id": 7}


def test_reset_configuration_exports_pending_records(reporting_client) -> None:
    logger = get_logger("svc", sentry_client=reporting_client, sentry_context=False)
    logger.error("first")
    logger.error("second")
    assert reporting_client.captures == []

    reset_configuration()

    assert [c.event["message"] for c in reporting_client.captures] == ["first", "second"]
    assert sentry_handlers() == []
