import logging

from rowmapper.utils.logging import (
    REDACTED_VALUE,
    CorrelationIdFilter,
    correlation_scope,
    get_correlation_id,
    get_logger,
    redact_params,
    set_correlation_id,
    time_call,
)


def test_correlation_id_round_trip():
    token = set_correlation_id("test-token")
    assert token == "test-token"
    assert get_correlation_id() == "test-token"


def test_time_call_logs_duration(caplog):
    logger = get_logger("tests.logging")
    caplog.set_level(logging.DEBUG, logger=logger.name)
    with time_call("unit-test", logger, threshold_ms=0):
        pass
    messages = [record.message for record in caplog.records if record.name == logger.name]
    assert any("unit-test took" in message for message in messages)


def test_fast_calls_log_at_debug(caplog):
    logger = get_logger("tests.logging.fast")
    caplog.set_level(logging.DEBUG, logger=logger.name)
    with time_call("quick", logger, sql="SELECT 1", threshold_ms=60_000) as timer:
        pass
    record = next(record for record in caplog.records if record.name == logger.name)
    assert record.levelno == logging.DEBUG
    assert record.sql == "SELECT 1"
    assert timer.elapsed_ms >= 0


def test_redact_params_masks_sensitive_values():
    assert redact_params(["alice", "password=hunter2", b"api_key:abc", 5]) == [
        "alice",
        REDACTED_VALUE,
        REDACTED_VALUE,
        5,
    ]
    assert redact_params(None) == []


def test_loggers_share_the_package_namespace():
    assert get_logger("table.gateway").name == "rowmapper.table.gateway"
    assert logging.getLogger("rowmapper").handlers


def test_correlation_scope_restores_previous_id():
    set_correlation_id("outer")
    with correlation_scope("inner") as token:
        assert token == "inner"
        assert get_correlation_id() == "inner"
    assert get_correlation_id() == "outer"


def test_filter_stamps_records_with_the_scoped_id():
    record = logging.LogRecord("rowmapper.tests", logging.INFO, __file__, 1, "msg", None, None)
    with correlation_scope("req-42"):
        assert CorrelationIdFilter().filter(record)
    assert record.correlation_id == "req-42"
