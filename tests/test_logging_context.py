"""Tests for request id logging context."""

import logging

from slotguard.logging_context import (
    RequestIdFilter,
    get_request_id,
    get_request_logger,
    new_request_id,
    set_request_id,
)


def test_set_and_get_request_id():
    set_request_id("REQ-test")

    assert get_request_id() == "REQ-test"


def test_new_request_id_is_unique():
    first = new_request_id()
    second = new_request_id()

    assert first.startswith("REQ-")
    assert first != second
    assert get_request_id() == second


def test_filter_attaches_request_id():
    set_request_id("REQ-abc")
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)

    assert RequestIdFilter().filter(record)
    assert record.request_id == "REQ-abc"


def test_request_logger_has_single_filter():
    logger = get_request_logger("slotguard.tests.logging")
    get_request_logger("slotguard.tests.logging")

    assert sum(isinstance(f, RequestIdFilter) for f in logger.filters) == 1
