"""Tests for request-id log stamping."""

import logging

from flowmarine.middleware import request_id


def _record() -> logging.LogRecord:
    return logging.LogRecord("flowmarine.test", logging.INFO, __file__, 1, "hello", None, None)


class TestRequestIdLogFilter:
    def test_outside_request_uses_placeholder(self):
        record = _record()

        assert request_id.RequestIdLogFilter().filter(record) is True
        assert record.request_id == "-"

    def test_stamps_current_request_id(self):
        token = request_id._request_id.set("req-7")
        try:
            record = _record()
            request_id.RequestIdLogFilter().filter(record)
        finally:
            request_id._request_id.reset(token)

        assert record.request_id == "req-7"
