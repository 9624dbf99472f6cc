"""Tests for logging utilities and sensitive data redaction."""

from __future__ import annotations

import json
import logging

import pytest

from homehub.logging_utils import REDACTED, configure_logging, redact


def _record(msg: str, *args) -> logging.LogRecord:
    return logging.LogRecord(
        name="homehub.test.redaction",
        level=logging.INFO,
        pathname=__file__,
        lineno=0,
        msg=msg,
        args=args,
        exc_info=None,
    )


@pytest.mark.parametrize("fmt", ["plain", "json"])
def test_configured_secret_is_redacted(fmt):
    secret = "top-secret-token"
    configure_logging("INFO", fmt, [secret])

    handler = logging.getLogger().handlers[0]
    record = _record("Authorization header Bearer %s", secret)
    for filter_ in handler.filters:
        filter_.filter(record)

    formatted = handler.format(record)
    assert secret not in formatted
    assert REDACTED in formatted


def test_json_format_includes_request_id():
    configure_logging("DEBUG", "json", [])
    handler = logging.getLogger().handlers[0]
    record = _record("HTTP GET /meals status=200")
    record.request_id = "abc123"

    payload = json.loads(handler.format(record))

    assert payload["request_id"] == "abc123"
    assert payload["level"] == "INFO"
    assert logging.getLogger().level == logging.DEBUG


@pytest.mark.parametrize(
    "text",
    [
        "pushing with ghp_abcdefghijklmnop1234",
        "GET /api/ access_token=eyJhbGciOi",
        "POST /meals?api_token=letmein",
        "X-API-Key: hunter22",
    ],
)
def test_credential_shapes_are_masked_without_configuration(text):
    masked = redact(text)

    assert REDACTED in masked
    assert masked != text


def test_plain_text_is_untouched():
    assert redact("Meal added to Monday!") == "Meal added to Monday!"
