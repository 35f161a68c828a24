"""Tests for log redaction, identity hashing and JSON formatting."""

from __future__ import annotations

import json
import logging
import threading
from io import StringIO

import pytest

from ratelimiter.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    hash_identity,
    set_request_id,
)


@pytest.fixture
def capture():
    """Return (logger, stream) wired through the production filters."""

    logger = logging.getLogger("test_ratelimiter_logging")
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)

    yield logger, stream

    logger.handlers.clear()
    clear_request_id()


def _lines(stream: StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines()]


def test_redacts_tokens_and_store_credentials(capture):
    logger, stream = capture

    logger.info(
        "store.redis_connected",
        extra={
            "token": "Token50",
            "api_key": "sk-secret-123",
            "redis_password": "hunter2",
            "limit": 50,
        },
    )

    output = stream.getvalue()
    assert "Token50" not in output
    assert "sk-secret-123" not in output
    assert "hunter2" not in output
    assert "[REDACTED]" in output
    assert _lines(stream)[0]["limit"] == 50


def test_redacts_nested_headers(capture):
    logger, stream = capture

    logger.info(
        "request.headers",
        extra={"headers": {"Authorization": "Bearer abc", "user-agent": "pytest"}},
    )

    record = _lines(stream)[0]
    assert record["headers"]["Authorization"] == "[REDACTED]"
    assert record["headers"]["user-agent"] == "pytest"


def test_safe_fields_pass_through(capture):
    logger, stream = capture

    logger.info(
        "rate_limit.rejected",
        extra={"identity_hash": "abcd", "path": "/hello", "limit": 10},
    )

    record = _lines(stream)[0]
    assert record["message"] == "rate_limit.rejected"
    assert record["identity_hash"] == "abcd"
    assert record["path"] == "/hello"
    assert "[REDACTED]" not in stream.getvalue()


def test_request_id_from_context(capture):
    logger, stream = capture
    set_request_id("req-123")

    logger.info("rate_limit.allowed")

    assert _lines(stream)[0]["request_id"] == "req-123"


def test_background_thread_name_is_included(capture):
    logger, stream = capture

    worker = threading.Thread(target=lambda: logger.info("cleanup.sweep_completed"), name="rate-limit-cleanup")
    worker.start()
    worker.join()

    assert _lines(stream)[0]["thread"] == "rate-limit-cleanup"


def test_hash_identity_is_stable_and_opaque():
    digest = hash_identity("1.2.3.4")

    assert digest == hash_identity("1.2.3.4")
    assert digest != hash_identity("1.2.3.5")
    assert len(digest) == 16
    assert "1.2.3.4" not in digest
