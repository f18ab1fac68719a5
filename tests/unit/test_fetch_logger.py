"""Tests for structured fetch logging."""

import logging

import pytest

from lastmile.utils.logging import FetchLogger


def test_success_logged_at_info(caplog: pytest.LogCaptureFixture) -> None:
    """Test that successful fetches log at INFO with structured data."""
    with caplog.at_level(logging.INFO, logger="lastmile.utils.logging"):
        FetchLogger().log_attempt("core", "Louvre", "success", 123.456, service="stub")

    record = caplog.records[-1]
    assert record.levelno == logging.INFO
    assert record.getMessage() == "Intel fetch: core - success"
    assert record.structured == {  # type: ignore[attr-defined]
        "stage": "core",
        "destination": "Louvre",
        "outcome": "success",
        "latency_ms": 123.46,
        "service": "stub",
    }


def test_degraded_logged_at_warning_with_reason(caplog: pytest.LogCaptureFixture) -> None:
    """Test that failures log at WARNING and carry the reason."""
    FetchLogger().log_attempt("deep", "Louvre", "degraded", 10.0, reason="malformed_response")

    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert record.structured["reason"] == "malformed_response"  # type: ignore[attr-defined]
    assert "service" not in record.structured  # type: ignore[attr-defined]
