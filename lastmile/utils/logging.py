"""Structured logging for intelligence fetches."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class FetchLogger:
    """Structured logger for reasoning-service fetches."""

    def log_attempt(
        self,
        stage: str,
        destination: str,
        outcome: str,
        latency_ms: float,
        service: str | None = None,
        reason: str | None = None,
    ) -> None:
        """Log one fetch with structured data."""
        log_data: dict[str, Any] = {
            "stage": stage,
            "destination": destination,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if service:
            log_data["service"] = service
        if reason:
            log_data["reason"] = reason

        log_msg = f"Intel fetch: {stage} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
