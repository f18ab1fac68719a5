"""Failure taxonomy for trip intelligence queries."""


class IntelError(Exception):
    """Base class for reasoning-service reply failures."""

    reason = "intel_error"


class EmptyResponseError(IntelError):
    """Reasoning service returned no text."""

    reason = "empty_response"


class MalformedResponseError(IntelError):
    """Reply text held no parseable JSON object of the expected shape."""

    reason = "malformed_response"


class InvalidTimeValuesError(IntelError):
    """Required drive/walk times were missing or zero."""

    reason = "invalid_time_values"
