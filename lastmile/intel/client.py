"""Trip intelligence client: the core and deep reasoning-service queries.

The two queries fail differently. Core fields (ETA, opening status) are
required for a result, so core failures are raised to the caller. Deep fields
(weather, parking, trend) are enrichment, so every deep failure is logged and
replaced by an empty result.
"""

import logging
import time
from typing import Any

from pydantic import ValidationError

from lastmile.intel.errors import (
    EmptyResponseError,
    IntelError,
    InvalidTimeValuesError,
    MalformedResponseError,
)
from lastmile.llm.client import Capability, ReasoningRequest, ReasoningService
from lastmile.llm.extract import extract_json
from lastmile.llm.prompts import build_core_prompt, build_deep_prompt
from lastmile.models.common import Geo
from lastmile.models.intel import CoreIntel, DeepIntel
from lastmile.models.trip import GroundingSource
from lastmile.utils.logging import FetchLogger
from lastmile.utils.metrics import PrometheusIntelMetrics

logger = logging.getLogger(__name__)

_TIME_FIELDS = ("driveTimeMins", "walkTimeMins")

# Citation kind -> title used when the service omits one
_CHUNK_KINDS = {"maps": "Map", "web": "Web"}


def project_grounding_sources(chunks: list[dict[str, Any]]) -> list[GroundingSource]:
    """Project raw citation chunks into title/uri pairs.

    Maps and web chunks are kept in order, with "Map"/"Web" as the default
    title. Chunks of any other kind, or without a uri, are dropped.
    """
    sources: list[GroundingSource] = []
    for chunk in chunks:
        for kind, default_title in _CHUNK_KINDS.items():
            body = chunk.get(kind)
            if not isinstance(body, dict):
                continue
            uri = body.get("uri")
            if uri:
                sources.append(GroundingSource(title=body.get("title") or default_title, uri=uri))
            break
    return sources


def _section(parsed: dict[str, Any], key: str) -> dict[str, Any]:
    """Return parsed[key] as a dict, replacing anything else with {}."""
    value = parsed.get(key)
    if not isinstance(value, dict):
        value = {}
        parsed[key] = value
    return value


class TripIntelligenceClient:
    """Issues the core and deep queries for a destination."""

    def __init__(
        self,
        service: ReasoningService,
        *,
        temperature: float = 0.0,
        fetch_logger: FetchLogger | None = None,
        metrics: PrometheusIntelMetrics | None = None,
    ) -> None:
        """Initialize client.

        Args:
            service: Reasoning service handle
            temperature: Sampling temperature (0.0 for deterministic output)
            fetch_logger: Structured fetch logger
            metrics: Prometheus metrics sink
        """
        self.service = service
        self.temperature = temperature
        self._fetch_logger = fetch_logger or FetchLogger()
        self._metrics = metrics or PrometheusIntelMetrics()

    async def fetch_core(self, destination: str, lat: float, lng: float) -> CoreIntel:
        """Fetch ETAs, traffic status and opening status.

        Raises:
            EmptyResponseError: Reply text absent or blank
            MalformedResponseError: No JSON object, or wrong shape
            InvalidTimeValuesError: Drive or walk time missing or zero
            Exception: Reasoning service errors propagate unchanged
        """
        started = time.perf_counter()
        try:
            core = await self._fetch_core(destination, lat, lng)
        except IntelError as e:
            self._record("core", destination, started, "error", e.reason)
            raise
        except Exception:
            logger.exception(f"Core service error for {destination!r}")
            self._record("core", destination, started, "error", "service_error")
            raise

        self._record("core", destination, started, "success")
        return core

    async def fetch_deep(self, destination: str, lat: float, lng: float) -> DeepIntel:
        """Fetch weather, parking and traffic trend. Never raises.

        Returns:
            Parsed enrichment with grounding sources, or an empty DeepIntel
            when the reply is empty, malformed or the service fails
        """
        started = time.perf_counter()
        try:
            deep = await self._fetch_deep(destination, lat, lng)
        except Exception as e:
            reason = e.reason if isinstance(e, IntelError) else "service_error"
            logger.error(f"Deep analysis degraded for {destination!r} ({reason}): {e}")
            self._record("deep", destination, started, "degraded", reason)
            return DeepIntel(grounding_sources=[])

        self._record("deep", destination, started, "success")
        return deep

    async def _fetch_core(self, destination: str, lat: float, lng: float) -> CoreIntel:
        request = ReasoningRequest(
            prompt=build_core_prompt(destination, lat, lng),
            capabilities=frozenset({Capability.MAPS}),
            temperature=self.temperature,
        )
        reply = await self.service.generate(request)

        if not reply.text or not reply.text.strip():
            logger.error("Core analysis failure: reasoning service returned an empty text response")
            raise EmptyResponseError("Empty response from reasoning service")

        parsed = extract_json(reply.text)
        if not isinstance(parsed, dict):
            logger.error(f"Core analysis failure: reply did not contain a JSON object: {reply.text!r}")
            raise MalformedResponseError("Reply did not contain a JSON object")

        driving = _section(parsed, "driving")
        walking = _section(parsed, "walking")

        status = driving.get("trafficStatus")
        if not isinstance(status, str) or status.strip().lower() == "unknown":
            driving["trafficStatus"] = "Moderate"

        if not driving.get("driveTimeMins") or not walking.get("walkTimeMins"):
            logger.error(f"Core analysis failure: missing or zero time values: {parsed!r}")
            raise InvalidTimeValuesError("Missing or zero time values")

        try:
            return CoreIntel.model_validate(parsed)
        except ValidationError as e:
            bad_fields = {str(part) for error in e.errors() for part in error["loc"]}
            if bad_fields.intersection(_TIME_FIELDS):
                raise InvalidTimeValuesError(f"Invalid time values: {e.error_count()} error(s)") from e
            raise MalformedResponseError(f"Core reply failed schema validation: {e}") from e

    async def _fetch_deep(self, destination: str, lat: float, lng: float) -> DeepIntel:
        request = ReasoningRequest(
            prompt=build_deep_prompt(destination, lat, lng),
            capabilities=frozenset({Capability.MAPS, Capability.WEB_SEARCH}),
            location=Geo(lat=lat, lon=lng),
            temperature=self.temperature,
        )
        reply = await self.service.generate(request)

        if not reply.text or not reply.text.strip():
            raise EmptyResponseError("Empty response from reasoning service")

        parsed = extract_json(reply.text)
        if not isinstance(parsed, dict):
            raise MalformedResponseError(f"Reply did not contain a JSON object: {reply.text!r}")

        # Sources come from the citation chunks, never from the reply body
        parsed.pop("groundingSources", None)
        parsed.pop("grounding_sources", None)

        try:
            deep = DeepIntel.model_validate(parsed)
        except ValidationError as e:
            raise MalformedResponseError(f"Deep reply failed schema validation: {e}") from e

        return deep.model_copy(
            update={"grounding_sources": project_grounding_sources(reply.grounding_chunks)}
        )

    def _record(
        self,
        stage: str,
        destination: str,
        started: float,
        outcome: str,
        reason: str | None = None,
    ) -> None:
        latency_ms = (time.perf_counter() - started) * 1000
        self._fetch_logger.log_attempt(
            stage, destination, outcome, latency_ms, service=self.service.name, reason=reason
        )
        self._metrics.record_fetch(stage, outcome, latency_ms)
        if reason:
            self._metrics.inc_fetch_error(stage, reason)
