"""Reasoning service interface and provider selection.

Security: API keys come from settings (environment) only, never hardcoded.
Provides a deterministic stub when no key is configured so the planner runs
end to end offline and in tests.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from lastmile.config import Settings, get_settings
from lastmile.models.common import Geo

logger = logging.getLogger(__name__)


class Capability(str, Enum):
    """Tools the reasoning service may use while answering."""

    MAPS = "maps"
    WEB_SEARCH = "web_search"


@dataclass(frozen=True)
class ReasoningRequest:
    """Single instruction sent to the reasoning service."""

    prompt: str
    capabilities: frozenset[Capability] = frozenset()
    location: Geo | None = None
    temperature: float = 0.0


@dataclass
class ReasoningReply:
    """Raw reply: free text plus the provider's citation chunks.

    Each chunk is a dict keyed by its kind, e.g. ``{"maps": {"title", "uri"}}``
    or ``{"web": {"title", "uri"}}``. Other kinds are passed through untouched.
    """

    text: str | None
    grounding_chunks: list[dict[str, Any]] = field(default_factory=list)


class ReasoningService(Protocol):
    """Protocol for reasoning service implementations."""

    name: str

    async def generate(self, request: ReasoningRequest) -> ReasoningReply:
        """Send one instruction and return the raw reply.

        Args:
            request: Prompt, tool capabilities, grounding location, temperature

        Returns:
            ReasoningReply; text may be empty or malformed

        Raises:
            Exception: Provider/network errors propagate to the caller
        """
        ...


_STUB_CORE = {
    "isOpenAtArrival": True,
    "closingTime": "9:00 PM",
    "nextOpeningTime": None,
    "driving": {"driveTimeMins": 18, "trafficStatus": "Moderate"},
    "walking": {"walkTimeMins": 6},
}

_STUB_DEEP = {
    "driving": {
        "trafficTrend": "stable",
        "parkingOptions": [
            {"name": "Main Street Garage", "walkTimeMins": 4, "entranceType": "Garage"},
            {"name": "North Lot", "walkTimeMins": 7, "entranceType": "Gate"},
        ],
    },
    "walking": {
        "temperature": 18,
        "weatherCondition": "Cloudy",
        "weatherAlert": None,
        "isRecommended": True,
        "recommendationReason": "Pleasant Weather",
    },
}


class DeterministicStubService:
    """Deterministic stub service for testing (no API key required).

    Answers the deep shape when web search is requested, the core shape
    otherwise. The core reply leaves out the destination name so callers fall
    back to the user's own text.
    """

    name = "stub"

    async def generate(self, request: ReasoningRequest) -> ReasoningReply:
        """Return a fixed, fenced JSON reply."""
        payload = _STUB_DEEP if Capability.WEB_SEARCH in request.capabilities else _STUB_CORE
        text = f"```json\n{json.dumps(payload, indent=2)}\n```"
        return ReasoningReply(text=text, grounding_chunks=[])


async def get_reasoning_service(settings: Settings | None = None) -> ReasoningService:
    """Factory function to get the reasoning service based on config.

    Returns:
        GeminiReasoningService if a Gemini key is configured, else
        OpenAIReasoningService if an OpenAI key is configured, else
        DeterministicStubService
    """
    settings = settings or get_settings()

    if settings.gemini_api_key and settings.gemini_api_key.get_secret_value():
        from lastmile.llm.gemini import GeminiReasoningService

        logger.info(f"Using Gemini reasoning service ({settings.gemini_model})")
        return GeminiReasoningService(
            api_key=settings.gemini_api_key.get_secret_value(),
            model=settings.gemini_model,
            timeout_s=settings.reasoning_timeout_s,
        )

    if settings.openai_api_key and settings.openai_api_key.get_secret_value():
        from lastmile.llm.openai_client import OpenAIReasoningService

        logger.info(f"Using OpenAI reasoning service ({settings.openai_model})")
        return OpenAIReasoningService(
            api_key=settings.openai_api_key.get_secret_value(),
            model=settings.openai_model,
            timeout_s=settings.reasoning_timeout_s,
        )

    logger.warning("No reasoning API key configured, using deterministic stub service")
    return DeterministicStubService()
