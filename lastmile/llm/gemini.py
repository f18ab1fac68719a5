"""Gemini-backed reasoning service with Maps and Search grounding."""

from typing import Any

from google import genai
from google.genai import types

from lastmile.llm.client import Capability, ReasoningReply, ReasoningRequest


class GeminiReasoningService:
    """Reasoning service backed by the google-genai SDK."""

    name = "gemini"

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash", timeout_s: int = 60):
        """Initialize Gemini client.

        Args:
            api_key: Gemini API key (read from environment)
            model: Model name to use
            timeout_s: Per-request timeout in seconds
        """
        self.client = genai.Client(
            api_key=api_key,
            http_options={"timeout": timeout_s * 1000},
        )
        self.model = model

    async def generate(self, request: ReasoningRequest) -> ReasoningReply:
        """Generate content with the requested grounding tools."""
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=request.prompt,
            config=self._build_config(request),
        )
        return ReasoningReply(text=response.text, grounding_chunks=self._grounding_chunks(response))

    def _build_config(self, request: ReasoningRequest) -> types.GenerateContentConfig:
        """Translate capabilities and location into a GenerateContentConfig."""
        tools: list[types.Tool] = []
        if Capability.MAPS in request.capabilities:
            tools.append(types.Tool(google_maps=types.GoogleMaps()))
        if Capability.WEB_SEARCH in request.capabilities:
            tools.append(types.Tool(google_search=types.GoogleSearch()))

        tool_config = None
        if request.location is not None:
            tool_config = types.ToolConfig(
                retrieval_config=types.RetrievalConfig(
                    lat_lng=types.LatLng(
                        latitude=request.location.lat,
                        longitude=request.location.lon,
                    )
                )
            )

        return types.GenerateContentConfig(
            tools=tools or None,
            tool_config=tool_config,
            temperature=request.temperature,
        )

    def _grounding_chunks(self, response: types.GenerateContentResponse) -> list[dict[str, Any]]:
        """Flatten grounding chunks of the first candidate into plain dicts."""
        if not response.candidates:
            return []
        metadata = response.candidates[0].grounding_metadata
        if metadata is None or not metadata.grounding_chunks:
            return []
        return [chunk.model_dump(exclude_none=True) for chunk in metadata.grounding_chunks]
