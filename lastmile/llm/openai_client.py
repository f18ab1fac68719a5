"""OpenAI-backed reasoning service.

Web search maps onto the Responses API ``web_search_preview`` tool and its
``url_citation`` annotations. OpenAI has no map lookup tool, so MAPS is
requested through the prompt alone.
"""

from typing import Any

from openai import AsyncOpenAI

from lastmile.llm.client import Capability, ReasoningReply, ReasoningRequest


class OpenAIReasoningService:
    """Reasoning service backed by the OpenAI Responses API."""

    name = "openai"

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", timeout_s: int = 60):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (read from environment)
            model: Model name to use (default: gpt-4o-mini for cost efficiency)
            timeout_s: Per-request timeout in seconds
        """
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout_s)
        self.model = model

    async def generate(self, request: ReasoningRequest) -> ReasoningReply:
        """Generate a reply, with web search when requested."""
        kwargs: dict[str, Any] = {
            "model": self.model,
            "input": request.prompt,
            "temperature": request.temperature,
        }
        if Capability.WEB_SEARCH in request.capabilities:
            kwargs["tools"] = [{"type": "web_search_preview"}]

        response = await self.client.responses.create(**kwargs)
        return ReasoningReply(text=response.output_text, grounding_chunks=self._citations(response))

    def _citations(self, response: Any) -> list[dict[str, Any]]:
        """Collect url_citation annotations as web grounding chunks."""
        chunks: list[dict[str, Any]] = []
        for item in response.output or []:
            if getattr(item, "type", None) != "message":
                continue
            for part in item.content or []:
                for annotation in getattr(part, "annotations", None) or []:
                    if getattr(annotation, "type", None) == "url_citation":
                        chunks.append({"web": {"title": annotation.title, "uri": annotation.url}})
        return chunks
