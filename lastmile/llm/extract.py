"""JSON extraction from free-form model replies.

Models asked for "only JSON" still wrap the object in prose or markdown
fences. The extractor locates the first balanced-brace object and parses it,
without attempting any other repair.
"""

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def extract_json(text: str | None) -> Any | None:
    """Parse the first balanced-brace JSON object embedded in text.

    Args:
        text: Raw reply text, possibly surrounded by prose or fences

    Returns:
        Parsed value, or None when the input is empty, holds no "{",
        never balances, or the span is not valid JSON. Never raises.
    """
    if not text:
        return None

    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    end = -1
    for i in range(start, len(text)):
        char = text[i]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        if depth == 0:
            end = i
            break

    if end == -1:
        return None

    span = text[start : end + 1]
    try:
        return json.loads(span)
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse extracted JSON span: {e}", extra={"structured": {"span": span}})
        return None
