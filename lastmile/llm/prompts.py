"""Prompt builders for the core and deep trip queries."""

_JSON_ONLY = (
    "**CRITICAL**: Your entire response MUST be a single, valid JSON object. "
    "Do not include markdown, comments, or any text outside of the JSON structure."
)

_NEVER_EMPTY = (
    "**CRITICAL**: If the tools do not provide enough information, you MUST still return "
    "the complete JSON structure with reasonable default values for the missing fields. "
    "NEVER return an empty response."
)

_NO_ZERO_TIMES = (
    '**CRITICAL**: Do NOT return 0 for "driveTimeMins" or "walkTimeMins". '
    "Provide a realistic estimate if a precise value is unavailable."
)

_CORE_SHAPE = """{
  "destination": "Name of Place",
  "isOpenAtArrival": boolean,
  "closingTime": "HH:MM AM/PM",
  "nextOpeningTime": "HH:MM AM/PM",
  "driving": {
    "driveTimeMins": number,
    "trafficStatus": "Clear" | "Moderate" | "Heavy" | "Gridlock"
  },
  "walking": {
    "walkTimeMins": number
  }
}"""

_DEEP_SHAPE = """{
  "driving": {
    "trafficTrend": "improving" | "stable" | "worsening",
    "parkingOptions": [
      { "name": "Exact Lot Name", "walkTimeMins": number, "entranceType": "Gate" | "Garage" | "Entrance" }
    ]
  },
  "walking": {
    "temperature": number,
    "weatherCondition": "String",
    "weatherAlert": "String or null",
    "isRecommended": boolean,
    "recommendationReason": "String"
  }
}"""

_DEEP_FIELD_NOTES = """Field notes:
- "temperature": the current temperature in Celsius at the destination.
- "weatherCondition": a one-or-two-word description such as "Sunny", "Light Rain", "Cloudy".
- "weatherAlert": a short alert for severe conditions (e.g. "Hail Warning"), or null if none.
- "isRecommended": based on the weather, is walking a good idea?
- "recommendationReason": a short reason (e.g. "Heavy Rain", "Pleasant Weather")."""


def build_core_prompt(destination: str, lat: float, lng: float) -> str:
    """Build the fast query: ETAs, traffic and opening status."""
    return "\n\n".join(
        [
            f'Analyze a trip to "{destination}" from ({lat}, {lng}) using map lookups.',
            _JSON_ONLY,
            _NO_ZERO_TIMES,
            _NEVER_EMPTY,
            "The JSON object MUST conform to this exact structure:",
            _CORE_SHAPE,
        ]
    )


def build_deep_prompt(destination: str, lat: float, lng: float) -> str:
    """Build the enrichment query: weather, parking and traffic trend."""
    return "\n\n".join(
        [
            f'Find deep details for "{destination}" at ({lat}, {lng}) '
            "using web search and map lookups.",
            _JSON_ONLY,
            _NEVER_EMPTY,
            "The JSON object MUST conform to this exact structure:",
            _DEEP_SHAPE,
            _DEEP_FIELD_NOTES,
        ]
    )
