"""Global pytest configuration."""

import os

# Keep tests offline: never pick up real service credentials before any imports
for var in ("GEMINI_API_KEY", "OPENAI_API_KEY", "REDIS_URL"):
    os.environ.pop(var, None)
