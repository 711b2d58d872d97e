"""
Claude Model Configuration

Translation runs in background sweeps, so it uses the cheaper model by default.
"""

import os

CLAUDE_MODEL_TRANSLATION = os.getenv("CLAUDE_MODEL_TRANSLATION", "claude-haiku-4-5-20251001")

# Article bodies and excerpts
CLAUDE_MODEL_CONTENT = os.getenv("CLAUDE_MODEL_CONTENT", "claude-sonnet-4-5-20250929")

TRANSLATION_MAX_TOKENS = 4000
