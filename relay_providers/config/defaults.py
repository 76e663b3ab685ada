"""relay_providers.config.defaults
===============================

Central place for small, stable default values used across the
relay_providers package. These defaults can be overridden via environment
variables or external configuration, but provide sensible fallbacks for local
development and tests.

Module Purpose
--------------
- Provide a single import location for conservative default constants (no I/O).
- Keep converters and transport free of magic literals.

This module intentionally avoids importing from other relay_providers modules
to prevent circular dependencies. Only plain constants should live here.
"""

from __future__ import annotations

# ---- Tool-result codec ----
# Reserved top-level JSON key wrapping flattened tool results.
TOOL_RESULT_ENVELOPE_KEY = "ai_ox_tool_result"
# Maximum nesting depth accepted when decoding untrusted envelopes.
TOOL_RESULT_MAX_DEPTH = 64

# ---- Conversion ----
# Default conversion policy name ("strict" or "shadow_allowed").
CONVERSION_DEFAULT_POLICY = "strict"

# ---- HTTP transport ----
# Seconds allowed for one non-streaming chat request.
HTTP_DEFAULT_TIMEOUT_SECONDS = 120.0

# ---- Provider-specific sane defaults ----
# OpenAI defaults.
OPENAI_DEFAULT_MODEL = "gpt-4o-mini"
OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1"

# Anthropic defaults. The Messages API requires max_tokens on every request.
ANTHROPIC_DEFAULT_MODEL = "claude-sonnet-4-20250514"
ANTHROPIC_DEFAULT_BASE_URL = "https://api.anthropic.com/v1"
ANTHROPIC_API_VERSION = "2023-06-01"
ANTHROPIC_DEFAULT_MAX_TOKENS = 4096

# Gemini defaults.
GEMINI_DEFAULT_MODEL = "gemini-2.5-flash"
GEMINI_DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

# OpenRouter defaults.
OPENROUTER_DEFAULT_MODEL = "openrouter/auto"
OPENROUTER_DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"

# Mistral defaults.
MISTRAL_DEFAULT_MODEL = "mistral-small-latest"
MISTRAL_DEFAULT_BASE_URL = "https://api.mistral.ai/v1"
