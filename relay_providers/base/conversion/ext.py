"""Well-known ``ext`` keys shared by the converters.

Keys are ``"<namespace>.<key>"``. The ``reasoning`` and ``shadow`` namespaces
are vendor-neutral; the others hold vendor fields with no canonical slot so a
same-vendor round trip can restore them.
"""
from __future__ import annotations

# True on a TextPart that carries model reasoning ("thinking") rather than answer text.
REASONING_THINKING = "reasoning.thinking"

# Anthropic thinking-block signature. Not carried to other vendors.
ANTHROPIC_SIGNATURE = "anthropic.signature"
# Anthropic tool_result ``is_error`` flag, on the ToolResultPart.
ANTHROPIC_IS_ERROR = "anthropic.is_error"

# Gemini ``thoughtSignature`` attached to a part.
GEMINI_THOUGHT_SIGNATURE = "gemini.thought_signature"
# TextPart holding a vendor-authored functionResponse.response as JSON text.
GEMINI_RESPONSE_JSON = "gemini.response_json"
# Marks code-execution parts: "executable_code" or "code_execution_result".
GEMINI_KIND = "gemini.kind"
# Gemini codeExecutionResult outcome (e.g. OUTCOME_OK).
GEMINI_OUTCOME = "gemini.outcome"

# Extra (non-text) fields of an OpenRouter reasoning_details entry.
OPENROUTER_REASONING_DETAIL = "openrouter.reasoning_detail"

# OpenAI-family assistant refusal text.
OPENAI_REFUSAL = "openai.refusal"
# OpenAI-family image_url ``detail`` hint ("low", "high", "auto").
OPENAI_IMAGE_DETAIL = "openai.image_detail"

# Original canonical type of a placeholder produced under shadow policy.
SHADOW_ORIGINAL_TYPE = "shadow.original_type"


def is_reasoning(part) -> bool:
    """Return True when ``part`` is reasoning text."""
    return getattr(part, "type", None) == "text" and bool(part.ext.get(REASONING_THINKING))


__all__ = [
    "REASONING_THINKING",
    "ANTHROPIC_SIGNATURE",
    "ANTHROPIC_IS_ERROR",
    "GEMINI_THOUGHT_SIGNATURE",
    "GEMINI_RESPONSE_JSON",
    "GEMINI_KIND",
    "GEMINI_OUTCOME",
    "OPENROUTER_REASONING_DETAIL",
    "OPENAI_REFUSAL",
    "OPENAI_IMAGE_DETAIL",
    "SHADOW_ORIGINAL_TYPE",
    "is_reasoning",
]
