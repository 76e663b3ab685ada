"""Token usage extraction helpers.

Map each vendor's usage block onto the canonical :class:`Usage` value. Every
helper accepts either the whole response (mapping or attribute object) or
anything exposing the vendor's usage attribute, and never raises on missing
or malformed counts.

Vendor field mapping
--------------------
OpenAI / OpenRouter / Mistral (chat completions):
    ``usage.prompt_tokens`` -> input[text]
    ``usage.completion_tokens`` -> output[text]
    ``usage.prompt_tokens_details.cached_tokens`` -> cache[text], cache_read
    ``usage.completion_tokens_details.reasoning_tokens`` -> details
Anthropic (messages):
    ``usage.input_tokens`` -> input[text]
    ``usage.output_tokens`` -> output[text]
    ``usage.cache_read_input_tokens`` -> cache_read
    ``usage.cache_creation_input_tokens`` -> cache_creation
Gemini (generateContent):
    ``usageMetadata.promptTokenCount`` -> input[text]
    ``usageMetadata.candidatesTokenCount`` -> output[text]
    ``usageMetadata.cachedContentTokenCount`` -> cache[text], cache_read
    ``usageMetadata.toolUsePromptTokenCount`` -> tool[text]
    ``usageMetadata.thoughtsTokenCount`` -> thoughts

Failure Modes
-------------
* Missing usage block -> empty :class:`Usage` (``requests == 0``)
* Non-integer / negative counts -> treated as absent
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .usage import Modality, Usage


def _coerce_int(value: Any) -> Optional[int]:
    """Coerce arbitrary value to a non-negative ``int`` or ``None``."""
    if value is None or isinstance(value, bool):
        return None
    try:
        iv = int(value)
    except (TypeError, ValueError):
        return None
    return iv if iv >= 0 else None


def _field(obj: Any, name: str) -> Any:
    """Read ``name`` from a mapping or attribute object."""
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _usage_block(raw: Any, attr: str, known: tuple) -> Any:
    """Return the usage block from a response, or ``raw`` itself when it already is one.

    Returns ``None`` when no known counter is present.
    """
    block = _field(raw, attr)
    if block is None:
        block = raw
    if not any(_field(block, k) is not None for k in known):
        return None
    return block


def _chat_completions_usage(raw: Any, known: tuple) -> Usage:
    block = _usage_block(raw, "usage", known)
    if block is None:
        return Usage()
    usage = Usage(requests=1)
    prompt = _coerce_int(_field(block, "prompt_tokens"))
    completion = _coerce_int(_field(block, "completion_tokens"))
    if prompt is not None:
        usage.add_input(Modality.TEXT, prompt)
    if completion is not None:
        usage.add_output(Modality.TEXT, completion)
    cached = _coerce_int(_field(_field(block, "prompt_tokens_details"), "cached_tokens"))
    if cached:
        usage.add_cache(Modality.TEXT, cached)
        usage.cache_read_tokens = cached
    reasoning = _coerce_int(_field(_field(block, "completion_tokens_details"), "reasoning_tokens"))
    if reasoning:
        # Already counted inside completion_tokens; kept for cost reporting only.
        usage.details = {"reasoning_tokens": reasoning}
    return usage


_CHAT_KEYS = ("prompt_tokens", "completion_tokens", "total_tokens")


def usage_from_openai(raw: Any) -> Usage:
    """Extract usage from an OpenAI chat-completions response."""
    return _chat_completions_usage(raw, _CHAT_KEYS)


def usage_from_openrouter(raw: Any) -> Usage:
    """Extract usage from an OpenRouter chat-completions response."""
    return _chat_completions_usage(raw, _CHAT_KEYS)


def usage_from_mistral(raw: Any) -> Usage:
    """Extract usage from a Mistral chat-completions response."""
    return _chat_completions_usage(raw, _CHAT_KEYS)


def usage_from_anthropic(raw: Any) -> Usage:
    """Extract usage from an Anthropic messages response."""
    block = _usage_block(raw, "usage", ("input_tokens", "output_tokens", "cache_read_input_tokens", "cache_creation_input_tokens"))
    if block is None:
        return Usage()
    usage = Usage(requests=1)
    usage.add_input(Modality.TEXT, _coerce_int(_field(block, "input_tokens")) or 0)
    usage.add_output(Modality.TEXT, _coerce_int(_field(block, "output_tokens")) or 0)
    usage.cache_read_tokens = _coerce_int(_field(block, "cache_read_input_tokens"))
    usage.cache_creation_tokens = _coerce_int(_field(block, "cache_creation_input_tokens"))
    return usage


def usage_from_gemini(raw: Any) -> Usage:
    """Extract usage from a Gemini ``generateContent`` response."""
    block = _usage_block(raw, "usageMetadata", ("promptTokenCount", "candidatesTokenCount", "totalTokenCount"))
    if block is None:
        return Usage()
    usage = Usage(requests=1)
    usage.add_input(Modality.TEXT, _coerce_int(_field(block, "promptTokenCount")) or 0)
    candidates = _coerce_int(_field(block, "candidatesTokenCount"))
    if candidates is not None:
        usage.add_output(Modality.TEXT, candidates)
    cached = _coerce_int(_field(block, "cachedContentTokenCount"))
    if cached is not None:
        usage.add_cache(Modality.TEXT, cached)
        usage.cache_read_tokens = cached
    tool = _coerce_int(_field(block, "toolUsePromptTokenCount"))
    if tool is not None:
        usage.add_tool(Modality.TEXT, tool)
    usage.thoughts_tokens = _coerce_int(_field(block, "thoughtsTokenCount"))
    return usage


__all__ = [
    "usage_from_openai",
    "usage_from_openrouter",
    "usage_from_mistral",
    "usage_from_anthropic",
    "usage_from_gemini",
]
