"""Usage accounting: merge laws, totals and vendor extraction."""
from __future__ import annotations

from relay_providers.base.usage import (
    Modality,
    Usage,
    usage_from_anthropic,
    usage_from_gemini,
    usage_from_mistral,
    usage_from_openai,
)


def _usage(text_in: int, text_out: int, **kwargs) -> Usage:
    usage = Usage(requests=1, **kwargs)
    usage.add_input(Modality.TEXT, text_in)
    usage.add_output("text", text_out)
    return usage


def test_merge_sums_maps_and_optionals():
    a = _usage(10, 5, cache_read_tokens=3)
    a.add_input(Modality.IMAGE, 7)
    b = _usage(1, 2, thoughts_tokens=4)
    merged = a + b
    assert merged.requests == 2  # nosec B101
    assert merged.input_tokens_by_modality == {"text": 11, "image": 7}  # nosec B101
    assert merged.output_tokens() == 7  # nosec B101
    assert merged.cache_read_tokens == 3  # nosec B101
    assert merged.thoughts_tokens == 4  # nosec B101
    assert merged.cache_creation_tokens is None  # nosec B101
    assert merged.total_tokens() == 11 + 7 + 7 + 4  # nosec B101


def test_merge_is_associative_and_commutative():
    a = _usage(1, 2, cache_creation_tokens=1)
    b = _usage(3, 4)
    b.add_tool("text", 2)
    c = _usage(5, 6, thoughts_tokens=9)
    assert (a + b) + c == a + (b + c)  # nosec B101
    assert a + b == b + a  # nosec B101


def test_empty_usage_is_identity():
    a = _usage(2, 3, cache_read_tokens=1, details={"k": 1})
    assert a + Usage() == a  # nosec B101
    assert Usage() + a == a  # nosec B101


def test_details_merge_right_wins():
    a = Usage(details={"x": 1, "y": 1})
    b = Usage(details={"y": 2})
    assert (a + b).details == {"x": 1, "y": 2}  # nosec B101
    assert (Usage(details="left") + Usage()).details == "left"  # nosec B101


def test_sum_and_in_place_add():
    parts = [_usage(1, 1), _usage(2, 2), _usage(3, 3)]
    total = sum(parts)
    assert total.input_tokens() == 6 and total.requests == 3  # nosec B101
    running = Usage()
    for part in parts:
        running += part
    assert running == total  # nosec B101


def test_effective_input_and_cache_totals():
    usage = _usage(100, 0, cache_read_tokens=20, cache_creation_tokens=150)
    assert usage.effective_input_tokens() == 0  # nosec B101
    assert usage.total_cache_tokens() == 170  # nosec B101


def test_to_dict_omits_empty_fields():
    assert Usage().to_dict() == {"requests": 0}  # nosec B101
    assert _usage(1, 2).to_dict() == {  # nosec B101
        "requests": 1,
        "input_tokens_by_modality": {"text": 1},
        "output_tokens_by_modality": {"text": 2},
    }


def test_openai_extraction():
    usage = usage_from_openai(
        {
            "usage": {
                "prompt_tokens": 12,
                "completion_tokens": 30,
                "total_tokens": 42,
                "prompt_tokens_details": {"cached_tokens": 4},
                "completion_tokens_details": {"reasoning_tokens": 10},
            }
        }
    )
    assert usage.input_tokens() == 12 and usage.output_tokens() == 30  # nosec B101
    assert usage.cache_read_tokens == 4  # nosec B101
    assert usage.details == {"reasoning_tokens": 10}  # nosec B101
    assert usage.thoughts_tokens is None  # nosec B101


def test_anthropic_extraction():
    usage = usage_from_anthropic(
        {"usage": {"input_tokens": 8, "output_tokens": 3, "cache_creation_input_tokens": 2}}
    )
    assert usage.input_tokens() == 8 and usage.output_tokens() == 3  # nosec B101
    assert usage.cache_creation_tokens == 2 and usage.cache_read_tokens is None  # nosec B101


def test_gemini_extraction():
    usage = usage_from_gemini(
        {
            "usageMetadata": {
                "promptTokenCount": 5,
                "candidatesTokenCount": 6,
                "thoughtsTokenCount": 7,
                "toolUsePromptTokenCount": 1,
                "totalTokenCount": 19,
            }
        }
    )
    assert usage.thoughts_tokens == 7  # nosec B101
    assert usage.tool_tokens() == 1  # nosec B101
    assert usage.total_tokens() == 18  # nosec B101


def test_missing_or_malformed_usage_is_empty():
    assert usage_from_mistral({"choices": []}) == Usage()  # nosec B101
    bad = usage_from_openai({"usage": {"prompt_tokens": "lots", "completion_tokens": -1, "total_tokens": 3}})
    assert bad.requests == 1 and bad.input_tokens() == 0  # nosec B101
