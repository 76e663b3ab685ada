"""Conversion planning, policies and the converter registry.

Re-exports the public pieces from ``ext``, ``policy``, ``plan``, ``planner``
and ``registry`` so callers import from one place.
"""

from .ext import (
    ANTHROPIC_IS_ERROR,
    ANTHROPIC_SIGNATURE,
    GEMINI_KIND,
    GEMINI_OUTCOME,
    GEMINI_RESPONSE_JSON,
    GEMINI_THOUGHT_SIGNATURE,
    OPENAI_IMAGE_DETAIL,
    OPENAI_REFUSAL,
    OPENROUTER_REASONING_DETAIL,
    REASONING_THINKING,
    SHADOW_ORIGINAL_TYPE,
    is_reasoning,
)
from .plan import ConversionPlan, TransformAction
from .planner import (
    check_part,
    gate_part,
    log_plan_outcome,
    note_blob_metadata_dropped,
    note_ext_dropped,
    note_tool_role_demoted,
    plan_request,
)
from .policy import ConversionPolicy
from .registry import ProviderConverter, converter_names, get_converter, relay_request

__all__ = [
    "ANTHROPIC_IS_ERROR",
    "ANTHROPIC_SIGNATURE",
    "GEMINI_KIND",
    "GEMINI_OUTCOME",
    "GEMINI_RESPONSE_JSON",
    "GEMINI_THOUGHT_SIGNATURE",
    "OPENAI_IMAGE_DETAIL",
    "OPENAI_REFUSAL",
    "OPENROUTER_REASONING_DETAIL",
    "REASONING_THINKING",
    "SHADOW_ORIGINAL_TYPE",
    "is_reasoning",
    "ConversionPlan",
    "TransformAction",
    "ConversionPolicy",
    "check_part",
    "gate_part",
    "plan_request",
    "note_blob_metadata_dropped",
    "note_ext_dropped",
    "note_tool_role_demoted",
    "log_plan_outcome",
    "ProviderConverter",
    "converter_names",
    "get_converter",
    "relay_request",
]
