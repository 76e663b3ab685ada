"""
Mistral chat-completions conversion.

Purpose:
    Canonical <-> Mistral wire conversion. Mistral follows the OpenAI shape
    with three differences: ``image_url`` is a bare URL string, tool messages
    carry the function ``name``, and reasoning travels as a ``thinking``
    content chunk (``{"type": "thinking", "thinking": [{"type": "text", ...}]}``)
    which maps to reasoning text in both directions.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Union

from ..base.conversion.plan import ConversionPlan
from ..base.conversion.policy import ConversionPolicy
from ..base.models import ModelRequest, ModelResponse, TextPart
from ..base.openai_style_parts import OpenAIStyleConverter, Routed
from ..base.usage import Usage, usage_from_mistral


class MistralConverter(OpenAIStyleConverter):
    provider_name = "mistral"
    include_tool_message_name = True
    image_url_as_string = True

    def encode_reasoning(self, part: TextPart, role: str, plan: ConversionPlan, where: str) -> Routed:
        return "content", {"type": "thinking", "thinking": [{"type": "text", "text": part.text}]}

    def extract_usage(self, payload: Dict[str, Any]) -> Usage:
        return usage_from_mistral(payload)


_CONVERTER = MistralConverter()


def to_mistral_request(
    request: ModelRequest,
    *,
    model: str,
    policy: Union[ConversionPolicy, str, None] = ConversionPolicy.STRICT,
    plan: Optional[ConversionPlan] = None,
) -> Dict[str, Any]:
    return _CONVERTER.to_request(request, model=model, policy=policy, plan=plan)


def from_mistral_request(payload: Dict[str, Any]) -> ModelRequest:
    return _CONVERTER.from_request(payload)


def from_mistral_response(payload: Dict[str, Any]) -> ModelResponse:
    return _CONVERTER.from_response(payload)


__all__ = ["MistralConverter", "to_mistral_request", "from_mistral_request", "from_mistral_response"]
