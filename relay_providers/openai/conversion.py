"""
OpenAI chat-completions conversion.

Purpose:
    Canonical <-> OpenAI wire conversion. OpenAI has no reasoning input slot,
    so reasoning text is sent as ordinary content with a plan warning; the
    assistant ``refusal`` field and ``image_url.detail`` survive round trips
    through the ``openai.*`` ext keys.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Union

from ..base.conversion.plan import ConversionPlan
from ..base.conversion.policy import ConversionPolicy
from ..base.models import ModelRequest, ModelResponse
from ..base.openai_style_parts import OpenAIStyleConverter
from ..base.usage import Usage, usage_from_openai


class OpenAIConverter(OpenAIStyleConverter):
    provider_name = "openai"

    def extract_usage(self, payload: Dict[str, Any]) -> Usage:
        return usage_from_openai(payload)


_CONVERTER = OpenAIConverter()


def to_openai_request(
    request: ModelRequest,
    *,
    model: str,
    policy: Union[ConversionPolicy, str, None] = ConversionPolicy.STRICT,
    plan: Optional[ConversionPlan] = None,
) -> Dict[str, Any]:
    return _CONVERTER.to_request(request, model=model, policy=policy, plan=plan)


def from_openai_request(payload: Dict[str, Any]) -> ModelRequest:
    return _CONVERTER.from_request(payload)


def from_openai_response(payload: Dict[str, Any]) -> ModelResponse:
    return _CONVERTER.from_response(payload)


__all__ = ["OpenAIConverter", "to_openai_request", "from_openai_request", "from_openai_response"]
