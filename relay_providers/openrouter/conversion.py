"""
OpenRouter chat-completions conversion.

Purpose:
    Canonical <-> OpenRouter wire conversion. OpenRouter speaks the OpenAI
    shape and additionally carries model reasoning on assistant messages:

    - ``reasoning_details``: a list of entries such as
      ``{"type": "reasoning.text", "text": "..."}`` or
      ``{"type": "reasoning.summary", "summary": "..."}``. Entries with text
      map to reasoning TextParts; any fields beyond the text (signature,
      format, a non-default type) are kept under ``openrouter.reasoning_detail``
      so the entry is rebuilt verbatim. Entries without text (for example
      ``reasoning.encrypted``) become OpaqueParts.
    - ``reasoning``: a plain string used by some models when no details are
      present.

    Tool messages carry the function ``name``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from ..base.conversion.ext import OPENROUTER_REASONING_DETAIL, REASONING_THINKING
from ..base.conversion.plan import ConversionPlan
from ..base.conversion.policy import ConversionPolicy
from ..base.errors import MessageConversionError
from ..base.models import ModelRequest, ModelResponse, OpaquePart, Part, TextPart
from ..base.openai_style_parts import TEXT_EXT_HANDLED, OpenAIStyleConverter, Routed
from ..base.usage import Usage, usage_from_openrouter

_DEFAULT_DETAIL_TYPE = "reasoning.text"


def _text_key(detail_type: str) -> str:
    return "summary" if detail_type == "reasoning.summary" else "text"


class OpenRouterConverter(OpenAIStyleConverter):
    provider_name = "openrouter"
    include_tool_message_name = True
    text_ext_handled = TEXT_EXT_HANDLED + (OPENROUTER_REASONING_DETAIL,)

    def encode_reasoning(self, part: TextPart, role: str, plan: ConversionPlan, where: str) -> Routed:
        if role != "assistant":
            return super().encode_reasoning(part, role, plan, where)
        detail: Dict[str, Any] = dict(part.ext.get(OPENROUTER_REASONING_DETAIL) or {"type": _DEFAULT_DETAIL_TYPE})
        detail[_text_key(str(detail.get("type")))] = part.text
        return "reasoning", detail

    def encode_opaque(self, part: OpaquePart) -> Routed:
        if part.kind.startswith("reasoning."):
            return "reasoning", part.payload
        return "content", part.payload

    def finalize_request(self, payload: Dict[str, Any], request: ModelRequest, plan: ConversionPlan) -> None:
        if any(m.get("reasoning_details") for m in payload["messages"]):
            payload["include_reasoning"] = True

    def decode_reasoning(self, wire: Dict[str, Any]) -> List[Part]:
        details = wire.get("reasoning_details")
        if isinstance(details, list) and details:
            return [self._decode_detail(entry) for entry in details]
        reasoning = wire.get("reasoning")
        if isinstance(reasoning, str) and reasoning:
            return [TextPart(text=reasoning, ext={REASONING_THINKING: True})]
        return []

    def _decode_detail(self, entry: Any) -> Part:
        if not isinstance(entry, dict):
            raise MessageConversionError("reasoning_details entry is not an object", self.provider_name)
        detail_type = str(entry.get("type") or _DEFAULT_DETAIL_TYPE)
        key = _text_key(detail_type)
        text = entry.get(key)
        if not isinstance(text, str):
            return OpaquePart(provider=self.provider_name, kind=detail_type, payload=entry)
        ext: Dict[str, Any] = {REASONING_THINKING: True}
        extra = {k: v for k, v in entry.items() if k != key}
        if extra != {"type": _DEFAULT_DETAIL_TYPE}:
            ext[OPENROUTER_REASONING_DETAIL] = extra
        return TextPart(text=text, ext=ext)

    def extract_usage(self, payload: Dict[str, Any]) -> Usage:
        return usage_from_openrouter(payload)


_CONVERTER = OpenRouterConverter()


def to_openrouter_request(
    request: ModelRequest,
    *,
    model: str,
    policy: Union[ConversionPolicy, str, None] = ConversionPolicy.STRICT,
    plan: Optional[ConversionPlan] = None,
) -> Dict[str, Any]:
    return _CONVERTER.to_request(request, model=model, policy=policy, plan=plan)


def from_openrouter_request(payload: Dict[str, Any]) -> ModelRequest:
    return _CONVERTER.from_request(payload)


def from_openrouter_response(payload: Dict[str, Any]) -> ModelResponse:
    return _CONVERTER.from_response(payload)


__all__ = [
    "OpenRouterConverter",
    "to_openrouter_request",
    "from_openrouter_request",
    "from_openrouter_response",
]
