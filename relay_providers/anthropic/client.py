"""Anthropic chat model (``POST {base_url}/messages``).

Authentication uses ``x-api-key`` plus the pinned ``anthropic-version``
header. ``max_tokens`` is mandatory on this API and comes from the provider
config (``ANTHROPIC_MAX_TOKENS`` or the config file).
"""

from __future__ import annotations

from typing import Any, Dict

from ..base.chat_model import ChatModel
from ..base.conversion.plan import ConversionPlan
from ..base.models import ModelRequest
from ..config.defaults import ANTHROPIC_API_VERSION, ANTHROPIC_DEFAULT_MAX_TOKENS


class AnthropicModel(ChatModel):
    provider_name = "anthropic"

    def endpoint(self) -> str:
        return "/messages"

    def auth_headers(self) -> Dict[str, str]:
        return {"x-api-key": str(self._api_key), "anthropic-version": ANTHROPIC_API_VERSION}

    def build_payload(self, request: ModelRequest, plan: ConversionPlan) -> Dict[str, Any]:
        max_tokens = int(self._config.get("max_tokens") or ANTHROPIC_DEFAULT_MAX_TOKENS)
        return self._converter.to_request(request, model=self._model, plan=plan, max_tokens=max_tokens)


__all__ = ["AnthropicModel"]
