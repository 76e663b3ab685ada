"""OpenRouter chat model (OpenAI-compatible endpoint).

OpenRouter attributes traffic through the optional ``HTTP-Referer`` and
``X-Title`` headers; they are read from the provider config keys ``referer``
and ``title`` when present.
"""

from __future__ import annotations

from typing import Dict

from ..base.chat_model import ChatModel


class OpenRouterModel(ChatModel):
    provider_name = "openrouter"

    def auth_headers(self) -> Dict[str, str]:
        headers = super().auth_headers()
        if self._config.get("referer"):
            headers["HTTP-Referer"] = str(self._config["referer"])
        if self._config.get("title"):
            headers["X-Title"] = str(self._config["title"])
        return headers


__all__ = ["OpenRouterModel"]
