"""Gemini chat model (``POST {base_url}/models/{model}:generateContent``).

The API key travels in the ``x-goog-api-key`` header rather than the query
string so it never appears in logged URLs.
"""

from __future__ import annotations

from typing import Dict

from ..base.chat_model import ChatModel


class GeminiModel(ChatModel):
    provider_name = "gemini"

    def endpoint(self) -> str:
        model = str(self._model or "")
        if not model.startswith("models/"):
            model = f"models/{model}"
        return f"/{model}:generateContent"

    def auth_headers(self) -> Dict[str, str]:
        return {"x-goog-api-key": str(self._api_key)}


__all__ = ["GeminiModel"]
