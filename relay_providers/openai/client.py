"""OpenAI chat model (``POST {base_url}/chat/completions``)."""

from __future__ import annotations

from ..base.chat_model import ChatModel


class OpenAIModel(ChatModel):
    provider_name = "openai"


__all__ = ["OpenAIModel"]
