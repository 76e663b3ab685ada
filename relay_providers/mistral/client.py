"""Mistral chat model (``POST {base_url}/chat/completions``)."""

from __future__ import annotations

from ..base.chat_model import ChatModel


class MistralModel(ChatModel):
    provider_name = "mistral"


__all__ = ["MistralModel"]
