"""Token usage accounting package."""

from .usage import Modality, ModalityKey, Usage, modality_key
from .extraction import (
    usage_from_anthropic,
    usage_from_gemini,
    usage_from_mistral,
    usage_from_openai,
    usage_from_openrouter,
)

__all__ = [
    "Modality",
    "ModalityKey",
    "Usage",
    "modality_key",
    "usage_from_openai",
    "usage_from_openrouter",
    "usage_from_mistral",
    "usage_from_anthropic",
    "usage_from_gemini",
]
