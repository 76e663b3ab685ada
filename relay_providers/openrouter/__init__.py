"""
OpenRouter provider package.

Exports:
- OpenRouterModel: chat model posting converted requests over HTTP
- to_openrouter_request / from_openrouter_request / from_openrouter_response: pure converters
"""

from .client import OpenRouterModel
from .conversion import from_openrouter_request, from_openrouter_response, to_openrouter_request

__all__ = ["OpenRouterModel", "to_openrouter_request", "from_openrouter_request", "from_openrouter_response"]
