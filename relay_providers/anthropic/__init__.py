"""
Anthropic provider package.

Exports:
- AnthropicModel: chat model posting converted requests over HTTP
- to_anthropic_request / from_anthropic_request / from_anthropic_response: pure converters
"""

from .client import AnthropicModel
from .conversion import from_anthropic_request, from_anthropic_response, to_anthropic_request

__all__ = ["AnthropicModel", "to_anthropic_request", "from_anthropic_request", "from_anthropic_response"]
