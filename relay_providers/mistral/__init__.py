"""
Mistral provider package.

Exports:
- MistralModel: chat model posting converted requests over HTTP
- to_mistral_request / from_mistral_request / from_mistral_response: pure converters
"""

from .client import MistralModel
from .conversion import from_mistral_request, from_mistral_response, to_mistral_request

__all__ = ["MistralModel", "to_mistral_request", "from_mistral_request", "from_mistral_response"]
