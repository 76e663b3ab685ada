"""
OpenAI provider package.

Exports:
- OpenAIModel: chat model posting converted requests over HTTP
- to_openai_request / from_openai_request / from_openai_response: pure converters
"""

from .client import OpenAIModel
from .conversion import from_openai_request, from_openai_response, to_openai_request

__all__ = ["OpenAIModel", "to_openai_request", "from_openai_request", "from_openai_response"]
