"""
Gemini provider package.

Exports:
- GeminiModel: chat model posting converted requests over HTTP
- to_gemini_request / from_gemini_request / from_gemini_response: pure converters
"""

from .client import GeminiModel
from .conversion import CODE_INTERPRETER, from_gemini_request, from_gemini_response, to_gemini_request

__all__ = ["GeminiModel", "CODE_INTERPRETER", "to_gemini_request", "from_gemini_request", "from_gemini_response"]
