"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `relay_providers.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .provider_error import ProviderError
from .classification import classify_exception
from .conversion_errors import (
    ConversionError,
    UnsupportedContentError,
    UnsupportedMimeTypeError,
    Base64TooLargeError,
    MissingRequiredFeatureError,
    MessageConversionError,
    ToolResultDecodeError,
)
from .tool_errors import ToolNotFoundError, ToolExecutionError
from .unknown_provider import UnknownProviderError

__all__ = [
    "ErrorCode",
    "ProviderError",
    "classify_exception",
    "ConversionError",
    "UnsupportedContentError",
    "UnsupportedMimeTypeError",
    "Base64TooLargeError",
    "MissingRequiredFeatureError",
    "MessageConversionError",
    "ToolResultDecodeError",
    "ToolNotFoundError",
    "ToolExecutionError",
    "UnknownProviderError",
]
