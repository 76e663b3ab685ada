"""Unified error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``relay_providers.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.provider_error import ProviderError
from .errors_parts.classification import classify_exception
from .errors_parts.conversion_errors import (
    ConversionError,
    UnsupportedContentError,
    UnsupportedMimeTypeError,
    Base64TooLargeError,
    MissingRequiredFeatureError,
    MessageConversionError,
    ToolResultDecodeError,
)
from .errors_parts.tool_errors import ToolNotFoundError, ToolExecutionError
from .errors_parts.unknown_provider import UnknownProviderError

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
