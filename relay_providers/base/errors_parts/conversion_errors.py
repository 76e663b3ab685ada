"""
Conversion error types raised by canonical <-> vendor converters.

Every converter either produces output equivalent to its input under the
target's capabilities or raises exactly one of these errors identifying the
offending content unit. All of them subclass :class:`ProviderError` so callers
that already handle the provider taxonomy keep working.

Failure modes covered:
    - ``UnsupportedContentError``: a content kind the target cannot represent.
    - ``UnsupportedMimeTypeError``: a blob whose MIME type is not allowed.
    - ``Base64TooLargeError``: an inline payload above the target's limit.
    - ``MissingRequiredFeatureError``: the target lacks a feature the request needs.
    - ``MessageConversionError``: malformed vendor input (e.g. bad embedded JSON).
    - ``ToolResultDecodeError``: structural failure of the tool-result codec.
"""
from __future__ import annotations

from typing import Optional

from .error_code import ErrorCode
from .provider_error import ProviderError


class ConversionError(ProviderError):
    """Base class for every conversion failure.

    Subclasses build their message from structured fields and keep those
    fields as attributes so callers can inspect them without parsing text.
    """

    kind: str = "conversion"

    def __init__(
        self,
        message: str,
        provider: str,
        *,
        code: ErrorCode = ErrorCode.VALIDATION,
        raw: Optional[Exception] = None,
    ) -> None:
        super().__init__(code=code, message=message, provider=provider, raw=raw)


class UnsupportedContentError(ConversionError):
    """A content unit has no representation for the target provider.

    Attributes:
        part_index: Index of the part inside its message (or tool list).
        part_type: Canonical type tag of the part (``"blob"``, ``"opaque"``...).
        reason: Short human-readable explanation.
        message_index: Index of the owning message when known.
    """

    kind = "unsupported_content"

    def __init__(
        self,
        part_index: int,
        part_type: str,
        provider: str,
        reason: str,
        *,
        message_index: Optional[int] = None,
    ) -> None:
        self.part_index = part_index
        self.part_type = part_type
        self.reason = reason
        self.message_index = message_index
        super().__init__(
            f"Part at index {part_index} ({part_type}) is not supported by {provider}: {reason}",
            provider,
            code=ErrorCode.UNSUPPORTED,
        )


class UnsupportedMimeTypeError(ConversionError):
    """A blob's MIME type is outside the target's allow-list."""

    kind = "unsupported_mime_type"

    def __init__(
        self,
        mime_type: str,
        provider: str,
        *,
        part_index: Optional[int] = None,
        message_index: Optional[int] = None,
    ) -> None:
        self.mime_type = mime_type
        self.part_index = part_index
        self.message_index = message_index
        super().__init__(
            f"MIME type '{mime_type}' is not supported by {provider}",
            provider,
            code=ErrorCode.UNSUPPORTED,
        )


class Base64TooLargeError(ConversionError):
    """An inline base64 payload exceeds the target's size limit."""

    kind = "base64_too_large"

    def __init__(
        self,
        size: int,
        max_size: int,
        provider: str,
        *,
        part_index: Optional[int] = None,
        message_index: Optional[int] = None,
    ) -> None:
        self.size = size
        self.max_size = max_size
        self.part_index = part_index
        self.message_index = message_index
        super().__init__(
            f"Base64 data too large ({size} bytes) for {provider} (max: {max_size} bytes)",
            provider,
            code=ErrorCode.UNSUPPORTED,
        )


class MissingRequiredFeatureError(ConversionError):
    """The request relies on a feature the target provider lacks."""

    kind = "missing_required_feature"

    def __init__(self, provider: str, required_feature: str) -> None:
        self.required_feature = required_feature
        super().__init__(
            f"Provider {provider} requires {required_feature} but it's not available",
            provider,
            code=ErrorCode.UNSUPPORTED,
        )


class MessageConversionError(ConversionError):
    """Malformed or unparseable vendor input."""

    kind = "message_conversion"

    def __init__(self, detail: str, provider: str, *, raw: Optional[Exception] = None) -> None:
        self.detail = detail
        super().__init__(detail, provider, raw=raw)


class ToolResultDecodeError(ConversionError):
    """The tool-result codec could not decode a payload."""

    kind = "decode"

    def __init__(self, detail: str, *, raw: Optional[Exception] = None) -> None:
        self.detail = detail
        super().__init__(f"Failed to decode tool result parts: {detail}", "codec", raw=raw)


__all__ = [
    "ConversionError",
    "UnsupportedContentError",
    "UnsupportedMimeTypeError",
    "Base64TooLargeError",
    "MissingRequiredFeatureError",
    "MessageConversionError",
    "ToolResultDecodeError",
]
