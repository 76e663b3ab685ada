"""
Canonical response returned by a converter's response direction.

The ``message`` is always an assistant message; ``usage`` is the canonical
:class:`~relay_providers.base.usage.Usage` value for this single request.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from ..usage import Usage
from .message import Message


class FinishReason(str, Enum):
    """Normalized reason the model stopped generating."""

    STOP = "stop"
    LENGTH = "length"
    TOOL_CALLS = "tool_calls"
    CONTENT_FILTER = "content_filter"
    OTHER = "other"


@dataclass
class ModelResponse:
    """Vendor-neutral model response.

    Attributes:
        message: The assistant :class:`Message`.
        usage: Token accounting for the request.
        model_name: Model identifier reported by the vendor.
        vendor_name: Provider key (``"openai"``, ``"gemini"``...).
        finish_reason: Normalized :class:`FinishReason` when reported.
        response_id: Vendor response identifier when reported.
    """

    message: Message
    model_name: str
    vendor_name: str
    usage: Usage = field(default_factory=Usage)
    finish_reason: Optional[FinishReason] = None
    response_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary representation."""
        return {
            "message": self.message.to_dict(),
            "usage": self.usage.to_dict(),
            "model_name": self.model_name,
            "vendor_name": self.vendor_name,
            "finish_reason": self.finish_reason.value if self.finish_reason else None,
            "response_id": self.response_id,
        }


__all__ = ["FinishReason", "ModelResponse"]
