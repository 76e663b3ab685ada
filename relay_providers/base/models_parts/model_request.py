"""
Canonical request value handed to a converter.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .message import Message
from .tool_declaration import Tool


class ModelRequest(BaseModel):
    """Vendor-neutral request.

    Attributes:
        messages: Ordered conversation turns.
        system_message: Optional out-of-band system instruction.
        tools: Optional ordered tool batches. ``None`` means "no tools"; an
            empty list is treated the same by every converter.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    messages: List[Message] = Field(default_factory=list)
    system_message: Optional[Message] = None
    tools: Optional[List[Tool]] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


__all__ = ["ModelRequest"]
