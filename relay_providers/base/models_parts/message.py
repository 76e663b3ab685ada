"""
Canonical chat message.

Defines :class:`MessageRole` and the immutable :class:`Message` value that
every converter produces and consumes. Role is producer identity only; it
carries no permission semantics.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .part import Part, TextPart, validate_ext_keys


class MessageRole(str, Enum):
    """Message author role."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class Message(BaseModel):
    """An ordered sequence of parts produced by one role.

    Attributes:
        role: The :class:`MessageRole` of the author.
        content: Ordered list of canonical parts.
        timestamp: Optional creation time; never sent to vendors.
        ext: Namespaced metadata (``"<namespace>.<key>"``).

    Methods:
        text: Concatenate text parts (reasoning text excluded by default).
        to_dict: Tagged JSON-compatible representation.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    role: MessageRole
    content: List[Part] = Field(default_factory=list)
    timestamp: Optional[datetime] = None
    ext: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("ext")
    @classmethod
    def _check_ext(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        return validate_ext_keys(value)

    @classmethod
    def system(cls, text: str) -> "Message":
        return cls(role=MessageRole.SYSTEM, content=[TextPart(text=text)])

    @classmethod
    def user(cls, *parts: Any) -> "Message":
        """Build a user message from strings and/or parts."""
        return cls(role=MessageRole.USER, content=_coerce_parts(parts))

    @classmethod
    def assistant(cls, *parts: Any) -> "Message":
        return cls(role=MessageRole.ASSISTANT, content=_coerce_parts(parts))

    @classmethod
    def tool(cls, *parts: Any) -> "Message":
        return cls(role=MessageRole.TOOL, content=_coerce_parts(parts))

    def text(self, *, include_reasoning: bool = False, sep: str = "") -> str:
        """Return the concatenated text of the message's text parts."""
        chunks: List[str] = []
        for part in self.content:
            if not isinstance(part, TextPart):
                continue
            if not include_reasoning and part.ext.get("reasoning.thinking"):
                continue
            chunks.append(part.text)
        return sep.join(chunks)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


def _coerce_parts(items: Any) -> List[Part]:
    return [TextPart(text=item) if isinstance(item, str) else item for item in items]


__all__ = ["MessageRole", "Message"]
