"""Conversion policy: what a converter does when content cannot be represented."""
from __future__ import annotations

from enum import Enum
from typing import Optional, Union


class ConversionPolicy(str, Enum):
    """Strict blocks output on any recorded error; shadow-allowed degrades and reports."""

    STRICT = "strict"
    SHADOW_ALLOWED = "shadow_allowed"

    @classmethod
    def coerce(cls, value: Optional[Union["ConversionPolicy", str]]) -> "ConversionPolicy":
        """Accept an enum member, its value, or ``None`` (defaults to STRICT)."""
        if value is None:
            return cls.STRICT
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


__all__ = ["ConversionPolicy"]
