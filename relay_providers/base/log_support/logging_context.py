"""Context fields shared by conversion and transport log events."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class LogContext:
    """Who is converting or calling, and in which direction.

    ``direction`` is ``"request"`` or ``"response"`` for converter events;
    ``policy`` is the active conversion policy value. ``extra`` entries are
    merged last and never shadow the named fields.
    """

    provider: Optional[str] = None
    model: Optional[str] = None
    direction: Optional[str] = None
    policy: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        named = {
            "provider": self.provider,
            "model": self.model,
            "direction": self.direction,
            "policy": self.policy,
        }
        out = {k: v for k, v in named.items() if v is not None}
        for k, v in (self.extra or {}).items():
            if v is not None and k not in out:
                out[k] = v
        return out


__all__ = ["LogContext"]
