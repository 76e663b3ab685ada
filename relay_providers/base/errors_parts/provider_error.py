"""
Root exception of the package.

Conversion, tool and transport failures all raise a :class:`ProviderError`
subclass, so one ``except ProviderError`` covers everything the library
raises on purpose.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .error_code import ErrorCode


@dataclass
class ProviderError(Exception):
    """A failure tagged with its :class:`ErrorCode` and originating provider.

    ``provider`` is the target vendor for conversion errors, ``"tools"`` for
    tool dispatch and the calling model's vendor for transport errors.
    ``raw`` keeps the underlying exception when there is one.
    """

    code: ErrorCode
    message: str
    provider: str
    model: Optional[str] = None
    retryable: bool = False
    raw: Optional[Exception] = None

    def to_dict(self) -> Dict[str, Any]:
        """Fields written to structured logs (``raw`` is reduced to its type)."""
        out: Dict[str, Any] = {
            "error_code": self.code.value,
            "message": self.message,
            "provider": self.provider,
            "retryable": self.retryable,
        }
        if self.model is not None:
            out["model"] = self.model
        if self.raw is not None:
            out["raw_type"] = type(self.raw).__name__
        return out

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.provider}: {self.message}"


__all__ = ["ProviderError"]
