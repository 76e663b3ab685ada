"""
Normalized failure categories.

Conversion errors use ``UNSUPPORTED`` and ``VALIDATION``; the HTTP transport
maps statuses and vendor error bodies onto the rest. Values are stable strings
written into structured logs as ``error_code``.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    TRANSIENT = "transient"
    UNSUPPORTED = "unsupported"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    SERVER_ERROR = "server_error"
    INTERNAL = "internal"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"

    @property
    def retryable(self) -> bool:
        """True for failures that may succeed when the same request is resent."""
        return self in _RETRYABLE


_RETRYABLE = frozenset({ErrorCode.RATE_LIMIT, ErrorCode.TIMEOUT, ErrorCode.TRANSIENT, ErrorCode.UNAVAILABLE})


__all__ = ["ErrorCode"]
