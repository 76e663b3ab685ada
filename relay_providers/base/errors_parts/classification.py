"""
Map transport and vendor failures onto :class:`ErrorCode`.

The chat transport only ever sees ``httpx`` exceptions and JSON error bodies,
so classification looks at those first: exception type, then the HTTP status,
then the vendor status string inside the error body (Gemini ``RESOURCE_EXHAUSTED``,
Anthropic ``overloaded_error``), and finally message substrings for anything
raised outside ``httpx``.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Optional

import httpx

from .error_code import ErrorCode
from .provider_error import ProviderError


_HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION,
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    404: ErrorCode.NOT_FOUND,
    408: ErrorCode.TIMEOUT,
    409: ErrorCode.CONFLICT,
    413: ErrorCode.VALIDATION,
    422: ErrorCode.VALIDATION,
    429: ErrorCode.RATE_LIMIT,
    500: ErrorCode.SERVER_ERROR,
    502: ErrorCode.TRANSIENT,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
    529: ErrorCode.UNAVAILABLE,  # Anthropic "overloaded"
}

# Vendor error-body status strings, upper-cased before lookup.
_VENDOR_STATUS_MAP: Dict[str, ErrorCode] = {
    # Gemini (google.rpc.Code names)
    "RESOURCE_EXHAUSTED": ErrorCode.RATE_LIMIT,
    "UNAUTHENTICATED": ErrorCode.AUTH,
    "PERMISSION_DENIED": ErrorCode.AUTH,
    "INVALID_ARGUMENT": ErrorCode.VALIDATION,
    "FAILED_PRECONDITION": ErrorCode.UNSUPPORTED,
    "DEADLINE_EXCEEDED": ErrorCode.TIMEOUT,
    # Anthropic error types
    "RATE_LIMIT_ERROR": ErrorCode.RATE_LIMIT,
    "OVERLOADED_ERROR": ErrorCode.UNAVAILABLE,
    "AUTHENTICATION_ERROR": ErrorCode.AUTH,
    "INVALID_REQUEST_ERROR": ErrorCode.VALIDATION,
    # OpenAI-compatible ``error.code``
    "RATE_LIMIT_EXCEEDED": ErrorCode.RATE_LIMIT,
    "INVALID_API_KEY": ErrorCode.AUTH,
    "CONTEXT_LENGTH_EXCEEDED": ErrorCode.VALIDATION,
}

_MESSAGE_PATTERNS = (
    (ErrorCode.TIMEOUT, ("timed out", "timeout")),
    (ErrorCode.AUTH, ("api key", "unauthorized", "forbidden")),
    (ErrorCode.UNSUPPORTED, ("not supported", "unsupported")),
    (ErrorCode.NOT_FOUND, ("not found",)),
    (ErrorCode.UNAVAILABLE, ("unavailable", "overloaded")),
    (ErrorCode.VALIDATION, ("invalid", "malformed")),
    (ErrorCode.TRANSIENT, ("connection",)),
)


def _extract_status(exc: Exception) -> Optional[int]:
    """Return the HTTP status carried by ``exc`` or its ``response``, if any."""
    candidates = [getattr(exc, "status_code", None), getattr(exc, "status", None)]
    resp = getattr(exc, "response", None)
    if resp is not None:
        candidates.append(getattr(resp, "status_code", None))
    for val in candidates:
        if isinstance(val, int) and 100 <= val < 600:
            return val
    return None


def _vendor_status(exc: Exception) -> Optional[ErrorCode]:
    """Look up the status string inside an ``httpx`` error response body."""
    resp = getattr(exc, "response", None)
    if not isinstance(resp, httpx.Response):
        return None
    try:
        body: Any = resp.json()
    except (json.JSONDecodeError, UnicodeDecodeError, httpx.ResponseNotRead):
        return None
    err = body.get("error") if isinstance(body, dict) else None
    if not isinstance(err, dict):
        return None
    for key in ("status", "type", "code"):
        val = err.get(key)
        if isinstance(val, str) and val.upper() in _VENDOR_STATUS_MAP:
            return _VENDOR_STATUS_MAP[val.upper()]
    return None


def _from_status(status: int) -> ErrorCode:
    if status in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status]
    if status >= 500:
        return ErrorCode.SERVER_ERROR
    return ErrorCode.VALIDATION if status >= 400 else ErrorCode.UNKNOWN


def _from_message(msg: str) -> Optional[ErrorCode]:
    if "rate" in msg and "limit" in msg:
        return ErrorCode.RATE_LIMIT
    for code, patterns in _MESSAGE_PATTERNS:
        if any(p in msg for p in patterns):
            return code
    return None


def classify_exception(exc: Exception) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. ``ProviderError`` keeps its code.
        2. Timeouts (stdlib and ``httpx``).
        3. Other ``httpx`` transport failures are transient.
        4. Vendor status string in the error body, then the HTTP status.
        5. A reply body that is not JSON counts as a server error.
        6. Message substrings, else ``UNKNOWN``.
    """
    if isinstance(exc, ProviderError):
        return exc.code
    if isinstance(exc, (TimeoutError, httpx.TimeoutException)):
        return ErrorCode.TIMEOUT
    if isinstance(exc, httpx.TransportError):
        return ErrorCode.TRANSIENT
    status = _extract_status(exc)
    if status is not None:
        return _vendor_status(exc) or _from_status(status)
    if isinstance(exc, json.JSONDecodeError):
        return ErrorCode.SERVER_ERROR
    return _from_message(str(exc).lower()) or ErrorCode.UNKNOWN


__all__ = ["classify_exception"]
