"""
Tool-result codec.

Purpose:
    Flatten a named tool result (and its arbitrarily nested parts) into one
    string for vendor formats that only accept plain-text tool messages, and
    restore it exactly on the way back.

Wire form::

    {"ai_ox_tool_result": {"name": "<tool>", "content": [<part>, ...], "ext": {...}}}

``ext`` is written only when non-empty. Part dicts use the canonical tagged
JSON form (see :mod:`relay_providers.base.models_parts.part`).

Envelope collisions:
    :func:`flatten_tool_result` never emits raw text that itself parses as an
    envelope; such text is wrapped in an envelope carrying one text part, so
    every string produced here decodes unambiguously. A third-party tool that
    emits the exact envelope object as its raw output can still be misread;
    that is the one remaining collision and it requires the reserved key.

Failure modes:
    :func:`decode_tool_result` raises :class:`ToolResultDecodeError` and never
    guesses: invalid JSON, a non-object payload, a missing envelope key or
    extra top-level keys, a non-string ``name``, a missing or non-list
    ``content``, a non-object ``ext``, nesting deeper than the configured
    limit, or any part that fails validation.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from ...config import get_conversion_settings
from ...config.defaults import TOOL_RESULT_ENVELOPE_KEY
from ..errors import ToolResultDecodeError
from ..models import Part, TextPart, ToolResultPart, parts_from_list, parts_to_list, validate_ext_keys

_ENVELOPE_FIELDS = frozenset({"name", "content", "ext"})

DecodedToolResult = Tuple[str, List[Part], Dict[str, Any]]


def encode_tool_result(
    name: str,
    parts: List[Part],
    ext: Optional[Dict[str, Any]] = None,
    *,
    key: str = TOOL_RESULT_ENVELOPE_KEY,
) -> str:
    """Encode ``(name, parts, ext)`` as an envelope string."""
    body: Dict[str, Any] = {"name": name, "content": parts_to_list(parts)}
    if ext:
        body["ext"] = dict(ext)
    return json.dumps({key: body}, ensure_ascii=False, separators=(",", ":"))


def _result_depth(items: Any, limit: int, depth: int = 1) -> int:
    """Return the tool-result nesting depth of raw part dicts, stopping past ``limit``."""
    deepest = depth
    if depth > limit or not isinstance(items, list):
        return deepest
    for item in items:
        if isinstance(item, dict) and item.get("type") == "tool_result":
            deepest = max(deepest, _result_depth(item.get("parts"), limit, depth + 1))
            if deepest > limit:
                break
    return deepest


def decode_tool_result(
    text: str,
    *,
    key: str = TOOL_RESULT_ENVELOPE_KEY,
    max_depth: Optional[int] = None,
) -> DecodedToolResult:
    """Decode an envelope string into ``(name, parts, ext)``.

    Raises:
        ToolResultDecodeError: for any structural problem (see module docs).
    """
    limit = max_depth if max_depth is not None else get_conversion_settings().tool_result_max_depth
    try:
        data = json.loads(text)
    except RecursionError as exc:
        raise ToolResultDecodeError("payload nesting exceeds the parser limit", raw=exc) from exc
    except (TypeError, ValueError) as exc:
        raise ToolResultDecodeError(f"invalid JSON ({exc})", raw=exc) from exc
    if not isinstance(data, dict):
        raise ToolResultDecodeError("payload is not a JSON object")
    if key not in data:
        raise ToolResultDecodeError(f"missing envelope key '{key}'")
    if len(data) != 1:
        extra = sorted(k for k in data if k != key)
        raise ToolResultDecodeError(f"unexpected top-level keys {extra}")
    envelope = data[key]
    if not isinstance(envelope, dict):
        raise ToolResultDecodeError("envelope is not a JSON object")
    unknown = sorted(set(envelope) - _ENVELOPE_FIELDS)
    if unknown:
        raise ToolResultDecodeError(f"unexpected envelope fields {unknown}")
    name = envelope.get("name")
    if not isinstance(name, str):
        raise ToolResultDecodeError("'name' must be a string")
    if "content" not in envelope:
        raise ToolResultDecodeError("'content' is missing")
    content = envelope["content"]
    if not isinstance(content, list):
        raise ToolResultDecodeError("'content' must be a list")
    ext = envelope.get("ext", {})
    if not isinstance(ext, dict):
        raise ToolResultDecodeError("'ext' must be an object")
    if _result_depth(content, limit) > limit:
        raise ToolResultDecodeError(f"tool result nesting exceeds {limit} levels")
    try:
        validate_ext_keys(ext)
        parts = parts_from_list(content)
    except (ValidationError, ValueError) as exc:
        raise ToolResultDecodeError(f"invalid part ({exc})", raw=exc) from exc
    return name, parts, dict(ext)


def is_encoded_tool_result(text: Any, *, key: str = TOOL_RESULT_ENVELOPE_KEY) -> bool:
    """Return True when ``text`` is a JSON object whose only key is the envelope key."""
    if not isinstance(text, str) or key not in text:
        return False
    try:
        data = json.loads(text)
    except (RecursionError, ValueError):
        return False
    return isinstance(data, dict) and len(data) == 1 and key in data


def flatten_tool_result(part: ToolResultPart) -> str:
    """Return the plain-string form of ``part`` for string-only vendors.

    A result consisting of one ext-free text part (and no result ext) is sent
    as that raw text, unless the text would itself read as an envelope.
    Everything else is encoded.
    """
    if len(part.parts) == 1 and not part.ext:
        only = part.parts[0]
        if isinstance(only, TextPart) and not only.ext and not is_encoded_tool_result(only.text):
            return only.text
    return encode_tool_result(part.name, part.parts, part.ext)


def unflatten_tool_result(text: str) -> Tuple[Optional[str], List[Part], Dict[str, Any]]:
    """Inverse of :func:`flatten_tool_result`.

    Returns:
        ``(name, parts, ext)`` for an envelope (``name`` from the payload) and
        ``(None, [TextPart(text)], {})`` for any other string.

    Raises:
        ToolResultDecodeError: when the string is an envelope but malformed.
    """
    if is_encoded_tool_result(text):
        return decode_tool_result(text)
    return None, [TextPart(text=text)], {}


# Aliases.
encode_tool_result_parts = encode_tool_result
decode_tool_result_parts = decode_tool_result


__all__ = [
    "DecodedToolResult",
    "encode_tool_result",
    "decode_tool_result",
    "encode_tool_result_parts",
    "decode_tool_result_parts",
    "is_encoded_tool_result",
    "flatten_tool_result",
    "unflatten_tool_result",
]
