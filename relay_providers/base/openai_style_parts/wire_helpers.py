"""Pure helpers shared by the OpenAI-compatible chat-completions converters.

Purpose:
    Map individual canonical values (images, audio, tool declarations, tool
    calls, finish reasons) to and from the chat-completions wire shapes used
    by OpenAI, OpenRouter and Mistral. Message-level assembly lives in
    :mod:`relay_providers.base.openai_style_parts.converter`.

Failure modes:
    - :class:`MessageConversionError` for unparseable tool-call arguments,
      malformed data URLs, non-object wire fields and malformed tool lists.
"""

from __future__ import annotations

import json
import mimetypes
from typing import Any, Dict, List, Optional, Tuple

from ..conversion.ext import OPENAI_IMAGE_DETAIL
from ..errors import MessageConversionError
from ..models import (
    BlobPart,
    FinishReason,
    FunctionDeclarations,
    Tool,
    ToolDeclaration,
    ToolUsePart,
    blob_from_base64,
    blob_from_uri,
)

_FINISH_REASONS = {
    "stop": FinishReason.STOP,
    "length": FinishReason.LENGTH,
    "tool_calls": FinishReason.TOOL_CALLS,
    "function_call": FinishReason.TOOL_CALLS,
    "content_filter": FinishReason.CONTENT_FILTER,
}

# input_audio "format" values and their MIME types.
_AUDIO_FORMATS = {"wav": "audio/wav", "mp3": "audio/mp3", "ogg": "audio/ogg"}


def to_data_url(mime_type: str, data: str) -> str:
    return f"data:{mime_type};base64,{data}"


def parse_data_url(url: str, provider: str) -> Tuple[str, str]:
    """Split ``data:<mime>;base64,<data>`` into ``(mime, data)``."""
    header, sep, data = url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise MessageConversionError(f"unsupported data URL header '{header[:64]}'", provider)
    return header[len("data:"):-len(";base64")], data


def guess_uri_mime(uri: str, default: str = "image/jpeg") -> str:
    """Infer a MIME type from a URI's extension."""
    guessed, _ = mimetypes.guess_type(uri.split("?", 1)[0])
    return guessed or default


def image_url_item(part: BlobPart, *, url_as_string: bool = False) -> Dict[str, Any]:
    """Return the ``image_url`` content item for an image blob."""
    if part.is_base64():
        url = to_data_url(part.mime_type, part.data_ref.data)  # type: ignore[union-attr]
    else:
        url = part.data_ref.uri  # type: ignore[union-attr]
    if url_as_string:
        return {"type": "image_url", "image_url": url}
    image: Dict[str, Any] = {"url": url}
    detail = part.ext.get(OPENAI_IMAGE_DETAIL)
    if detail is not None:
        image["detail"] = detail
    return {"type": "image_url", "image_url": image}


def blob_from_image_url(item: Dict[str, Any], provider: str) -> BlobPart:
    """Inverse of :func:`image_url_item`."""
    image = item.get("image_url")
    detail = None
    if isinstance(image, dict):
        url = image.get("url")
        detail = image.get("detail")
    else:
        url = image
    if not isinstance(url, str):
        raise MessageConversionError("image_url item without a url", provider)
    ext = {OPENAI_IMAGE_DETAIL: detail} if detail is not None else {}
    if url.startswith("data:"):
        mime, data = parse_data_url(url, provider)
        return blob_from_base64(data, mime, ext=ext)
    return blob_from_uri(url, guess_uri_mime(url), ext=ext)


def input_audio_item(part: BlobPart) -> Dict[str, Any]:
    fmt = part.mime_type.split("/", 1)[1]
    if fmt == "mpeg":
        fmt = "mp3"
    return {"type": "input_audio", "input_audio": {"data": part.data_ref.data, "format": fmt}}  # type: ignore[union-attr]


def wire_object(container: Dict[str, Any], key: str, provider: str) -> Dict[str, Any]:
    """Return ``container[key]`` as a dict (``{}`` when absent).

    Raises:
        MessageConversionError: when the value is present but not an object.
    """
    value = container.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise MessageConversionError(f"'{key}' is not an object", provider)
    return value


def blob_from_input_audio(item: Dict[str, Any], provider: str) -> BlobPart:
    audio = wire_object(item, "input_audio", provider)
    data = audio.get("data")
    if not isinstance(data, str):
        raise MessageConversionError("input_audio item without data", provider)
    fmt = str(audio.get("format") or "wav")
    return blob_from_base64(data, _AUDIO_FORMATS.get(fmt, f"audio/{fmt}"))


def tool_call_item(part: ToolUsePart) -> Dict[str, Any]:
    return {
        "id": part.id,
        "type": "function",
        "function": {"name": part.name, "arguments": json.dumps(part.args, ensure_ascii=False)},
    }


def tool_use_from_call(call: Dict[str, Any], provider: str) -> ToolUsePart:
    """Parse one wire ``tool_calls`` entry.

    Raises:
        MessageConversionError: when ``function`` is not an object or
            ``arguments`` is not valid JSON.
    """
    function = wire_object(call, "function", provider)
    name = function.get("name")
    call_id = call.get("id")
    if not isinstance(name, str) or not isinstance(call_id, str):
        raise MessageConversionError("tool call without id or function name", provider)
    arguments = function.get("arguments")
    if arguments is None or arguments == "":
        args: Any = {}
    elif isinstance(arguments, str):
        try:
            args = json.loads(arguments)
        except ValueError as exc:
            raise MessageConversionError(
                f"tool call '{name}' has unparseable arguments: {exc}", provider, raw=exc
            ) from exc
    else:
        args = arguments
    return ToolUsePart(id=call_id, name=name, args=args)


def function_tool_item(decl: ToolDeclaration) -> Dict[str, Any]:
    function: Dict[str, Any] = {"name": decl.name}
    if decl.description is not None:
        function["description"] = decl.description
    if decl.parameters:
        function["parameters"] = dict(decl.parameters)
    return {"type": "function", "function": function}


def tools_from_wire(items: Any, provider: str) -> Optional[List[Tool]]:
    """Collect wire ``tools`` into one canonical declaration batch (``None`` when empty).

    Raises:
        MessageConversionError: when ``tools`` is not a list or an entry is not
            a function tool with a name.
    """
    if items is None:
        return None
    if not isinstance(items, list):
        raise MessageConversionError("'tools' is not a list", provider)
    functions: List[ToolDeclaration] = []
    for tool_index, item in enumerate(items):
        function = item.get("function") if isinstance(item, dict) else None
        if not isinstance(function, dict) or not isinstance(function.get("name"), str):
            raise MessageConversionError(f"tool {tool_index} is not a named function declaration", provider)
        parameters = function.get("parameters")
        if parameters is not None and not isinstance(parameters, dict):
            raise MessageConversionError(f"tool '{function['name']}' parameters are not an object", provider)
        functions.append(
            ToolDeclaration(
                name=function["name"],
                description=function.get("description"),
                parameters=dict(parameters or {}),
            )
        )
    if not functions:
        return None
    return [FunctionDeclarations(functions=functions)]


def map_finish_reason(value: Optional[str]) -> Optional[FinishReason]:
    if value is None:
        return None
    return _FINISH_REASONS.get(value, FinishReason.OTHER)


__all__ = [
    "to_data_url",
    "parse_data_url",
    "guess_uri_mime",
    "image_url_item",
    "blob_from_image_url",
    "input_audio_item",
    "wire_object",
    "blob_from_input_audio",
    "tool_call_item",
    "tool_use_from_call",
    "function_tool_item",
    "tools_from_wire",
    "map_finish_reason",
]
