"""
Gemini ``generateContent`` conversion.

Purpose:
    Canonical <-> Gemini wire conversion. The model name travels in the URL,
    so request bodies carry only ``contents``, ``systemInstruction`` and
    ``tools``.

Mapping summary:
    - Roles: User/Tool -> ``user``, Assistant -> ``model``. Gemini has no
      system role inside ``contents``; System-role messages in the list are
      sent as ``user`` turns and recorded as a plan warning.
    - Reasoning text <-> ``{"text": ..., "thought": true}``; any part may carry
      ``thoughtSignature`` (ext ``gemini.thought_signature``).
    - Base64 blobs <-> ``inlineData``; URI blobs <-> ``fileData``.
    - ToolUse <-> ``functionCall``. Calls without an id get a fresh uuid4 and
      the matching ``functionResponse`` reuses it.
    - ToolResult <-> ``functionResponse`` whose ``response`` is
      ``{"content": [<gemini part>, ...], "ext"?: {...}}``; nested parts carry
      their own ``ext`` and OpaqueParts travel as
      ``{"opaque": {"provider", "kind", "payload"}}``. A response authored
      in any other shape decodes to one TextPart holding the exact JSON text
      with ext ``gemini.response_json`` and is restored verbatim on the way
      back.
    - ``executableCode`` / ``codeExecutionResult`` <-> ``code_interpreter``
      ToolUse / ToolResult tagged with ext ``gemini.kind``.

Failure modes:
    - Malformed wire input raises :class:`MessageConversionError`, including
      object-valued fields (``functionCall``, ``inlineData`` ...) that hold
      any other JSON type.
    - ``codeExecutionResult`` carries one output string: non-text result parts
      are rejected and several text parts are merged with a warning.
"""

from __future__ import annotations

import json
import uuid
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from ..base.capabilities import Capabilities
from ..base.conversion.ext import (
    GEMINI_KIND,
    GEMINI_OUTCOME,
    GEMINI_RESPONSE_JSON,
    GEMINI_THOUGHT_SIGNATURE,
    REASONING_THINKING,
    SHADOW_ORIGINAL_TYPE,
    is_reasoning,
)
from ..base.conversion.plan import ConversionPlan
from ..base.conversion.planner import gate_part, log_plan_outcome, note_ext_dropped, note_tool_role_demoted
from ..base.conversion.policy import ConversionPolicy
from ..base.errors import MessageConversionError, UnsupportedContentError
from ..base.models import (
    PART_ADAPTER,
    BlobPart,
    FinishReason,
    FunctionDeclarations,
    GeminiTool,
    Message,
    MessageRole,
    ModelRequest,
    ModelResponse,
    OpaquePart,
    Part,
    TextPart,
    Tool,
    ToolDeclaration,
    ToolResultPart,
    ToolUsePart,
    blob_from_base64,
    blob_from_uri,
)
from ..base.usage import usage_from_gemini

PROVIDER = "gemini"
CODE_INTERPRETER = "code_interpreter"
EXECUTABLE_CODE = "executable_code"
CODE_EXECUTION_RESULT = "code_execution_result"

_DATA_KEYS = (
    "text",
    "inlineData",
    "fileData",
    "functionCall",
    "functionResponse",
    "executableCode",
    "codeExecutionResult",
)
# Nested parts may also hold a non-Gemini OpaquePart under this marker.
_NESTED_KEYS = _DATA_KEYS + ("opaque",)
_PART_META_KEYS = frozenset({"thought", "thoughtSignature", "ext"})

_SAFETY_REASONS = frozenset(
    {"SAFETY", "RECITATION", "BLOCKLIST", "PROHIBITED_CONTENT", "SPII", "IMAGE_SAFETY"}
)

_HANDLED_EXT = (
    REASONING_THINKING,
    GEMINI_THOUGHT_SIGNATURE,
    GEMINI_KIND,
    GEMINI_OUTCOME,
    GEMINI_RESPONSE_JSON,
    SHADOW_ORIGINAL_TYPE,
)


# ---------------------------------------------------------------------------
# canonical -> wire
# ---------------------------------------------------------------------------


def to_gemini_request(
    request: ModelRequest,
    *,
    model: str,
    policy: Union[ConversionPolicy, str, None] = ConversionPolicy.STRICT,
    plan: Optional[ConversionPlan] = None,
) -> Dict[str, Any]:
    """Build a ``generateContent`` request body.

    Raises:
        ConversionError: under strict policy for the first blocked part.
    """
    caps = Capabilities.gemini()
    if plan is None:
        plan = ConversionPlan(provider_name=PROVIDER, policy=ConversionPolicy.coerce(policy))
    payload: Dict[str, Any] = {"contents": []}
    if request.system_message is not None:
        texts = []
        for part_index, part in enumerate(request.system_message.content):
            gated = gate_part(part, caps, plan, part_index=part_index, message_index=None)
            if gated is None:
                continue
            if not isinstance(gated, TextPart):
                plan.fail(
                    UnsupportedContentError(part_index, gated.type, PROVIDER, "systemInstruction accepts text only")
                )
                continue
            note_ext_dropped(plan, caps, gated, f"system part {part_index}", _HANDLED_EXT)
            texts.append({"text": gated.text})
        payload["systemInstruction"] = {"parts": texts}

    for message_index, message in enumerate(request.messages):
        if message.role is MessageRole.SYSTEM:
            plan.add_warning(f"message {message_index}: system message sent as a user turn")
        note_tool_role_demoted(plan, message, message_index)
        role = "model" if message.role is MessageRole.ASSISTANT else "user"
        parts: List[Dict[str, Any]] = []
        for part_index, part in enumerate(message.content):
            gated = gate_part(part, caps, plan, part_index=part_index, message_index=message_index)
            if gated is None:
                continue
            parts.append(_encode_part(gated, plan, f"message {message_index} part {part_index}"))
        payload["contents"].append({"role": role, "parts": parts})

    tools = _encode_tools(request.tools)
    if tools:
        payload["tools"] = tools
    plan.raise_if_blocked()
    log_plan_outcome(plan, "request", model=model)
    return payload


def _encode_part(part: Part, plan: Optional[ConversionPlan], where: str, *, nested: bool = False) -> Dict[str, Any]:
    """Return the Gemini part dict for ``part``.

    Nested parts (inside a functionResponse) keep their full ``ext`` and blob
    metadata in the dict, since Gemini does not interpret that payload.
    """
    out: Dict[str, Any]
    if isinstance(part, TextPart):
        out = {"text": part.text}
        if is_reasoning(part):
            out["thought"] = True
    elif isinstance(part, BlobPart):
        out = _encode_blob(part, plan, where, nested)
    elif isinstance(part, ToolUsePart):
        if part.ext.get(GEMINI_KIND) == EXECUTABLE_CODE and isinstance(part.args, dict):
            out = {"executableCode": {"language": part.args.get("language"), "code": part.args.get("code")}}
        else:
            out = {"functionCall": {"id": part.id, "name": part.name, "args": part.args}}
    elif isinstance(part, ToolResultPart):
        out = _encode_tool_result(part, plan, where)
    elif isinstance(part, OpaquePart) and nested:
        out = {"opaque": {"provider": part.provider, "kind": part.kind, "payload": part.payload}}
    elif isinstance(part, OpaquePart):
        out = dict(part.payload) if isinstance(part.payload, dict) else {"opaque": part.payload}
    else:  # pragma: no cover - closed union
        raise TypeError(f"unexpected part {part!r}")
    if nested:
        if part.ext:
            out["ext"] = dict(part.ext)
        return out
    signature = part.ext.get(GEMINI_THOUGHT_SIGNATURE)
    if signature is not None:
        out["thoughtSignature"] = signature
    if plan is not None:
        note_ext_dropped(plan, Capabilities.gemini(), part, where, _HANDLED_EXT)
    return out


def _encode_blob(part: BlobPart, plan: Optional[ConversionPlan], where: str, nested: bool) -> Dict[str, Any]:
    if part.is_base64():
        data: Dict[str, Any] = {"mimeType": part.mime_type, "data": part.data_ref.data}  # type: ignore[union-attr]
        key = "inlineData"
    else:
        data = {"mimeType": part.mime_type, "fileUri": part.data_ref.uri}  # type: ignore[union-attr]
        key = "fileData"
    if part.name is not None and (nested or key == "fileData"):
        data["displayName"] = part.name
    elif part.name is not None and plan is not None:
        plan.add_warning(f"{where}: inline blob name '{part.name}' not sent")
    if part.description is not None:
        if nested:
            data["description"] = part.description
        elif plan is not None:
            plan.add_warning(f"{where}: blob description not sent")
    return {key: data}


def _encode_tool_result(part: ToolResultPart, plan: Optional[ConversionPlan], where: str) -> Dict[str, Any]:
    if part.ext.get(GEMINI_KIND) == CODE_EXECUTION_RESULT:
        result: Dict[str, Any] = {"outcome": part.ext.get(GEMINI_OUTCOME, "OUTCOME_OK")}
        texts = []
        for inner_index, inner in enumerate(part.parts):
            inner_where = f"{where} result part {inner_index}"
            if not isinstance(inner, TextPart):
                error = UnsupportedContentError(
                    inner_index, inner.type, PROVIDER, f"{inner_where}: codeExecutionResult output carries text only"
                )
                if plan is None:
                    raise error
                plan.fail(error)
                continue
            if plan is not None:
                note_ext_dropped(plan, Capabilities.gemini(), inner, inner_where, _HANDLED_EXT)
            texts.append(inner.text)
        if len(texts) > 1 and plan is not None:
            plan.add_warning(f"{where}: {len(texts)} text parts merged into one codeExecutionResult output")
        if part.parts:
            result["output"] = "".join(texts)
        return {"codeExecutionResult": result}
    response = _vendor_response(part)
    if response is None:
        response = {
            "content": [
                _encode_part(inner, plan, f"{where} result part {i}", nested=True) for i, inner in enumerate(part.parts)
            ]
        }
        if part.ext:
            response["ext"] = dict(part.ext)
    return {"functionResponse": {"id": part.id, "name": part.name, "response": response}}


def _vendor_response(part: ToolResultPart) -> Optional[Dict[str, Any]]:
    """Return the original response object for a ``gemini.response_json`` result."""
    if part.ext or len(part.parts) != 1:
        return None
    only = part.parts[0]
    if not isinstance(only, TextPart) or set(only.ext) != {GEMINI_RESPONSE_JSON}:
        return None
    try:
        value = json.loads(only.text)
    except ValueError:
        return None
    return value if isinstance(value, dict) else None


def _encode_tools(tools: Optional[List[Tool]]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for tool in tools or []:
        if isinstance(tool, GeminiTool):
            out.append(dict(tool.payload))
            continue
        decls = []
        for decl in tool.functions:
            item: Dict[str, Any] = {"name": decl.name}
            if decl.description is not None:
                item["description"] = decl.description
            if decl.parameters:
                item["parameters"] = dict(decl.parameters)
            decls.append(item)
        out.append({"functionDeclarations": decls})
    return out


# ---------------------------------------------------------------------------
# wire -> canonical
# ---------------------------------------------------------------------------


class _CallIds:
    """Synthesized call ids, matched to later responses by function name."""

    def __init__(self) -> None:
        self._pending: Dict[str, List[str]] = {}

    def for_call(self, name: str, call_id: Any) -> str:
        if isinstance(call_id, str) and call_id:
            return call_id
        new_id = f"call_{uuid.uuid4().hex}"
        self._pending.setdefault(name, []).append(new_id)
        return new_id

    def for_response(self, name: str, call_id: Any) -> str:
        if isinstance(call_id, str) and call_id:
            return call_id
        pending = self._pending.get(name)
        if pending:
            return pending.pop(0)
        return f"call_{uuid.uuid4().hex}"


def from_gemini_request(payload: Dict[str, Any]) -> ModelRequest:
    """Rebuild a canonical request from a ``generateContent`` body.

    Raises:
        MessageConversionError: for malformed contents or parts.
    """
    contents = payload.get("contents") if isinstance(payload, dict) else None
    if not isinstance(contents, list):
        raise MessageConversionError("request has no 'contents' list", PROVIDER)
    ids = _CallIds()
    messages = [_decode_content(content, ids) for content in contents]
    system = payload.get("systemInstruction") or payload.get("system_instruction")
    system_message = None
    if system is not None:
        if not isinstance(system, dict):
            raise MessageConversionError("'systemInstruction' is not an object", PROVIDER)
        system_parts = system.get("parts") or []
        if not isinstance(system_parts, list) or not all(isinstance(p, dict) for p in system_parts):
            raise MessageConversionError("'systemInstruction' parts must be a list of objects", PROVIDER)
        system_message = Message(
            role=MessageRole.SYSTEM,
            content=[TextPart(text=str(p.get("text", ""))) for p in system_parts],
        )
    return ModelRequest(messages=messages, system_message=system_message, tools=_decode_tools(payload.get("tools")))


def from_gemini_response(payload: Dict[str, Any]) -> ModelResponse:
    """Convert a ``generateContent`` response body.

    A prompt blocked before generation yields an empty assistant message with
    ``FinishReason.CONTENT_FILTER``.

    Raises:
        MessageConversionError: when the body has neither candidates nor a
            block reason, or the first candidate is malformed.
    """
    if not isinstance(payload, dict):
        raise MessageConversionError("response body is not an object", PROVIDER)
    candidates = payload.get("candidates")
    model_name = str(payload.get("modelVersion") or payload.get("model") or "")
    if not isinstance(candidates, list) or not candidates:
        block_reason = _wire_object(payload, "promptFeedback").get("blockReason")
        if block_reason is None:
            raise MessageConversionError("response has no candidates", PROVIDER)
        return ModelResponse(
            message=Message(role=MessageRole.ASSISTANT, content=[]),
            usage=usage_from_gemini(payload),
            model_name=model_name,
            vendor_name=PROVIDER,
            finish_reason=FinishReason.CONTENT_FILTER,
            response_id=payload.get("responseId"),
        )
    candidate = candidates[0]
    if not isinstance(candidate, dict):
        raise MessageConversionError("response candidate is not an object", PROVIDER)
    content = candidate.get("content") or {"role": "model", "parts": []}
    message = _decode_content({**content, "role": "model"}, _CallIds())
    return ModelResponse(
        message=message,
        usage=usage_from_gemini(payload),
        model_name=model_name,
        vendor_name=PROVIDER,
        finish_reason=_finish_reason(candidate.get("finishReason"), message),
        response_id=payload.get("responseId"),
    )


def _finish_reason(value: Optional[str], message: Message) -> Optional[FinishReason]:
    if value is None:
        return None
    if value == "STOP":
        calls = [p for p in message.content if isinstance(p, ToolUsePart) and GEMINI_KIND not in p.ext]
        return FinishReason.TOOL_CALLS if calls else FinishReason.STOP
    if value == "MAX_TOKENS":
        return FinishReason.LENGTH
    if value in _SAFETY_REASONS:
        return FinishReason.CONTENT_FILTER
    return FinishReason.OTHER


def _decode_content(content: Any, ids: _CallIds) -> Message:
    if not isinstance(content, dict):
        raise MessageConversionError("content entry is not an object", PROVIDER)
    wire_parts = content.get("parts") or []
    if not isinstance(wire_parts, list):
        raise MessageConversionError("content 'parts' must be a list", PROVIDER)
    parts = [_decode_part(p, ids) for p in wire_parts]
    if content.get("role") == "model":
        role = MessageRole.ASSISTANT
    elif parts and all(isinstance(p, ToolResultPart) for p in parts):
        role = MessageRole.TOOL
    else:
        role = MessageRole.USER
    return Message(role=role, content=parts)


def _decode_part(data: Any, ids: _CallIds, *, nested: bool = False) -> Part:
    if not isinstance(data, dict):
        raise MessageConversionError("part is not an object", PROVIDER)
    ext: Dict[str, Any] = {}
    if data.get("thoughtSignature") is not None:
        ext[GEMINI_THOUGHT_SIGNATURE] = data["thoughtSignature"]
    if nested and "opaque" in data:
        part = _decode_nested_opaque(data["opaque"])
    else:
        part = _decode_data(data, ids, ext)
    if nested and "ext" in data:
        try:
            part = PART_ADAPTER.validate_python({**part.to_dict(), "ext": data["ext"]})
        except ValidationError as exc:
            raise MessageConversionError(f"invalid nested part ext ({exc})", PROVIDER, raw=exc) from exc
    return part


def _decode_nested_opaque(marker: Any) -> OpaquePart:
    if not isinstance(marker, dict):
        raise MessageConversionError("nested opaque marker is not an object", PROVIDER)
    if not isinstance(marker.get("provider"), str) or not isinstance(marker.get("kind"), str):
        raise MessageConversionError("nested opaque part without provider or kind", PROVIDER)
    return OpaquePart(provider=marker["provider"], kind=marker["kind"], payload=marker.get("payload"))


def _wire_object(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    """Return ``data[key]`` as a dict (``{}`` when absent or null).

    Raises:
        MessageConversionError: when the value has any other JSON type.
    """
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise MessageConversionError(f"'{key}' is not an object", PROVIDER)
    return value


def _decode_data(data: Dict[str, Any], ids: _CallIds, ext: Dict[str, Any]) -> Part:
    if "text" in data:
        if data.get("thought"):
            ext[REASONING_THINKING] = True
        return TextPart(text=str(data["text"]), ext=ext)
    if "inlineData" in data or "fileData" in data:
        return _decode_blob(data, ext)
    if "functionCall" in data:
        call = _wire_object(data, "functionCall")
        name = call.get("name")
        if not isinstance(name, str):
            raise MessageConversionError("functionCall without a name", PROVIDER)
        return ToolUsePart(id=ids.for_call(name, call.get("id")), name=name, args=call.get("args") or {}, ext=ext)
    if "functionResponse" in data:
        return _decode_function_response(_wire_object(data, "functionResponse"), ids, ext)
    if "executableCode" in data:
        code = _wire_object(data, "executableCode")
        return ToolUsePart(
            id=ids.for_call(CODE_INTERPRETER, None),
            name=CODE_INTERPRETER,
            args={"language": code.get("language"), "code": code.get("code")},
            ext={**ext, GEMINI_KIND: EXECUTABLE_CODE},
        )
    if "codeExecutionResult" in data:
        result = _wire_object(data, "codeExecutionResult")
        output = result.get("output")
        return ToolResultPart(
            id=ids.for_response(CODE_INTERPRETER, None),
            name=CODE_INTERPRETER,
            parts=[TextPart(text=output)] if isinstance(output, str) else [],
            ext={**ext, GEMINI_KIND: CODE_EXECUTION_RESULT, GEMINI_OUTCOME: result.get("outcome")},
        )
    kind = next((k for k in data if k not in _PART_META_KEYS), "unknown")
    return OpaquePart(provider=PROVIDER, kind=kind, payload=data)


def _decode_blob(data: Dict[str, Any], ext: Dict[str, Any]) -> BlobPart:
    if "inlineData" in data:
        blob = _wire_object(data, "inlineData")
        if not isinstance(blob.get("data"), str) or not isinstance(blob.get("mimeType"), str):
            raise MessageConversionError("inlineData without data or mimeType", PROVIDER)
        return blob_from_base64(
            blob["data"], blob["mimeType"], name=blob.get("displayName"), description=blob.get("description"), ext=ext
        )
    file = _wire_object(data, "fileData")
    if not isinstance(file.get("fileUri"), str) or not isinstance(file.get("mimeType"), str):
        raise MessageConversionError("fileData without fileUri or mimeType", PROVIDER)
    return blob_from_uri(
        file["fileUri"], file["mimeType"], name=file.get("displayName"), description=file.get("description"), ext=ext
    )


def _is_canonical_response(response: Any) -> bool:
    if not isinstance(response, dict) or "content" not in response:
        return False
    if set(response) - {"content", "ext"} or not isinstance(response.get("ext", {}), dict):
        return False
    content = response["content"]
    return isinstance(content, list) and all(
        isinstance(item, dict) and sum(1 for k in _NESTED_KEYS if k in item) == 1 for item in content
    )


def _decode_function_response(response_obj: Dict[str, Any], ids: _CallIds, ext: Dict[str, Any]) -> ToolResultPart:
    name = response_obj.get("name")
    if not isinstance(name, str):
        raise MessageConversionError("functionResponse without a name", PROVIDER)
    call_id = ids.for_response(name, response_obj.get("id"))
    response = response_obj.get("response")
    if _is_canonical_response(response):
        parts = [_decode_part(item, ids, nested=True) for item in response["content"]]
        return ToolResultPart(id=call_id, name=name, parts=parts, ext={**response.get("ext", {}), **ext})
    text = json.dumps(response, ensure_ascii=False)
    return ToolResultPart(
        id=call_id, name=name, parts=[TextPart(text=text, ext={GEMINI_RESPONSE_JSON: True})], ext=ext
    )


def _decode_tools(items: Any) -> Optional[List[Tool]]:
    if items is None:
        return None
    if not isinstance(items, list):
        raise MessageConversionError("'tools' is not a list", PROVIDER)
    tools: List[Tool] = []
    for tool_index, item in enumerate(items):
        if not isinstance(item, dict):
            raise MessageConversionError(f"tool {tool_index} is not an object", PROVIDER)
        decls = item.get("functionDeclarations")
        if set(item) != {"functionDeclarations"} or not isinstance(decls, list):
            tools.append(GeminiTool(payload=item))
            continue
        functions = []
        for d in decls:
            if not isinstance(d, dict) or not isinstance(d.get("name"), str):
                raise MessageConversionError(f"tool {tool_index} has a function declaration without a name", PROVIDER)
            functions.append(
                ToolDeclaration(
                    name=d["name"],
                    description=d.get("description"),
                    parameters=dict(d.get("parameters") or {}),
                )
            )
        tools.append(FunctionDeclarations(functions=functions))
    return tools or None


__all__ = [
    "CODE_INTERPRETER",
    "to_gemini_request",
    "from_gemini_request",
    "from_gemini_response",
]
