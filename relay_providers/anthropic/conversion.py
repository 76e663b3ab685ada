"""
Anthropic Messages API conversion.

Purpose:
    Canonical <-> Anthropic wire conversion for ``POST /v1/messages``.

Mapping summary:
    - ``system_message`` -> top-level ``system`` (a string for one plain text
      part, otherwise a list of text blocks).
    - User and Tool messages -> ``role: user``; Assistant -> ``role: assistant``.
    - Reasoning text <-> ``thinking`` blocks; the block signature is kept in
      ``anthropic.signature``. ``redacted_thinking`` and unknown blocks become
      OpaqueParts and are only re-emitted to Anthropic.
    - Images travel as base64 ``image`` blocks. URL-sourced image blocks
      decode to OpaqueParts because canonical URI blobs cannot be sent back.
    - ToolResult -> ``tool_result`` block. Results made only of plain text and
      base64 images whose name matches the preceding tool call use native
      content blocks; everything else is flattened by the tool-result codec.
    - A user turn holding only ``tool_result`` blocks decodes to a Tool message.

Failure modes:
    - System-role messages inside ``messages`` have no Anthropic slot: strict
      policy raises, shadow policy folds their text into ``system``.
    - Malformed wire input raises :class:`MessageConversionError`.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from ..base.capabilities import Capabilities
from ..base.conversion.ext import (
    ANTHROPIC_IS_ERROR,
    ANTHROPIC_SIGNATURE,
    REASONING_THINKING,
    SHADOW_ORIGINAL_TYPE,
    is_reasoning,
)
from ..base.conversion.plan import ConversionPlan, TransformAction
from ..base.conversion.planner import (
    check_part,
    gate_part,
    log_plan_outcome,
    note_blob_metadata_dropped,
    note_ext_dropped,
    note_tool_role_demoted,
)
from ..base.conversion.policy import ConversionPolicy
from ..base.errors import MessageConversionError, UnsupportedContentError
from ..base.models import (
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
)
from ..base.tools.encoding import flatten_tool_result, unflatten_tool_result
from ..base.usage import usage_from_anthropic
from ..config.defaults import ANTHROPIC_DEFAULT_MAX_TOKENS

PROVIDER = "anthropic"

_STOP_REASONS = {
    "end_turn": FinishReason.STOP,
    "stop_sequence": FinishReason.STOP,
    "max_tokens": FinishReason.LENGTH,
    "tool_use": FinishReason.TOOL_CALLS,
    "refusal": FinishReason.CONTENT_FILTER,
}

# input_schema sent for tools declared without parameters.
_EMPTY_SCHEMA = {"type": "object", "properties": {}}

_TEXT_EXT_HANDLED = (REASONING_THINKING, ANTHROPIC_SIGNATURE, SHADOW_ORIGINAL_TYPE)


# ---------------------------------------------------------------------------
# canonical -> wire
# ---------------------------------------------------------------------------


def to_anthropic_request(
    request: ModelRequest,
    *,
    model: str,
    max_tokens: int = ANTHROPIC_DEFAULT_MAX_TOKENS,
    policy: Union[ConversionPolicy, str, None] = ConversionPolicy.STRICT,
    plan: Optional[ConversionPlan] = None,
) -> Dict[str, Any]:
    """Build a Messages API request body.

    Raises:
        ConversionError: under strict policy for the first blocked part.
    """
    caps = Capabilities.anthropic()
    if plan is None:
        plan = ConversionPlan(provider_name=PROVIDER, policy=ConversionPolicy.coerce(policy))
    system_blocks: List[Dict[str, Any]] = []
    plain_system = True
    if request.system_message is not None:
        plain_system = _system_blocks(request.system_message, caps, plan, None, system_blocks)

    tool_names: Dict[str, str] = {}
    messages: List[Dict[str, Any]] = []
    for message_index, message in enumerate(request.messages):
        if message.role is MessageRole.SYSTEM:
            plan.fail(
                UnsupportedContentError(
                    0,
                    "system_message",
                    PROVIDER,
                    "system text is only accepted in the top-level 'system' field",
                    message_index=message_index,
                ),
                TransformAction.shadow("system_message", "system"),
            )
            _system_blocks(message, caps, plan, message_index, system_blocks)
            plain_system = False
            continue
        note_tool_role_demoted(plan, message, message_index)
        role = "assistant" if message.role is MessageRole.ASSISTANT else "user"
        blocks: List[Dict[str, Any]] = []
        for part_index, part in enumerate(message.content):
            gated = gate_part(part, caps, plan, part_index=part_index, message_index=message_index)
            if gated is None:
                continue
            block = _encode_part(gated, role, caps, plan, tool_names, part_index, message_index)
            if block is not None:
                blocks.append(block)
        messages.append({"role": role, "content": blocks})

    payload: Dict[str, Any] = {"model": model, "max_tokens": max_tokens, "messages": messages}
    if system_blocks:
        if plain_system and len(system_blocks) == 1:
            payload["system"] = system_blocks[0]["text"]
        else:
            payload["system"] = system_blocks
    tools = _encode_tools(request.tools, plan)
    if tools:
        payload["tools"] = tools
    plan.raise_if_blocked()
    log_plan_outcome(plan, "request", model=model)
    return payload


def _system_blocks(
    message: Message,
    caps: Capabilities,
    plan: ConversionPlan,
    message_index: Optional[int],
    out: List[Dict[str, Any]],
) -> bool:
    """Append the text blocks of ``message``; return True when every part was plain text."""
    plain = True
    for part_index, part in enumerate(message.content):
        gated = gate_part(part, caps, plan, part_index=part_index, message_index=message_index)
        if gated is None:
            continue
        if not isinstance(gated, TextPart):
            plan.fail(
                UnsupportedContentError(
                    part_index, gated.type, PROVIDER, "system accepts text only", message_index=message_index
                )
            )
            continue
        note_ext_dropped(plan, caps, gated, f"system part {part_index}", _TEXT_EXT_HANDLED)
        plain = plain and not gated.ext
        out.append({"type": "text", "text": gated.text})
    return plain


def _encode_part(
    part: Part,
    role: str,
    caps: Capabilities,
    plan: ConversionPlan,
    tool_names: Dict[str, str],
    part_index: int,
    message_index: int,
) -> Optional[Dict[str, Any]]:
    where = f"message {message_index} part {part_index}"

    def reject(reason: str) -> None:
        plan.fail(UnsupportedContentError(part_index, part.type, PROVIDER, reason, message_index=message_index))

    if isinstance(part, TextPart):
        note_ext_dropped(plan, caps, part, where, _TEXT_EXT_HANDLED)
        if is_reasoning(part):
            if role != "assistant":
                plan.add_warning(f"{where}: reasoning text in a user turn sent as plain text")
                return {"type": "text", "text": part.text}
            block: Dict[str, Any] = {"type": "thinking", "thinking": part.text}
            signature = part.ext.get(ANTHROPIC_SIGNATURE)
            if signature is not None:
                block["signature"] = signature
            else:
                plan.add_warning(f"{where}: thinking block sent without a signature")
            return block
        return {"type": "text", "text": part.text}
    if isinstance(part, BlobPart):
        note_ext_dropped(plan, caps, part, where)
        note_blob_metadata_dropped(plan, part, where)
        return _image_block(part)
    if isinstance(part, ToolUsePart):
        if role != "assistant":
            reject("tool_use blocks are only valid in assistant turns")
            return None
        note_ext_dropped(plan, caps, part, where)
        tool_names[part.id] = part.name
        return {"type": "tool_use", "id": part.id, "name": part.name, "input": part.args}
    if isinstance(part, ToolResultPart):
        if role == "assistant":
            reject("tool_result blocks are only valid in user turns")
            return None
        return _tool_result_block(part, caps, tool_names)
    if isinstance(part, OpaquePart):
        return part.payload
    return None  # pragma: no cover - closed union


def _image_block(part: BlobPart) -> Dict[str, Any]:
    return {
        "type": "image",
        "source": {"type": "base64", "media_type": part.mime_type, "data": part.data_ref.data},  # type: ignore[union-attr]
    }


def _is_native_result(part: ToolResultPart, caps: Capabilities, tool_names: Dict[str, str]) -> bool:
    if tool_names.get(part.id) != part.name or set(part.ext) - {ANTHROPIC_IS_ERROR}:
        return False
    for index, inner in enumerate(part.parts):
        if inner.ext:
            return False
        if isinstance(inner, TextPart):
            continue
        if (
            isinstance(inner, BlobPart)
            and inner.is_image()
            and inner.is_base64()
            and inner.name is None
            and inner.description is None
            and check_part(inner, caps, part_index=index) is None
        ):
            continue
        return False
    return True


def _tool_result_block(part: ToolResultPart, caps: Capabilities, tool_names: Dict[str, str]) -> Dict[str, Any]:
    block: Dict[str, Any] = {"type": "tool_result", "tool_use_id": part.id}
    if _is_native_result(part, caps, tool_names):
        block["content"] = [
            {"type": "text", "text": p.text} if isinstance(p, TextPart) else _image_block(p)  # type: ignore[arg-type]
            for p in part.parts
        ]
    else:
        block["content"] = flatten_tool_result(part)
    if ANTHROPIC_IS_ERROR in part.ext:
        block["is_error"] = bool(part.ext[ANTHROPIC_IS_ERROR])
    return block


def _encode_tools(tools: Optional[List[Tool]], plan: ConversionPlan) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for tool_index, tool in enumerate(tools or []):
        if isinstance(tool, GeminiTool):
            plan.fail(
                UnsupportedContentError(tool_index, tool.type, PROVIDER, "Gemini-native tools have no Anthropic equivalent")
            )
            continue
        for decl in tool.functions:
            item: Dict[str, Any] = {"name": decl.name}
            if decl.description is not None:
                item["description"] = decl.description
            item["input_schema"] = dict(decl.parameters) if decl.parameters else dict(_EMPTY_SCHEMA)
            out.append(item)
    return out


# ---------------------------------------------------------------------------
# wire -> canonical
# ---------------------------------------------------------------------------


def from_anthropic_request(payload: Dict[str, Any]) -> ModelRequest:
    """Rebuild a canonical request from a Messages API request body.

    Raises:
        MessageConversionError: for malformed messages or blocks.
    """
    wire_messages = payload.get("messages") if isinstance(payload, dict) else None
    if not isinstance(wire_messages, list):
        raise MessageConversionError("request has no 'messages' list", PROVIDER)
    tool_names: Dict[str, str] = {}
    messages: List[Message] = []
    for wire_index, wire in enumerate(wire_messages):
        if not isinstance(wire, dict) or wire.get("role") not in ("user", "assistant"):
            raise MessageConversionError(f"message {wire_index} must be a user or assistant object", PROVIDER)
        blocks = _wire_blocks(wire.get("content"))
        parts = [_decode_block(block, tool_names) for block in blocks]
        if wire["role"] == "assistant":
            role = MessageRole.ASSISTANT
        elif parts and all(isinstance(p, ToolResultPart) for p in parts):
            role = MessageRole.TOOL
        else:
            role = MessageRole.USER
        messages.append(Message(role=role, content=parts))
    return ModelRequest(
        messages=messages,
        system_message=_decode_system(payload.get("system")),
        tools=_decode_tools(payload.get("tools")),
    )


def from_anthropic_response(payload: Dict[str, Any]) -> ModelResponse:
    """Convert a Messages API response body.

    Raises:
        MessageConversionError: for error bodies or malformed content.
    """
    if not isinstance(payload, dict) or payload.get("type") == "error":
        detail = payload.get("error") if isinstance(payload, dict) else None
        raise MessageConversionError(f"response is an error body ({detail})", PROVIDER)
    parts = [_decode_block(block, {}) for block in _wire_blocks(payload.get("content"))]
    stop_reason = payload.get("stop_reason")
    return ModelResponse(
        message=Message(role=MessageRole.ASSISTANT, content=parts),
        usage=usage_from_anthropic(payload),
        model_name=str(payload.get("model") or ""),
        vendor_name=PROVIDER,
        finish_reason=None if stop_reason is None else _STOP_REASONS.get(stop_reason, FinishReason.OTHER),
        response_id=payload.get("id"),
    )


def _wire_blocks(content: Any) -> List[Dict[str, Any]]:
    if content is None:
        return []
    if isinstance(content, str):
        return [{"type": "text", "text": content}]
    if not isinstance(content, list) or not all(isinstance(b, dict) for b in content):
        raise MessageConversionError("content must be a string or a list of blocks", PROVIDER)
    return content


def _decode_block(block: Dict[str, Any], tool_names: Dict[str, str]) -> Part:
    kind = block.get("type")
    if kind == "text":
        return TextPart(text=str(block.get("text", "")))
    if kind == "thinking":
        ext: Dict[str, Any] = {REASONING_THINKING: True}
        if block.get("signature") is not None:
            ext[ANTHROPIC_SIGNATURE] = block["signature"]
        return TextPart(text=str(block.get("thinking", "")), ext=ext)
    if kind == "image":
        return _decode_image(block)
    if kind == "tool_use":
        if not isinstance(block.get("id"), str) or not isinstance(block.get("name"), str):
            raise MessageConversionError("tool_use block without id or name", PROVIDER)
        tool_names[block["id"]] = block["name"]
        return ToolUsePart(id=block["id"], name=block["name"], args=block.get("input", {}))
    if kind == "tool_result":
        return _decode_tool_result(block, tool_names)
    return OpaquePart(provider=PROVIDER, kind=str(kind or "unknown"), payload=block)


def _decode_image(block: Dict[str, Any]) -> Part:
    source = block.get("source")
    if not isinstance(source, dict):
        raise MessageConversionError("image block without a source object", PROVIDER)
    if source.get("type") == "base64" and isinstance(source.get("data"), str):
        return blob_from_base64(source["data"], str(source.get("media_type") or "image/png"))
    if source.get("type") == "url" and isinstance(source.get("url"), str):
        return OpaquePart(provider=PROVIDER, kind="image", payload=block)
    raise MessageConversionError(f"unsupported image source {source.get('type')!r}", PROVIDER)


def _decode_tool_result(block: Dict[str, Any], tool_names: Dict[str, str]) -> ToolResultPart:
    call_id = block.get("tool_use_id")
    if not isinstance(call_id, str):
        raise MessageConversionError("tool_result block without tool_use_id", PROVIDER)
    content = block.get("content")
    decoded_name: Optional[str] = None
    ext: Dict[str, Any] = {}
    if isinstance(content, str):
        decoded_name, parts, ext = unflatten_tool_result(content)
    else:
        parts = [_decode_block(inner, tool_names) for inner in _wire_blocks(content)]
    if "is_error" in block:
        ext = {**ext, ANTHROPIC_IS_ERROR: bool(block["is_error"])}
    name = decoded_name or tool_names.get(call_id) or "unknown"
    return ToolResultPart(id=call_id, name=name, parts=parts, ext=ext)


def _decode_system(system: Any) -> Optional[Message]:
    if system is None:
        return None
    blocks = _wire_blocks(system)
    return Message(role=MessageRole.SYSTEM, content=[TextPart(text=str(b.get("text", ""))) for b in blocks])


def _decode_tools(items: Any) -> Optional[List[Tool]]:
    if items is None:
        return None
    if not isinstance(items, list):
        raise MessageConversionError("'tools' is not a list", PROVIDER)
    functions: List[ToolDeclaration] = []
    for tool_index, item in enumerate(items):
        if not isinstance(item, dict) or not isinstance(item.get("name"), str):
            raise MessageConversionError(f"tool {tool_index} has no name", PROVIDER)
        schema = item.get("input_schema")
        if not isinstance(schema, dict):
            # Server tools (web search, code execution) carry no input_schema.
            raise MessageConversionError(f"tool '{item['name']}' has no input_schema object", PROVIDER)
        schema = dict(schema)
        functions.append(
            ToolDeclaration(
                name=item["name"],
                description=item.get("description"),
                parameters={} if schema == _EMPTY_SCHEMA else schema,
            )
        )
    return [FunctionDeclarations(functions=functions)] if functions else None


__all__ = ["to_anthropic_request", "from_anthropic_request", "from_anthropic_response"]
