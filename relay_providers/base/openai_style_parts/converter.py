"""OpenAI-compatible chat-completions converter.

Purpose:
    Convert canonical requests to the chat-completions wire format shared by
    OpenAI, OpenRouter and Mistral, and convert wire requests and responses
    back. Vendor differences are expressed as class attributes and small
    hook methods overridden by the per-vendor subclasses.

Mapping summary:
    - ``system_message`` and System-role messages become ``role: system``;
      a leading wire system message becomes ``system_message`` on the way back.
    - A message with a single ext-free text part uses string ``content``;
      anything else uses a content-item array.
    - ToolUse parts become ``tool_calls`` on the assistant message.
    - Each ToolResult becomes its own ``role: tool`` message, emitted in part
      order; its body is produced by the tool-result codec.
    - Opaque parts from the same vendor are emitted verbatim as content items.

Failure modes:
    - Strict policy: the first blocked part raises its ``ConversionError``.
    - Malformed wire input raises :class:`MessageConversionError`.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple, Union

from ..capabilities import Capabilities
from ..conversion.ext import (
    OPENAI_IMAGE_DETAIL,
    OPENAI_REFUSAL,
    REASONING_THINKING,
    SHADOW_ORIGINAL_TYPE,
    is_reasoning,
)
from ..conversion.plan import ConversionPlan
from ..conversion.planner import (
    gate_part,
    log_plan_outcome,
    note_blob_metadata_dropped,
    note_ext_dropped,
    note_tool_role_demoted,
)
from ..conversion.policy import ConversionPolicy
from ..errors import MessageConversionError, UnsupportedContentError
from ..models import (
    BlobPart,
    GeminiTool,
    Message,
    MessageRole,
    ModelRequest,
    ModelResponse,
    OpaquePart,
    Part,
    TextPart,
    Tool,
    ToolResultPart,
    ToolUsePart,
)
from ..tools.encoding import flatten_tool_result, unflatten_tool_result
from ..usage import Usage
from .wire_helpers import (
    blob_from_image_url,
    blob_from_input_audio,
    function_tool_item,
    image_url_item,
    input_audio_item,
    map_finish_reason,
    tool_call_item,
    tool_use_from_call,
    tools_from_wire,
    wire_object,
)

TEXT_EXT_HANDLED = (REASONING_THINKING, OPENAI_REFUSAL, SHADOW_ORIGINAL_TYPE)

# Hooks return a (slot, value) pair; slot is "content" or "reasoning".
Routed = Tuple[str, Dict[str, Any]]


class _Turn:
    """Accumulates one wire user/assistant message."""

    def __init__(self, role: str) -> None:
        self.role = role
        self.items: List[Dict[str, Any]] = []
        self.calls: List[Dict[str, Any]] = []
        self.reasoning: List[Dict[str, Any]] = []
        self.refusal: Optional[str] = None
        self.plain = True

    def empty(self) -> bool:
        return not (self.items or self.calls or self.reasoning or self.refusal is not None)

    def build(self) -> Dict[str, Any]:
        msg: Dict[str, Any] = {"role": self.role}
        if len(self.items) == 1 and self.items[0].get("type") == "text" and self.plain:
            msg["content"] = self.items[0]["text"]
        elif self.items:
            msg["content"] = self.items
        elif self.role == "assistant" and not self.empty():
            msg["content"] = None
        else:
            msg["content"] = ""
        if self.calls:
            msg["tool_calls"] = self.calls
        if self.refusal is not None:
            msg["refusal"] = self.refusal
        if self.reasoning:
            msg["reasoning_details"] = self.reasoning
        return msg


class OpenAIStyleConverter:
    """Canonical <-> chat-completions converter.

    Subclasses set ``provider_name`` and may override:
        - ``include_tool_message_name``: send ``name`` on tool messages.
        - ``image_url_as_string``: send ``image_url`` as a bare string.
        - ``text_ext_handled``: text ext keys mapped by the converter itself.
        - ``encode_blob`` / ``encode_reasoning`` / ``encode_opaque``.
        - ``decode_reasoning`` / ``finalize_request`` / ``extract_usage``.
    """

    provider_name: str = "openai"
    include_tool_message_name: bool = False
    image_url_as_string: bool = False
    text_ext_handled: Tuple[str, ...] = TEXT_EXT_HANDLED

    def __init__(self) -> None:
        self._caps = Capabilities.for_provider(self.provider_name)

    @property
    def capabilities(self) -> Capabilities:
        return self._caps

    # ------------------------------------------------------------------
    # canonical -> wire
    # ------------------------------------------------------------------
    def to_request(
        self,
        request: ModelRequest,
        *,
        model: str,
        policy: Union[ConversionPolicy, str, None] = ConversionPolicy.STRICT,
        plan: Optional[ConversionPlan] = None,
    ) -> Dict[str, Any]:
        """Build the wire request for ``request``.

        Raises:
            ConversionError: under strict policy for the first blocked part.
        """
        if plan is None:
            plan = ConversionPlan(provider_name=self.provider_name, policy=ConversionPolicy.coerce(policy))
        messages: List[Dict[str, Any]] = []
        if request.system_message is not None:
            messages.append(self._encode_system(request.system_message, plan, None))
        for message_index, message in enumerate(request.messages):
            if message.role is MessageRole.SYSTEM:
                messages.append(self._encode_system(message, plan, message_index))
            else:
                note_tool_role_demoted(plan, message, message_index)
                messages.extend(self._encode_turns(message, plan, message_index))
        payload: Dict[str, Any] = {"model": model, "messages": messages}
        tools = self._encode_tools(request.tools, plan)
        if tools:
            payload["tools"] = tools
        self.finalize_request(payload, request, plan)
        plan.raise_if_blocked()
        log_plan_outcome(plan, "request", model=model)
        return payload

    def _encode_system(self, message: Message, plan: ConversionPlan, message_index: Optional[int]) -> Dict[str, Any]:
        turn = _Turn("system")
        for part_index, part in enumerate(message.content):
            gated = gate_part(part, self._caps, plan, part_index=part_index, message_index=message_index)
            if gated is None:
                continue
            if not isinstance(gated, TextPart):
                plan.fail(
                    UnsupportedContentError(
                        part_index,
                        gated.type,
                        self.provider_name,
                        "system messages accept text only",
                        message_index=message_index,
                    )
                )
                continue
            note_ext_dropped(plan, self._caps, gated, f"system part {part_index}", self.text_ext_handled)
            turn.items.append({"type": "text", "text": gated.text})
            turn.plain = turn.plain and not gated.ext
        return turn.build()

    def _encode_turns(self, message: Message, plan: ConversionPlan, message_index: int) -> List[Dict[str, Any]]:
        role = "assistant" if message.role is MessageRole.ASSISTANT else "user"
        out: List[Dict[str, Any]] = []
        turn = _Turn(role)
        for part_index, part in enumerate(message.content):
            where = f"message {message_index} part {part_index}"
            gated = gate_part(part, self._caps, plan, part_index=part_index, message_index=message_index)
            if gated is None:
                continue
            if isinstance(gated, ToolResultPart):
                if not turn.empty():
                    out.append(turn.build())
                    turn = _Turn(role)
                out.append(self._tool_message(gated))
            elif isinstance(gated, ToolUsePart):
                if role != "assistant":
                    plan.fail(
                        UnsupportedContentError(
                            part_index,
                            gated.type,
                            self.provider_name,
                            "tool calls are only valid in assistant messages",
                            message_index=message_index,
                        )
                    )
                    continue
                note_ext_dropped(plan, self._caps, gated, where)
                turn.calls.append(tool_call_item(gated))
            elif isinstance(gated, TextPart):
                self._route_text(turn, gated, plan, where)
            elif isinstance(gated, BlobPart):
                item = self.encode_blob(gated, plan, part_index=part_index, message_index=message_index)
                if item is not None:
                    note_ext_dropped(plan, self._caps, gated, where, (OPENAI_IMAGE_DETAIL,))
                    note_blob_metadata_dropped(plan, gated, where)
                    turn.items.append(item)
                    turn.plain = False
            elif isinstance(gated, OpaquePart):
                self._route(turn, self.encode_opaque(gated))
        if not turn.empty() or not out:
            out.append(turn.build())
        return out

    def _route_text(self, turn: _Turn, part: TextPart, plan: ConversionPlan, where: str) -> None:
        note_ext_dropped(plan, self._caps, part, where, self.text_ext_handled)
        if is_reasoning(part):
            self._route(turn, self.encode_reasoning(part, turn.role, plan, where))
        elif part.ext.get(OPENAI_REFUSAL) and turn.role == "assistant":
            turn.refusal = part.text
        else:
            turn.items.append({"type": "text", "text": part.text})
            turn.plain = turn.plain and not part.ext

    @staticmethod
    def _route(turn: _Turn, routed: Routed) -> None:
        slot, value = routed
        if slot == "reasoning":
            turn.reasoning.append(value)
        else:
            turn.items.append(value)
            turn.plain = False

    def _tool_message(self, part: ToolResultPart) -> Dict[str, Any]:
        msg: Dict[str, Any] = {"role": "tool", "tool_call_id": part.id, "content": flatten_tool_result(part)}
        if self.include_tool_message_name:
            msg["name"] = part.name
        return msg

    def _encode_tools(self, tools: Optional[List[Tool]], plan: ConversionPlan) -> List[Dict[str, Any]]:
        out: List[Dict[str, Any]] = []
        for tool_index, tool in enumerate(tools or []):
            if isinstance(tool, GeminiTool):
                plan.fail(
                    UnsupportedContentError(
                        tool_index,
                        tool.type,
                        self.provider_name,
                        "Gemini-native tools have no chat-completions equivalent",
                    )
                )
                continue
            out.extend(function_tool_item(decl) for decl in tool.functions)
        return out

    # ---- hooks ---------------------------------------------------------
    def encode_blob(
        self,
        part: BlobPart,
        plan: ConversionPlan,
        *,
        part_index: int,
        message_index: Optional[int],
    ) -> Optional[Dict[str, Any]]:
        """Return the content item for an admitted blob (``None`` if omitted)."""
        if part.is_image():
            return image_url_item(part, url_as_string=self.image_url_as_string)
        if part.is_audio() and part.is_base64():
            return input_audio_item(part)
        plan.fail(
            UnsupportedContentError(
                part_index,
                part.type,
                self.provider_name,
                f"{part.mime_type} via {'base64' if part.is_base64() else 'URI'} has no content item",
                message_index=message_index,
            )
        )
        return None

    def encode_reasoning(self, part: TextPart, role: str, plan: ConversionPlan, where: str) -> Routed:
        """Default: no reasoning input slot, so send the text as content."""
        plan.add_warning(f"{where}: reasoning text sent as plain content on {self.provider_name}")
        return "content", {"type": "text", "text": part.text}

    def encode_opaque(self, part: OpaquePart) -> Routed:
        return "content", part.payload

    def finalize_request(self, payload: Dict[str, Any], request: ModelRequest, plan: ConversionPlan) -> None:
        """Adjust the assembled payload; no-op by default."""

    # ------------------------------------------------------------------
    # wire -> canonical
    # ------------------------------------------------------------------
    def from_request(self, payload: Dict[str, Any]) -> ModelRequest:
        """Rebuild a canonical request from a wire request.

        Raises:
            MessageConversionError: for malformed messages, unknown roles or
                unparseable tool-call arguments.
        """
        wire_messages = payload.get("messages") if isinstance(payload, dict) else None
        if not isinstance(wire_messages, list):
            raise MessageConversionError("request has no 'messages' list", self.provider_name)
        tool_names: Dict[str, str] = {}
        system_message: Optional[Message] = None
        messages: List[Message] = []
        for wire_index, wire in enumerate(wire_messages):
            if not isinstance(wire, dict):
                raise MessageConversionError(f"message {wire_index} is not an object", self.provider_name)
            role = wire.get("role")
            if role in ("system", "developer"):
                msg = Message(role=MessageRole.SYSTEM, content=self._decode_content(wire.get("content")))
                if wire_index == 0:
                    system_message = msg
                else:
                    messages.append(msg)
            elif role == "user":
                messages.append(Message(role=MessageRole.USER, content=self._decode_content(wire.get("content"))))
            elif role == "assistant":
                messages.append(Message(role=MessageRole.ASSISTANT, content=self._decode_assistant(wire, tool_names)))
            elif role == "tool":
                messages.append(Message(role=MessageRole.TOOL, content=[self._decode_tool_message(wire, tool_names)]))
            else:
                raise MessageConversionError(f"message {wire_index} has unknown role {role!r}", self.provider_name)
        return ModelRequest(
            messages=messages,
            system_message=system_message,
            tools=tools_from_wire(payload.get("tools"), self.provider_name),
        )

    def from_response(self, payload: Dict[str, Any]) -> ModelResponse:
        """Convert a chat-completions response body.

        Raises:
            MessageConversionError: when the body carries no choices or the
                first choice is malformed.
        """
        choices = payload.get("choices") if isinstance(payload, dict) else None
        if not isinstance(choices, list) or not choices:
            detail = payload.get("error") if isinstance(payload, dict) else None
            raise MessageConversionError(f"response has no choices ({detail or 'empty'})", self.provider_name)
        choice = choices[0]
        if not isinstance(choice, dict):
            raise MessageConversionError("response choice is not an object", self.provider_name)
        wire = wire_object(choice, "message", self.provider_name)
        parts = self._decode_assistant(wire, {})
        return ModelResponse(
            message=Message(role=MessageRole.ASSISTANT, content=parts),
            usage=self.extract_usage(payload),
            model_name=str(payload.get("model") or ""),
            vendor_name=self.provider_name,
            finish_reason=map_finish_reason(choice.get("finish_reason")),
            response_id=payload.get("id"),
        )

    def _decode_assistant(self, wire: Dict[str, Any], tool_names: Dict[str, str]) -> List[Part]:
        parts: List[Part] = list(self.decode_reasoning(wire))
        parts.extend(self._decode_content(wire.get("content")))
        refusal = wire.get("refusal")
        if isinstance(refusal, str):
            parts.append(TextPart(text=refusal, ext={OPENAI_REFUSAL: True}))
        for call in wire.get("tool_calls") or []:
            if not isinstance(call, dict):
                raise MessageConversionError("tool call entry is not an object", self.provider_name)
            use = tool_use_from_call(call, self.provider_name)
            tool_names[use.id] = use.name
            parts.append(use)
        return parts

    def _decode_tool_message(self, wire: Dict[str, Any], tool_names: Dict[str, str]) -> ToolResultPart:
        call_id = wire.get("tool_call_id")
        if not isinstance(call_id, str):
            raise MessageConversionError("tool message without tool_call_id", self.provider_name)
        content = wire.get("content")
        if isinstance(content, list) and len(content) == 1 and isinstance(content[0], dict) \
                and content[0].get("type") == "text":
            content = str(content[0].get("text", ""))
        if content is None or isinstance(content, str):
            decoded_name, parts, ext = unflatten_tool_result(content or "")
        elif isinstance(content, list):
            # Multi-part bodies keep every item as its own part.
            decoded_name, parts, ext = None, self._decode_content(content), {}
        else:
            raise MessageConversionError("tool message content must be a string or a list", self.provider_name)
        name = decoded_name or wire.get("name") or tool_names.get(call_id) or "unknown"
        return ToolResultPart(id=call_id, name=name, parts=parts, ext=ext)

    def _decode_content(self, content: Any) -> List[Part]:
        if content is None or content == "":
            return []
        if isinstance(content, str):
            return [TextPart(text=content)]
        if not isinstance(content, list):
            raise MessageConversionError("message content must be a string or a list", self.provider_name)
        return [self.decode_content_item(item) for item in content]

    def decode_content_item(self, item: Any) -> Part:
        """Map one wire content item to a canonical part."""
        if not isinstance(item, dict):
            raise MessageConversionError("content item is not an object", self.provider_name)
        kind = item.get("type")
        if kind == "text":
            return TextPart(text=str(item.get("text", "")))
        if kind == "image_url":
            return blob_from_image_url(item, self.provider_name)
        if kind == "input_audio":
            return blob_from_input_audio(item, self.provider_name)
        if kind == "thinking":
            return TextPart(text=_thinking_text(item.get("thinking")), ext={REASONING_THINKING: True})
        return OpaquePart(provider=self.provider_name, kind=str(kind or "unknown"), payload=item)

    def decode_reasoning(self, wire: Dict[str, Any]) -> List[Part]:
        """Reasoning parts carried outside ``content``; none by default."""
        return []

    def extract_usage(self, payload: Dict[str, Any]) -> Usage:  # pragma: no cover - overridden
        raise NotImplementedError


def _thinking_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return "".join(str(c.get("text", "")) for c in value if isinstance(c, dict))
    return ""


__all__ = ["OpenAIStyleConverter", "Routed", "TEXT_EXT_HANDLED"]
