"""
Capability gate and request planning.

Purpose:
    Decide, for one canonical part and one target provider, whether the part
    may be emitted as-is. Converters call :func:`gate_part` for every part
    they are about to emit; applications call :func:`plan_request` to inspect
    a whole request before choosing a provider.

Rules (checked in this order, first failure wins):
    - Blob: base64 input supported / URI input supported, then media class
      (images, audio, other files), then MIME allow-list, then base64 size.
    - ToolUse and ToolResult: tool use supported. Tool-result contents are
      checked recursively only when the target carries structured tool-result
      parts; otherwise the codec flattens them losslessly.
    - Opaque: the part's provider must equal the target.
    - Text: always accepted.

Shadow policy replaces a rejected blob with a descriptive text placeholder
and omits any other rejected part.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Union

from ..capabilities import Capabilities
from ..errors import (
    Base64TooLargeError,
    ConversionError,
    UnsupportedContentError,
    UnsupportedMimeTypeError,
)
from ..logging import get_logger, log_event
from ..log_support import LogContext
from ..models import (
    BlobPart,
    Message,
    MessageRole,
    ModelRequest,
    OpaquePart,
    Part,
    TextPart,
    ToolResultPart,
    ToolUsePart,
)
from .ext import SHADOW_ORIGINAL_TYPE
from .plan import ConversionPlan, TransformAction
from .policy import ConversionPolicy

_logger = get_logger("relay_providers.conversion")


def check_part(
    part: Part,
    caps: Capabilities,
    *,
    part_index: int,
    message_index: Optional[int] = None,
) -> Optional[ConversionError]:
    """Return the error that blocks ``part`` for ``caps``, or ``None``."""
    provider = caps.provider_name

    def unsupported(reason: str) -> UnsupportedContentError:
        return UnsupportedContentError(part_index, part.type, provider, reason, message_index=message_index)

    if isinstance(part, TextPart):
        return None
    if isinstance(part, BlobPart):
        if part.is_base64() and not caps.supports_base64_blob_input:
            return unsupported("base64 blob input is not supported")
        if not part.is_base64() and not caps.supports_blob_uri_input:
            return unsupported("blob URI input is not supported")
        if part.is_image():
            if not caps.supports_images:
                return unsupported("image input is not supported")
        elif part.is_audio():
            if not caps.supports_audio:
                return unsupported("audio input is not supported")
        elif not caps.supports_files:
            return unsupported(f"file input ({part.mime_type}) is not supported")
        if not caps.supports_mime(part.mime_type):
            return UnsupportedMimeTypeError(
                part.mime_type, provider, part_index=part_index, message_index=message_index
            )
        size = part.base64_size()
        if size is not None and not caps.can_accept_base64(size):
            return Base64TooLargeError(
                size, caps.max_base64_size or 0, provider, part_index=part_index, message_index=message_index
            )
        return None
    if isinstance(part, (ToolUsePart, ToolResultPart)):
        if not caps.supports_tool_use:
            return unsupported("tool use is not supported")
        if isinstance(part, ToolResultPart) and caps.supports_tool_result_parts:
            for inner_index, inner in enumerate(part.parts):
                inner_error = check_part(inner, caps, part_index=inner_index, message_index=message_index)
                if inner_error is not None:
                    return inner_error
        return None
    if isinstance(part, OpaquePart):
        if part.provider != provider:
            return unsupported(
                f"opaque '{part.kind}' block from provider '{part.provider}' cannot be sent to '{provider}'"
            )
        return None
    return unsupported("unknown content type")  # pragma: no cover - closed union


def _shadow_text(part: BlobPart, error: ConversionError) -> TextPart:
    label = part.name or part.mime_type
    return TextPart(
        text=f"[{label} attachment not sent: {error.message}]",
        ext={SHADOW_ORIGINAL_TYPE: part.type},
    )


def gate_part(
    part: Part,
    caps: Capabilities,
    plan: ConversionPlan,
    *,
    part_index: int,
    message_index: Optional[int] = None,
) -> Optional[Part]:
    """Admit, degrade or reject ``part`` for the plan's target.

    Returns:
        The part itself when accepted, a text placeholder for a shadowed blob,
        or ``None`` when the part was omitted under shadow policy.

    Raises:
        ConversionError: under strict policy when the part is blocked.
    """
    error = check_part(part, caps, part_index=part_index, message_index=message_index)
    if error is None:
        return part
    if isinstance(part, BlobPart):
        plan.fail(error, TransformAction.shadow(part.type, "text"))
        plan.shadow_metadata[f"{message_index}.{part_index}"] = {
            "mime_type": part.mime_type,
            "name": part.name,
            "size": part.base64_size(),
            "uri": None if part.is_base64() else part.data_ref.uri,  # type: ignore[union-attr]
        }
        return _shadow_text(part, error)
    plan.fail(error)
    return None


def plan_request(
    provider: Union[str, Capabilities],
    request: ModelRequest,
    policy: Union[ConversionPolicy, str, None] = ConversionPolicy.STRICT,
) -> ConversionPlan:
    """Inspect ``request`` against ``provider`` without converting or raising.

    Every part of every message (and of ``system_message``) is checked; the
    returned plan lists each blocking error together with the action the
    given policy would take.
    """
    caps = provider if isinstance(provider, Capabilities) else Capabilities.for_provider(provider)
    plan = ConversionPlan(provider_name=caps.provider_name, policy=ConversionPolicy.coerce(policy))
    located = [(None, request.system_message)] if request.system_message is not None else []
    located.extend(enumerate(request.messages))
    for message_index, message in located:
        for part_index, part in enumerate(message.content):
            error = check_part(part, caps, part_index=part_index, message_index=message_index)
            if error is None:
                continue
            plan.add_error(error)
            if plan.policy is ConversionPolicy.SHADOW_ALLOWED and isinstance(part, BlobPart):
                plan.add_action(TransformAction.shadow(part.type, "text"))
            else:
                plan.add_action(TransformAction.omit(error.message))
    return plan


def note_ext_dropped(
    plan: ConversionPlan,
    caps: Capabilities,
    part: Any,
    where: str,
    handled: Iterable[str] = (),
) -> None:
    """Warn when ``part`` carries ext metadata the target cannot transport.

    Keys listed in ``handled`` are mapped by the converter itself and are not
    reported.
    """
    if caps.supports_metadata_passthrough:
        return
    handled_keys = set(handled)
    dropped = sorted(k for k in (getattr(part, "ext", None) or {}) if k not in handled_keys)
    if dropped:
        plan.add_warning(f"{where}: ext keys {dropped} not representable on {caps.provider_name}")


def note_blob_metadata_dropped(plan: ConversionPlan, part: BlobPart, where: str) -> None:
    """Warn when a blob's ``name``/``description`` has no slot on the target."""
    dropped = [f for f in ("name", "description") if getattr(part, f) is not None]
    if dropped:
        plan.add_warning(f"{where}: blob {' and '.join(dropped)} not sent to {plan.provider_name}")


def note_tool_role_demoted(plan: ConversionPlan, message: Message, message_index: int) -> None:
    """Warn when a Tool-role message carries parts that travel as a user turn."""
    if message.role is not MessageRole.TOOL:
        return
    others = sorted({p.type for p in message.content if not isinstance(p, ToolResultPart)})
    if others:
        plan.add_warning(
            f"message {message_index}: {', '.join(others)} parts of a tool message sent as a user turn"
        )


def log_plan_outcome(plan: ConversionPlan, direction: str, *, model: Optional[str] = None) -> None:
    """Emit ``conversion.complete`` (debug) or ``conversion.lossy`` (warning)."""
    ctx = LogContext(provider=plan.provider_name, model=model, direction=direction, policy=plan.policy.value)
    if plan.is_lossless() and not plan.warnings:
        log_event(_logger, "conversion.complete", ctx, level=logging.DEBUG)
        return
    summary = {k: v for k, v in plan.summary().items() if k != "policy"}
    log_event(_logger, "conversion.lossy", ctx, level=logging.WARNING, **summary)


__all__ = [
    "check_part",
    "gate_part",
    "plan_request",
    "note_ext_dropped",
    "note_blob_metadata_dropped",
    "note_tool_role_demoted",
    "log_plan_outcome",
]
