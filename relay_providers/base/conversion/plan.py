"""
Per-call conversion plan.

Purpose:
    Accumulate every decision a converter makes about content it cannot carry
    unchanged to the target provider: the recorded errors, the action taken
    for each affected part and free-form warnings for documented, non-blocking
    losses (e.g. a thinking signature that has no slot on the target).

Policy behavior:
    - ``STRICT``: :meth:`ConversionPlan.fail` records the error and raises it,
      so no output is produced.
    - ``SHADOW_ALLOWED``: the error is recorded alongside the fallback action
      (shadow or omit) and conversion continues.

A plan is owned by a single conversion call and is not thread-safe.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..errors import ConversionError
from ..logging import get_logger, log_event
from ..log_support import LogContext
from .policy import ConversionPolicy

_logger = get_logger("relay_providers.conversion")

PASS_THROUGH = "pass_through"
SHADOW = "shadow"
OMIT = "omit"


@dataclass(frozen=True)
class TransformAction:
    """What happened to one content unit.

    Attributes:
        kind: ``"pass_through"``, ``"shadow"`` or ``"omit"``.
        original_type: Canonical type of the shadowed part.
        simplified_to: Canonical type of the replacement.
        reason: Why the part was omitted.
    """

    kind: str
    original_type: Optional[str] = None
    simplified_to: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def pass_through(cls) -> "TransformAction":
        return cls(kind=PASS_THROUGH)

    @classmethod
    def shadow(cls, original_type: str, simplified_to: str) -> "TransformAction":
        return cls(kind=SHADOW, original_type=original_type, simplified_to=simplified_to)

    @classmethod
    def omit(cls, reason: str) -> "TransformAction":
        return cls(kind=OMIT, reason=reason)


@dataclass
class ConversionPlan:
    """Diagnostics accumulator for a single conversion.

    Attributes:
        provider_name: Target provider key.
        policy: Active :class:`ConversionPolicy`.
        part_actions: Actions recorded for degraded parts, in encounter order.
        errors: Recorded :class:`ConversionError` values.
        warnings: Human-readable notes about documented losses.
        shadow_metadata: Location-keyed details of shadowed parts
            (``"<message_index>.<part_index>"``).
    """

    provider_name: str
    policy: ConversionPolicy = ConversionPolicy.STRICT
    part_actions: List[TransformAction] = field(default_factory=list)
    errors: List[ConversionError] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    shadow_metadata: Dict[str, Any] = field(default_factory=dict)

    def add_error(self, error: ConversionError) -> None:
        self.errors.append(error)

    def add_warning(self, warning: str) -> None:
        self.warnings.append(warning)

    def add_action(self, action: TransformAction) -> None:
        self.part_actions.append(action)

    def has_errors(self) -> bool:
        return bool(self.errors)

    def is_lossless(self) -> bool:
        """True when nothing was rejected and nothing was omitted."""
        return not self.errors and not any(a.kind == OMIT for a in self.part_actions)

    def raise_if_blocked(self) -> None:
        """Raise the first recorded error when the policy is strict."""
        if self.policy is ConversionPolicy.STRICT and self.errors:
            raise self.errors[0]

    def fail(self, error: ConversionError, fallback: Optional[TransformAction] = None) -> None:
        """Record ``error``; raise it under strict policy, else record ``fallback``.

        Args:
            error: The conversion error describing the offending part.
            fallback: Action taken under shadow policy; defaults to omit.

        Raises:
            ConversionError: ``error`` itself when the policy is strict.
        """
        self.add_error(error)
        if self.policy is ConversionPolicy.STRICT:
            log_event(
                _logger,
                "conversion.rejected",
                LogContext(provider=self.provider_name, policy=self.policy.value),
                kind=error.kind,
                **error.to_dict(),
            )
            raise error
        self.add_action(fallback or TransformAction.omit(error.message))

    def summary(self) -> Dict[str, Any]:
        """Return a compact JSON-friendly summary for logging."""
        return {
            "policy": self.policy.value,
            "errors": [e.message for e in self.errors],
            "warnings": list(self.warnings),
            "actions": [a.kind for a in self.part_actions],
            "lossless": self.is_lossless(),
        }


__all__ = ["TransformAction", "ConversionPlan", "PASS_THROUGH", "SHADOW", "OMIT"]
