"""
Modality-keyed token accounting.

Purpose:
    Track token counts per modality for the input, output, cache and tool
    categories, plus optional cache-read, cache-creation and thoughts
    counters, a request counter and a free-form ``details`` blob. Values
    merge additively so usage from many requests (and many vendors) can be
    reduced in any order.

Merge semantics:
    - Modality maps: union of keys, counts summed, missing treated as 0.
    - Optional counters: ``a + b`` when both set, the set one otherwise,
      ``None`` when neither is set.
    - ``details``: dict union with the right-hand side winning on key
      collision when both are dicts; otherwise the right-hand side replaces
      the left unless it is ``None``. This one field is right-biased and
      therefore not commutative on collisions.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union


class Modality(str, Enum):
    """Well-known modalities. Any other string is accepted as a key."""

    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"


ModalityKey = Union[Modality, str]


def modality_key(value: ModalityKey) -> str:
    """Normalize a modality (enum or free-form string) to its dict key."""
    if isinstance(value, Modality):
        return value.value
    return str(value)


def _add_maps(lhs: Dict[str, int], rhs: Dict[str, int]) -> Dict[str, int]:
    out = dict(lhs)
    for key, count in rhs.items():
        out[key] = out.get(key, 0) + count
    return out


def _add_optional(a: Optional[int], b: Optional[int]) -> Optional[int]:
    if a is None:
        return b
    if b is None:
        return a
    return a + b


def _merge_details(a: Any, b: Any) -> Any:
    if isinstance(a, dict) and isinstance(b, dict):
        merged = dict(a)
        merged.update(b)
        return merged
    if b is None:
        return a
    return b


@dataclass
class Usage:
    """Token usage for one or more requests.

    Attributes:
        requests: Number of requests folded into this value.
        input_tokens_by_modality: Prompt-side tokens per modality.
        output_tokens_by_modality: Completion-side tokens per modality.
        cache_tokens_by_modality: Cached-content tokens per modality.
        tool_tokens_by_modality: Tool-use prompt tokens per modality.
        cache_read_tokens: Tokens served from a prompt cache.
        cache_creation_tokens: Tokens written to a prompt cache.
        thoughts_tokens: Reasoning tokens billed separately from output.
        details: Provider-specific JSON blob.
    """

    requests: int = 0
    input_tokens_by_modality: Dict[str, int] = field(default_factory=dict)
    output_tokens_by_modality: Dict[str, int] = field(default_factory=dict)
    cache_tokens_by_modality: Dict[str, int] = field(default_factory=dict)
    tool_tokens_by_modality: Dict[str, int] = field(default_factory=dict)
    cache_read_tokens: Optional[int] = None
    cache_creation_tokens: Optional[int] = None
    thoughts_tokens: Optional[int] = None
    details: Any = None

    # ---- recording -------------------------------------------------------

    def add_input(self, modality: ModalityKey, count: int) -> None:
        key = modality_key(modality)
        self.input_tokens_by_modality[key] = self.input_tokens_by_modality.get(key, 0) + count

    def add_output(self, modality: ModalityKey, count: int) -> None:
        key = modality_key(modality)
        self.output_tokens_by_modality[key] = self.output_tokens_by_modality.get(key, 0) + count

    def add_cache(self, modality: ModalityKey, count: int) -> None:
        key = modality_key(modality)
        self.cache_tokens_by_modality[key] = self.cache_tokens_by_modality.get(key, 0) + count

    def add_tool(self, modality: ModalityKey, count: int) -> None:
        key = modality_key(modality)
        self.tool_tokens_by_modality[key] = self.tool_tokens_by_modality.get(key, 0) + count

    # ---- derived totals --------------------------------------------------

    def input_tokens(self) -> int:
        return sum(self.input_tokens_by_modality.values())

    def output_tokens(self) -> int:
        return sum(self.output_tokens_by_modality.values())

    def cache_tokens(self) -> int:
        return sum(self.cache_tokens_by_modality.values())

    def tool_tokens(self) -> int:
        return sum(self.tool_tokens_by_modality.values())

    def total_tokens(self) -> int:
        """Input plus output plus thoughts."""
        return self.input_tokens() + self.output_tokens() + (self.thoughts_tokens or 0)

    def effective_input_tokens(self) -> int:
        """Input tokens minus cache-creation tokens, never below zero."""
        return max(0, self.input_tokens() - (self.cache_creation_tokens or 0))

    def total_cache_tokens(self) -> int:
        return (self.cache_read_tokens or 0) + (self.cache_creation_tokens or 0)

    # ---- merging ---------------------------------------------------------

    def __add__(self, other: "Usage") -> "Usage":
        if not isinstance(other, Usage):
            return NotImplemented
        return Usage(
            requests=self.requests + other.requests,
            input_tokens_by_modality=_add_maps(self.input_tokens_by_modality, other.input_tokens_by_modality),
            output_tokens_by_modality=_add_maps(self.output_tokens_by_modality, other.output_tokens_by_modality),
            cache_tokens_by_modality=_add_maps(self.cache_tokens_by_modality, other.cache_tokens_by_modality),
            tool_tokens_by_modality=_add_maps(self.tool_tokens_by_modality, other.tool_tokens_by_modality),
            cache_read_tokens=_add_optional(self.cache_read_tokens, other.cache_read_tokens),
            cache_creation_tokens=_add_optional(self.cache_creation_tokens, other.cache_creation_tokens),
            thoughts_tokens=_add_optional(self.thoughts_tokens, other.thoughts_tokens),
            details=_merge_details(self.details, other.details),
        )

    def __radd__(self, other: Any) -> "Usage":
        # Lets ``sum(usages)`` start from the integer 0.
        if other == 0:
            return self + Usage()
        return NotImplemented

    def __iadd__(self, other: "Usage") -> "Usage":
        if not isinstance(other, Usage):
            return NotImplemented
        merged = self + other
        self.__dict__.update(merged.__dict__)
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable mapping, omitting empty maps and unset optionals."""
        out: Dict[str, Any] = {"requests": self.requests}
        for name in (
            "input_tokens_by_modality",
            "output_tokens_by_modality",
            "cache_tokens_by_modality",
            "tool_tokens_by_modality",
        ):
            value = getattr(self, name)
            if value:
                out[name] = dict(value)
        for name in ("cache_read_tokens", "cache_creation_tokens", "thoughts_tokens", "details"):
            value = getattr(self, name)
            if value is not None:
                out[name] = value
        return out


__all__ = ["Modality", "ModalityKey", "modality_key", "Usage"]
