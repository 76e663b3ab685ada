"""
Canonical content units ("parts").

Purpose:
    Define the closed set of vendor-neutral content units every converter maps
    to and from: text, binary blobs, tool invocations, tool results and opaque
    vendor blocks. Each unit carries a namespaced ``ext`` bag so several
    converters can annotate the same unit without colliding.

External dependencies:
    - ``pydantic`` (v2) for validation, discriminated unions and structural
      equality.

Serialized form:
    Tagged JSON with a ``type`` discriminator. ``to_dict()`` emits every field,
    including ``ext`` and ``None`` optionals (as ``null``)::

        {"type": "tool_result", "id": "...", "name": "...", "parts": [...], "ext": {}}

Failure modes:
    Construction from untrusted data raises ``pydantic.ValidationError`` for
    unknown tags, missing fields, extra fields or malformed ``ext`` keys.
"""
from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


def validate_ext_keys(ext: Dict[str, Any]) -> Dict[str, Any]:
    """Ensure every ``ext`` key has the ``"<namespace>.<key>"`` shape."""
    for key in ext:
        ns, sep, rest = key.partition(".")
        if not sep or not ns or not rest:
            raise ValueError(f"ext key '{key}' must be namespaced as '<namespace>.<key>'")
    return ext


class Base64Data(BaseModel):
    """Inline payload carried as a base64 string."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["base64"] = "base64"
    data: str


class UriData(BaseModel):
    """Payload referenced by an external location."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["uri"] = "uri"
    uri: str


DataRef = Annotated[Union[Base64Data, UriData], Field(discriminator="type")]


class _PartBase(BaseModel):
    """Shared configuration and helpers for every part variant."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ext: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("ext")
    @classmethod
    def _check_ext(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        return validate_ext_keys(value)

    @property
    def part_type(self) -> str:
        """Return the discriminator tag (``"text"``, ``"blob"``...)."""
        return self.type  # type: ignore[attr-defined]

    def with_ext(self, namespace: str, key: str, value: Any):
        """Return a copy with ``ext["<namespace>.<key>"] = value``."""
        ext = dict(self.ext)
        ext[f"{namespace}.{key}"] = value
        return self.model_copy(update={"ext": ext})

    def to_dict(self) -> Dict[str, Any]:
        """Return the tagged JSON-compatible representation."""
        return self.model_dump(mode="json")


class TextPart(_PartBase):
    """Plain text content."""

    type: Literal["text"] = "text"
    text: str


class BlobPart(_PartBase):
    """A binary attachment referenced inline (base64) or by URI, never both.

    Attributes:
        data_ref: Exactly one of :class:`Base64Data` or :class:`UriData`.
        mime_type: IANA media type such as ``image/png``.
        name: Optional display or file name.
        description: Optional free-form description.
    """

    type: Literal["blob"] = "blob"
    data_ref: DataRef
    mime_type: str
    name: Optional[str] = None
    description: Optional[str] = None

    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    def is_audio(self) -> bool:
        return self.mime_type.startswith("audio/")

    def is_video(self) -> bool:
        return self.mime_type.startswith("video/")

    def is_base64(self) -> bool:
        return isinstance(self.data_ref, Base64Data)

    def base64_size(self) -> Optional[int]:
        """Return the length of the inline base64 payload, or ``None`` for URIs."""
        if isinstance(self.data_ref, Base64Data):
            return len(self.data_ref.data)
        return None


class ToolUsePart(_PartBase):
    """A model-issued request to invoke a tool; ``id`` correlates with a result."""

    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    args: Any = Field(default_factory=dict)


class ToolResultPart(_PartBase):
    """The result of a tool invocation.

    ``parts`` may recursively contain any part, including nested tool results
    and tool uses, to arbitrary depth. The tree has no back-references.
    """

    type: Literal["tool_result"] = "tool_result"
    id: str
    name: str
    parts: List["Part"] = Field(default_factory=list)


class OpaquePart(_PartBase):
    """A vendor-specific block preserved verbatim for same-vendor round trips."""

    type: Literal["opaque"] = "opaque"
    provider: str
    kind: str
    payload: Any = None


Part = Annotated[
    Union[TextPart, BlobPart, ToolUsePart, ToolResultPart, OpaquePart],
    Field(discriminator="type"),
]

ToolResultPart.model_rebuild()

PART_ADAPTER: TypeAdapter = TypeAdapter(Part)
PARTS_ADAPTER: TypeAdapter = TypeAdapter(List[Part])


def part_from_dict(data: Any) -> Part:
    """Validate a tagged JSON mapping into a part."""
    return PART_ADAPTER.validate_python(data)


def parts_from_list(data: Any) -> List[Part]:
    """Validate a list of tagged JSON mappings into parts."""
    return PARTS_ADAPTER.validate_python(data)


def parts_to_list(parts: List[Part]) -> List[Dict[str, Any]]:
    return [p.to_dict() for p in parts]


# ---- constructors -----------------------------------------------------------


def text_part(text: str, ext: Optional[Dict[str, Any]] = None) -> TextPart:
    return TextPart(text=text, ext=dict(ext or {}))


def blob_from_base64(
    data: str,
    mime_type: str,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    ext: Optional[Dict[str, Any]] = None,
) -> BlobPart:
    return BlobPart(
        data_ref=Base64Data(data=data),
        mime_type=mime_type,
        name=name,
        description=description,
        ext=dict(ext or {}),
    )


def blob_from_uri(
    uri: str,
    mime_type: str,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    ext: Optional[Dict[str, Any]] = None,
) -> BlobPart:
    return BlobPart(
        data_ref=UriData(uri=uri),
        mime_type=mime_type,
        name=name,
        description=description,
        ext=dict(ext or {}),
    )


def tool_use_part(id: str, name: str, args: Any = None, ext: Optional[Dict[str, Any]] = None) -> ToolUsePart:
    return ToolUsePart(id=id, name=name, args={} if args is None else args, ext=dict(ext or {}))


def tool_result_part(
    id: str,
    name: str,
    parts: Optional[List[Part]] = None,
    ext: Optional[Dict[str, Any]] = None,
) -> ToolResultPart:
    return ToolResultPart(id=id, name=name, parts=list(parts or []), ext=dict(ext or {}))


def opaque_part(provider: str, kind: str, payload: Any, ext: Optional[Dict[str, Any]] = None) -> OpaquePart:
    return OpaquePart(provider=provider, kind=kind, payload=payload, ext=dict(ext or {}))


__all__ = [
    "Base64Data",
    "UriData",
    "DataRef",
    "TextPart",
    "BlobPart",
    "ToolUsePart",
    "ToolResultPart",
    "OpaquePart",
    "Part",
    "PART_ADAPTER",
    "PARTS_ADAPTER",
    "part_from_dict",
    "parts_from_list",
    "parts_to_list",
    "validate_ext_keys",
    "text_part",
    "blob_from_base64",
    "blob_from_uri",
    "tool_use_part",
    "tool_result_part",
    "opaque_part",
]
