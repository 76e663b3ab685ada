"""Static per-provider input capabilities.

Each supported provider has exactly one :class:`Capabilities` entry, built at
import time and never mutated. Converters and the conversion planner consult
these tables before emitting vendor content; applications may query them to
pick a provider for a multimodal message.

MIME allow-lists accept exact types (``image/png``) and ``type/*`` wildcards
(``video/*``). Size limits apply to the length of the base64 string itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Tuple

from ..errors import UnknownProviderError

# Feature names used in MissingRequiredFeatureError and plan diagnostics.
CAP_BASE64_INPUT = "base64_blob_input"
CAP_URI_INPUT = "blob_uri_input"
CAP_IMAGES = "images"
CAP_AUDIO = "audio"
CAP_FILES = "files"
CAP_TOOL_USE = "tool_use"
CAP_TOOL_RESULT_PARTS = "tool_result_parts"
CAP_METADATA_PASSTHROUGH = "metadata_passthrough"

_IMAGE_MIMES = ("image/jpeg", "image/png", "image/gif", "image/webp")


@dataclass(frozen=True)
class Capabilities:
    """Input capabilities of one provider.

    Attributes:
        provider_name: Provider key (``"anthropic"``...).
        supports_base64_blob_input: Inline base64 blobs are accepted.
        supports_blob_uri_input: URI-referenced blobs are accepted.
        supports_images: Image blobs are accepted.
        supports_audio: Audio blobs are accepted.
        supports_files: Other file blobs (video, documents) are accepted.
        supports_tool_use: Function calling is available.
        supports_tool_result_parts: Tool results may carry structured parts
            natively instead of a flattened string.
        supports_metadata_passthrough: Part ``ext`` metadata survives on the wire.
        allowed_mime_inputs: Exact MIME types or ``type/*`` wildcards.
        max_base64_size: Maximum base64 payload length, ``None`` for no limit.
    """

    provider_name: str
    supports_base64_blob_input: bool = False
    supports_blob_uri_input: bool = False
    supports_images: bool = False
    supports_audio: bool = False
    supports_files: bool = False
    supports_tool_use: bool = False
    supports_tool_result_parts: bool = False
    supports_metadata_passthrough: bool = False
    allowed_mime_inputs: FrozenSet[str] = field(default_factory=frozenset)
    max_base64_size: Optional[int] = None

    def supports_mime(self, mime_type: str) -> bool:
        """Return True for an exact allow-list match or a ``type/*`` prefix match."""
        mime = (mime_type or "").strip().lower()
        if mime in self.allowed_mime_inputs:
            return True
        for allowed in self.allowed_mime_inputs:
            if allowed.endswith("/*") and mime.startswith(allowed[:-1]):
                return True
        return False

    def can_accept_base64(self, size: int) -> bool:
        """Return True when a base64 payload of ``size`` bytes is acceptable.

        ``False`` whenever base64 input is unsupported; otherwise ``size`` must
        not exceed ``max_base64_size`` (inclusive), with no limit meaning any size.
        """
        if not self.supports_base64_blob_input:
            return False
        return self.max_base64_size is None or size <= self.max_base64_size

    @classmethod
    def for_provider(cls, name: str) -> "Capabilities":
        """Return the capability table for ``name`` (case-insensitive).

        Raises:
            UnknownProviderError: when no table exists for ``name``.
        """
        key = (name or "").strip().lower()
        try:
            return PROVIDER_CAPABILITIES[key]
        except KeyError:
            raise UnknownProviderError(f"No capability table for provider '{name}'") from None

    @classmethod
    def anthropic(cls) -> "Capabilities":
        return PROVIDER_CAPABILITIES["anthropic"]

    @classmethod
    def openai(cls) -> "Capabilities":
        return PROVIDER_CAPABILITIES["openai"]

    @classmethod
    def gemini(cls) -> "Capabilities":
        return PROVIDER_CAPABILITIES["gemini"]

    @classmethod
    def mistral(cls) -> "Capabilities":
        return PROVIDER_CAPABILITIES["mistral"]

    @classmethod
    def openrouter(cls) -> "Capabilities":
        return PROVIDER_CAPABILITIES["openrouter"]


PROVIDER_CAPABILITIES: Dict[str, Capabilities] = {
    "anthropic": Capabilities(
        provider_name="anthropic",
        supports_base64_blob_input=True,
        supports_images=True,
        supports_tool_use=True,
        allowed_mime_inputs=frozenset(_IMAGE_MIMES),
        max_base64_size=5 * 1024 * 1024,
    ),
    "openai": Capabilities(
        provider_name="openai",
        supports_base64_blob_input=True,
        supports_blob_uri_input=True,
        supports_images=True,
        supports_audio=True,
        supports_tool_use=True,
        allowed_mime_inputs=frozenset(_IMAGE_MIMES + ("audio/wav", "audio/mp3", "audio/ogg")),
    ),
    "gemini": Capabilities(
        provider_name="gemini",
        supports_base64_blob_input=True,
        supports_blob_uri_input=True,
        supports_images=True,
        supports_audio=True,
        supports_files=True,
        supports_tool_use=True,
        supports_tool_result_parts=True,
        allowed_mime_inputs=frozenset(("image/*", "audio/*", "video/*", "application/pdf")),
    ),
    "mistral": Capabilities(
        provider_name="mistral",
        supports_blob_uri_input=True,
        supports_images=True,
        supports_tool_use=True,
        allowed_mime_inputs=frozenset(("image/jpeg", "image/png")),
    ),
    "openrouter": Capabilities(
        provider_name="openrouter",
        supports_base64_blob_input=True,
        supports_images=True,
        supports_tool_use=True,
        allowed_mime_inputs=frozenset(("image/jpeg", "image/png", "image/webp")),
    ),
}


def supported_providers() -> Tuple[str, ...]:
    """Return the provider keys that have a capability table."""
    return tuple(PROVIDER_CAPABILITIES)


__all__ = [
    "CAP_BASE64_INPUT",
    "CAP_URI_INPUT",
    "CAP_IMAGES",
    "CAP_AUDIO",
    "CAP_FILES",
    "CAP_TOOL_USE",
    "CAP_TOOL_RESULT_PARTS",
    "CAP_METADATA_PASSTHROUGH",
    "Capabilities",
    "PROVIDER_CAPABILITIES",
    "supported_providers",
]
