"""Capabilities package.

Exports the static per-provider capability tables and their query helpers.
"""

from .core import (
    CAP_BASE64_INPUT,
    CAP_URI_INPUT,
    CAP_IMAGES,
    CAP_AUDIO,
    CAP_FILES,
    CAP_TOOL_USE,
    CAP_TOOL_RESULT_PARTS,
    CAP_METADATA_PASSTHROUGH,
    Capabilities,
    PROVIDER_CAPABILITIES,
    supported_providers,
)

__all__ = [
    # constants
    "CAP_BASE64_INPUT",
    "CAP_URI_INPUT",
    "CAP_IMAGES",
    "CAP_AUDIO",
    "CAP_FILES",
    "CAP_TOOL_USE",
    "CAP_TOOL_RESULT_PARTS",
    "CAP_METADATA_PASSTHROUGH",
    # tables
    "Capabilities",
    "PROVIDER_CAPABILITIES",
    "supported_providers",
]
