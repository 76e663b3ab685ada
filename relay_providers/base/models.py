"""
Canonical content model public surface.

This module re-exports the one-class-per-file implementations under
``relay_providers.base.models_parts`` so callers have a single stable import
path for parts, messages, requests and responses.
"""

from .models_parts.part import (
    Base64Data,
    UriData,
    DataRef,
    TextPart,
    BlobPart,
    ToolUsePart,
    ToolResultPart,
    OpaquePart,
    Part,
    PART_ADAPTER,
    PARTS_ADAPTER,
    part_from_dict,
    parts_from_list,
    parts_to_list,
    validate_ext_keys,
    text_part,
    blob_from_base64,
    blob_from_uri,
    tool_use_part,
    tool_result_part,
    opaque_part,
)
from .models_parts.message import Message, MessageRole
from .models_parts.tool_declaration import (
    ToolDeclaration,
    FunctionDeclarations,
    GeminiTool,
    Tool,
    iter_function_declarations,
)
from .models_parts.model_request import ModelRequest
from .models_parts.model_response import FinishReason, ModelResponse

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
    "Message",
    "MessageRole",
    "ToolDeclaration",
    "FunctionDeclarations",
    "GeminiTool",
    "Tool",
    "iter_function_declarations",
    "ModelRequest",
    "FinishReason",
    "ModelResponse",
]
