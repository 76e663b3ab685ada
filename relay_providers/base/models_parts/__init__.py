"""Models parts package public surface.

Re-exports the individual canonical types so callers can import from
``relay_providers.base.models_parts`` if needed, while
``relay_providers.base.models`` remains the primary stable import path.
"""

from .part import (
    Base64Data,
    UriData,
    TextPart,
    BlobPart,
    ToolUsePart,
    ToolResultPart,
    OpaquePart,
    Part,
)
from .message import Message, MessageRole
from .tool_declaration import ToolDeclaration, FunctionDeclarations, GeminiTool, Tool
from .model_request import ModelRequest
from .model_response import FinishReason, ModelResponse

__all__ = [
    "Base64Data",
    "UriData",
    "TextPart",
    "BlobPart",
    "ToolUsePart",
    "ToolResultPart",
    "OpaquePart",
    "Part",
    "Message",
    "MessageRole",
    "ToolDeclaration",
    "FunctionDeclarations",
    "GeminiTool",
    "Tool",
    "ModelRequest",
    "FinishReason",
    "ModelResponse",
]
