"""
Providers Base Package

Exports the provider-agnostic pieces every vendor package builds on:
- Models: canonical parts, messages, requests and responses
- Capabilities: per-provider feature tables
- Conversion: policies, plans and the capability gate
- Tools: the tool-result codec and tool dispatch
- Factory: lazy creation of chat models by canonical name
"""

from .capabilities import Capabilities, supported_providers
from .conversion import ConversionPlan, ConversionPolicy, TransformAction, get_converter, plan_request, relay_request
from .errors import (
    Base64TooLargeError,
    ConversionError,
    ErrorCode,
    MessageConversionError,
    MissingRequiredFeatureError,
    ProviderError,
    ToolExecutionError,
    ToolNotFoundError,
    ToolResultDecodeError,
    UnknownProviderError,
    UnsupportedContentError,
    UnsupportedMimeTypeError,
)
from .factory import ProviderFactory, create_model
from .models import (
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
    ToolDeclaration,
    ToolResultPart,
    ToolUsePart,
)
from .tools import FunctionToolBox, ToolProvider, ToolSet, decode_tool_result, encode_tool_result
from .usage import Modality, Usage

__all__ = [
    "Capabilities",
    "supported_providers",
    "ConversionPlan",
    "ConversionPolicy",
    "TransformAction",
    "get_converter",
    "plan_request",
    "relay_request",
    "Base64TooLargeError",
    "ConversionError",
    "ErrorCode",
    "MessageConversionError",
    "MissingRequiredFeatureError",
    "ProviderError",
    "ToolExecutionError",
    "ToolNotFoundError",
    "ToolResultDecodeError",
    "UnknownProviderError",
    "UnsupportedContentError",
    "UnsupportedMimeTypeError",
    "ProviderFactory",
    "create_model",
    "BlobPart",
    "FinishReason",
    "FunctionDeclarations",
    "GeminiTool",
    "Message",
    "MessageRole",
    "ModelRequest",
    "ModelResponse",
    "OpaquePart",
    "Part",
    "TextPart",
    "ToolDeclaration",
    "ToolResultPart",
    "ToolUsePart",
    "FunctionToolBox",
    "ToolProvider",
    "ToolSet",
    "decode_tool_result",
    "encode_tool_result",
    "Modality",
    "Usage",
]
