"""Tool dispatch and the tool-result codec."""

from .encoding import (
    decode_tool_result,
    decode_tool_result_parts,
    encode_tool_result,
    encode_tool_result_parts,
    flatten_tool_result,
    is_encoded_tool_result,
    unflatten_tool_result,
)
from .toolbox import FunctionToolBox, ToolHandler, ToolProvider, ToolSet

__all__ = [
    "encode_tool_result",
    "decode_tool_result",
    "encode_tool_result_parts",
    "decode_tool_result_parts",
    "is_encoded_tool_result",
    "flatten_tool_result",
    "unflatten_tool_result",
    "FunctionToolBox",
    "ToolHandler",
    "ToolProvider",
    "ToolSet",
]
