"""
Tool declarations attached to a canonical request.

Function tools are grouped in batches (:class:`FunctionDeclarations`) the way
most vendors group them. :class:`GeminiTool` carries a Gemini-only tool entry
(``googleSearch``, ``codeExecution``...) verbatim; it has no representation
for any other vendor.
"""
from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ToolDeclaration(BaseModel):
    """A callable function exposed to the model.

    Attributes:
        name: Function name the model will call.
        description: Optional natural-language description.
        parameters: JSON-schema object describing the arguments.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    description: Optional[str] = None
    parameters: Dict[str, Any] = Field(default_factory=dict)


class FunctionDeclarations(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["function_declarations"] = "function_declarations"
    functions: List[ToolDeclaration] = Field(default_factory=list)


class GeminiTool(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["gemini_tool"] = "gemini_tool"
    payload: Dict[str, Any]


Tool = Annotated[Union[FunctionDeclarations, GeminiTool], Field(discriminator="type")]


def iter_function_declarations(tools: Optional[List[Any]]) -> List[ToolDeclaration]:
    """Return every function declaration across ``tools`` in order."""
    out: List[ToolDeclaration] = []
    for tool in tools or []:
        if isinstance(tool, FunctionDeclarations):
            out.extend(tool.functions)
    return out


__all__ = [
    "ToolDeclaration",
    "FunctionDeclarations",
    "GeminiTool",
    "Tool",
    "iter_function_declarations",
]
