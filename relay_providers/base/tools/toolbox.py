"""In-process tool providers and their ordered dispatcher.

This module defines the :class:`ToolProvider` contract, a registry-based
:class:`FunctionToolBox` that maps function names to plain callables, and
:class:`ToolSet`, an ordered collection of providers searched by name at
invocation time (first match wins).

Handlers receive the call's ``args`` and may return a string, a part, a list
of parts, or any JSON-serializable value; the result is normalized into a
:class:`~relay_providers.base.models.ToolResultPart` correlated by call id.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, runtime_checkable

from pydantic import BaseModel

from ..errors import ToolExecutionError, ToolNotFoundError
from ..logging import get_logger, log_event
from ..models import (
    FunctionDeclarations,
    Part,
    TextPart,
    Tool,
    ToolDeclaration,
    ToolResultPart,
    ToolUsePart,
)

ToolHandler = Callable[[Any], Any]

_logger = get_logger("relay_providers.tools")


@runtime_checkable
class ToolProvider(Protocol):
    """Source of tool declarations that can execute its own calls."""

    def tools(self) -> List[Tool]:
        ...

    def has_function(self, name: str) -> bool:
        ...

    def invoke(self, call: ToolUsePart) -> ToolResultPart:
        ...


def _normalize_result(value: Any) -> List[Part]:
    if isinstance(value, str):
        return [TextPart(text=value)]
    if isinstance(value, BaseModel) and hasattr(value, "part_type"):
        return [value]  # type: ignore[list-item]
    if isinstance(value, list) and value and all(hasattr(v, "part_type") for v in value):
        return list(value)
    return [TextPart(text=json.dumps(value, ensure_ascii=False, default=str))]


class FunctionToolBox:
    """A minimal registry-based tool provider.

    Contract:
        - Register handlers by name using ``register(name, handler, ...)``.
        - ``tools()`` exposes one function-declaration batch for all handlers.
        - ``invoke(call)`` runs the handler with ``call.args`` and wraps the
          result in a :class:`ToolResultPart` with the call's id and name.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, ToolHandler] = {}
        self._declarations: Dict[str, ToolDeclaration] = {}

    def register(
        self,
        name: str,
        handler: ToolHandler,
        description: Optional[str] = None,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> "FunctionToolBox":
        """Register a tool handler under ``name`` (replacing any previous one).

        Args:
            name: Unique tool name.
            handler: Callable receiving the call arguments.
            description: Optional description shown to the model.
            parameters: JSON-schema for the arguments.
        """
        self._handlers[name] = handler
        self._declarations[name] = ToolDeclaration(
            name=name, description=description, parameters=dict(parameters or {})
        )
        return self

    def tools(self) -> List[Tool]:
        if not self._declarations:
            return []
        return [FunctionDeclarations(functions=list(self._declarations.values()))]

    def has_function(self, name: str) -> bool:
        return name in self._handlers

    def invoke(self, call: ToolUsePart) -> ToolResultPart:
        """Invoke the handler for ``call``.

        Raises:
            ToolNotFoundError: when no handler is registered for ``call.name``.
            ToolExecutionError: when the handler raises; chained to the cause.
        """
        handler = self._handlers.get(call.name)
        if handler is None:
            raise ToolNotFoundError(call.name)
        log_event(_logger, "tool.invoke", level=logging.DEBUG, tool=call.name, call_id=call.id)
        try:
            value = handler(call.args)
        except Exception as exc:
            raise ToolExecutionError(call.name, raw=exc) from exc
        return ToolResultPart(id=call.id, name=call.name, parts=_normalize_result(value))


class ToolSet:
    """Ordered collection of tool providers.

    Lookup walks providers in insertion order; the first provider that has
    the function handles the call.
    """

    def __init__(self, providers: Optional[List[ToolProvider]] = None) -> None:
        self._providers: List[ToolProvider] = list(providers or [])

    def add(self, provider: ToolProvider) -> None:
        self._providers.append(provider)

    def with_provider(self, provider: ToolProvider) -> "ToolSet":
        """Return a new set with ``provider`` appended."""
        return ToolSet(self._providers + [provider])

    @property
    def providers(self) -> List[ToolProvider]:
        return list(self._providers)

    def tools(self) -> List[Tool]:
        out: List[Tool] = []
        for provider in self._providers:
            out.extend(provider.tools())
        return out

    def has_function(self, name: str) -> bool:
        return any(p.has_function(name) for p in self._providers)

    def invoke(self, call: ToolUsePart) -> ToolResultPart:
        """Route ``call`` to the first provider exposing ``call.name``.

        Raises:
            ToolNotFoundError: when no provider exposes the function.
        """
        for provider in self._providers:
            if provider.has_function(call.name):
                return provider.invoke(call)
        raise ToolNotFoundError(call.name)


__all__ = ["ToolHandler", "ToolProvider", "FunctionToolBox", "ToolSet"]
