"""
Tool dispatch errors.

Raised by :class:`~relay_providers.base.tools.toolbox.ToolSet` and
:class:`~relay_providers.base.tools.toolbox.FunctionToolBox` when a call
cannot be routed or its handler fails.
"""
from __future__ import annotations

from typing import Optional

from .error_code import ErrorCode
from .provider_error import ProviderError


class ToolNotFoundError(ProviderError):
    """No registered tool provider exposes the requested function."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(code=ErrorCode.NOT_FOUND, message=f"Tool not found: {name}", provider="tools")


class ToolExecutionError(ProviderError):
    """A tool handler raised while executing a call."""

    def __init__(self, name: str, raw: Optional[Exception] = None) -> None:
        self.name = name
        detail = f": {raw}" if raw is not None else ""
        super().__init__(
            code=ErrorCode.INTERNAL,
            message=f"Tool execution failed for tool '{name}'{detail}",
            provider="tools",
            raw=raw,
        )


__all__ = ["ToolNotFoundError", "ToolExecutionError"]
