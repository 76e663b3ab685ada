"""Shared testing utilities for the relay_providers test suite.

Purpose:
    Keep explicit AssertionError semantics (avoiding bare ``assert`` for
    Bandit B101) and provide small builders reused across converter tests.

Exports:
    - assert_true(condition: bool, message: str) -> None
    - tool_exchange_request() -> ModelRequest
"""
from __future__ import annotations

from relay_providers.base.models import (
    FunctionDeclarations,
    Message,
    ModelRequest,
    TextPart,
    ToolDeclaration,
    ToolResultPart,
    ToolUsePart,
)


def assert_true(condition: bool, message: str) -> None:
    """Raise AssertionError with the provided message if condition is False."""
    if not condition:
        raise AssertionError(message)


WEATHER_SCHEMA = {
    "type": "object",
    "properties": {"city": {"type": "string"}},
    "required": ["city"],
}


def tool_exchange_request() -> ModelRequest:
    """A user question, an assistant tool call, its result and a final answer."""
    return ModelRequest(
        system_message=Message.system("You are a weather bot."),
        messages=[
            Message.user("Weather in Paris?"),
            Message.assistant(ToolUsePart(id="call_1", name="get_weather", args={"city": "Paris"})),
            Message.tool(ToolResultPart(id="call_1", name="get_weather", parts=[TextPart(text="18C and sunny")])),
            Message.assistant("It is 18C and sunny in Paris."),
        ],
        tools=[
            FunctionDeclarations(
                functions=[ToolDeclaration(name="get_weather", description="Current weather", parameters=WEATHER_SCHEMA)]
            )
        ],
    )
