"""FunctionToolBox and ToolSet dispatch."""
from __future__ import annotations

import json

import pytest

from relay_providers.base.errors import ToolExecutionError, ToolNotFoundError
from relay_providers.base.models import FunctionDeclarations, TextPart, ToolUsePart, blob_from_uri
from relay_providers.base.tools import FunctionToolBox, ToolProvider, ToolSet
from relay_providers.tests.utils import WEATHER_SCHEMA


def _weather_box() -> FunctionToolBox:
    return FunctionToolBox().register(
        "get_weather",
        lambda args: f"sunny in {args['city']}",
        description="Current weather",
        parameters=WEATHER_SCHEMA,
    )


def test_register_exposes_one_declaration_batch():
    box = _weather_box().register("now", lambda args: {"hour": 9})
    tools = box.tools()
    assert len(tools) == 1 and isinstance(tools[0], FunctionDeclarations)  # nosec B101
    assert [d.name for d in tools[0].functions] == ["get_weather", "now"]  # nosec B101
    assert tools[0].functions[1].parameters == {}  # nosec B101
    assert FunctionToolBox().tools() == []  # nosec B101
    assert isinstance(box, ToolProvider)  # nosec B101


def test_invoke_normalizes_results():
    box = _weather_box()
    box.register("now", lambda args: {"hour": 9})
    box.register("pic", lambda args: blob_from_uri("https://x.test/a.png", "image/png"))
    box.register("many", lambda args: [TextPart(text="a"), TextPart(text="b")])

    result = box.invoke(ToolUsePart(id="c1", name="get_weather", args={"city": "Oslo"}))
    assert (result.id, result.name) == ("c1", "get_weather")  # nosec B101
    assert result.parts == [TextPart(text="sunny in Oslo")]  # nosec B101
    assert json.loads(box.invoke(ToolUsePart(id="c2", name="now")).parts[0].text) == {"hour": 9}  # nosec B101
    assert box.invoke(ToolUsePart(id="c3", name="pic")).parts[0].type == "blob"  # nosec B101
    assert len(box.invoke(ToolUsePart(id="c4", name="many")).parts) == 2  # nosec B101


def test_handler_failure_is_raised():
    def broken(args):
        raise RuntimeError("backend down")

    box = FunctionToolBox().register("broken", broken)
    with pytest.raises(ToolExecutionError) as info:
        box.invoke(ToolUsePart(id="c1", name="broken"))
    assert isinstance(info.value.__cause__, RuntimeError)  # nosec B101


def test_unknown_tool_raises():
    with pytest.raises(ToolNotFoundError):
        _weather_box().invoke(ToolUsePart(id="c1", name="missing"))
    with pytest.raises(ToolNotFoundError):
        ToolSet().invoke(ToolUsePart(id="c1", name="missing"))


def test_toolset_first_match_wins():
    first = FunctionToolBox().register("shared", lambda args: "first")
    second = FunctionToolBox().register("shared", lambda args: "second").register("only", lambda args: "only")
    tools = ToolSet([first]).with_provider(second)
    assert tools.has_function("only") and not tools.has_function("nope")  # nosec B101
    assert tools.invoke(ToolUsePart(id="1", name="shared")).parts[0].text == "first"  # nosec B101
    assert tools.invoke(ToolUsePart(id="2", name="only")).parts[0].text == "only"  # nosec B101
    assert len(tools.tools()) == 2  # nosec B101
