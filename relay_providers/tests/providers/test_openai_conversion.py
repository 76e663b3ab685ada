"""OpenAI chat-completions conversion.

Covers:
- request encoding (system, string vs array content, tool calls, tool messages)
- round trip of a full tool exchange
- strict/shadow handling of unsupported content
- response decoding (finish reason, usage, refusal)
"""
from __future__ import annotations

import json

import pytest

from relay_providers.base.conversion import ConversionPlan, ConversionPolicy
from relay_providers.base.errors import MessageConversionError, UnsupportedContentError
from relay_providers.base.models import (
    FinishReason,
    GeminiTool,
    Message,
    MessageRole,
    ModelRequest,
    OpaquePart,
    TextPart,
    ToolResultPart,
    ToolUsePart,
    blob_from_base64,
    blob_from_uri,
)
from relay_providers.base.tools import decode_tool_result
from relay_providers.openai import from_openai_request, from_openai_response, to_openai_request
from relay_providers.tests.utils import WEATHER_SCHEMA, tool_exchange_request


def test_tool_exchange_wire_shape():
    payload = to_openai_request(tool_exchange_request(), model="gpt-4o-mini")
    messages = payload["messages"]
    assert payload["model"] == "gpt-4o-mini"  # nosec B101
    assert [m["role"] for m in messages] == ["system", "user", "assistant", "tool", "assistant"]  # nosec B101
    assert messages[0]["content"] == "You are a weather bot."  # nosec B101
    assert messages[2]["content"] is None  # nosec B101
    call = messages[2]["tool_calls"][0]
    assert call["id"] == "call_1" and call["function"]["name"] == "get_weather"  # nosec B101
    assert json.loads(call["function"]["arguments"]) == {"city": "Paris"}  # nosec B101
    assert messages[3] == {"role": "tool", "tool_call_id": "call_1", "content": "18C and sunny"}  # nosec B101
    assert payload["tools"] == [  # nosec B101
        {
            "type": "function",
            "function": {"name": "get_weather", "description": "Current weather", "parameters": WEATHER_SCHEMA},
        }
    ]


def test_tool_exchange_round_trip():
    request = tool_exchange_request()
    assert from_openai_request(to_openai_request(request, model="m")) == request  # nosec B101


def test_structured_tool_result_uses_envelope():
    result = ToolResultPart(
        id="c9",
        name="render",
        parts=[TextPart(text="chart"), blob_from_base64("QUJD", "image/png")],
    )
    request = ModelRequest(messages=[Message.tool(result)])
    payload = to_openai_request(request, model="m")
    body = payload["messages"][0]["content"]
    name, parts, _ = decode_tool_result(body)
    assert name == "render" and parts == result.parts  # nosec B101
    assert from_openai_request(payload).messages[0].content[0] == result  # nosec B101


def test_multiple_tool_results_become_separate_messages_in_order():
    results = [ToolResultPart(id=f"c{i}", name="f", parts=[TextPart(text=str(i))]) for i in range(3)]
    payload = to_openai_request(ModelRequest(messages=[Message.tool(*results)]), model="m")
    assert [m["tool_call_id"] for m in payload["messages"]] == ["c0", "c1", "c2"]  # nosec B101


def test_images_audio_and_detail():
    image = blob_from_uri("https://x.test/cat.png", "image/png", ext={"openai.image_detail": "high"})
    audio = blob_from_base64("UklGRg==", "audio/wav")
    request = ModelRequest(messages=[Message.user("describe", image, audio)])
    content = to_openai_request(request, model="m")["messages"][0]["content"]
    assert content[0] == {"type": "text", "text": "describe"}  # nosec B101
    assert content[1] == {"type": "image_url", "image_url": {"url": "https://x.test/cat.png", "detail": "high"}}  # nosec B101
    assert content[2] == {"type": "input_audio", "input_audio": {"data": "UklGRg==", "format": "wav"}}  # nosec B101
    back = from_openai_request(to_openai_request(request, model="m"))
    assert back.messages[0].content == request.messages[0].content  # nosec B101


def test_base64_image_uses_data_url():
    request = ModelRequest(messages=[Message.user(blob_from_base64("QUJD", "image/jpeg"))])
    item = to_openai_request(request, model="m")["messages"][0]["content"][0]
    assert item["image_url"]["url"] == "data:image/jpeg;base64,QUJD"  # nosec B101


def test_strict_rejects_foreign_opaque_and_pdf():
    foreign = ModelRequest(messages=[Message.user(OpaquePart(provider="gemini", kind="x", payload={}))])
    with pytest.raises(UnsupportedContentError):
        to_openai_request(foreign, model="m")
    pdf = ModelRequest(messages=[Message.user(blob_from_base64("JVBE", "application/pdf"))])
    with pytest.raises(UnsupportedContentError):
        to_openai_request(pdf, model="m")


def test_shadow_degrades_and_records():
    request = ModelRequest(
        messages=[Message.user("see file", blob_from_base64("JVBE", "application/pdf", name="report.pdf"))]
    )
    plan = ConversionPlan(provider_name="openai", policy=ConversionPolicy.SHADOW_ALLOWED)
    payload = to_openai_request(request, model="m", plan=plan)
    content = payload["messages"][0]["content"]
    assert "report.pdf" in content[1]["text"]  # nosec B101
    assert len(plan.errors) == 1 and plan.part_actions[0].kind == "shadow"  # nosec B101


def test_tool_use_outside_assistant_is_rejected():
    request = ModelRequest(messages=[Message.user(ToolUsePart(id="1", name="f"))])
    with pytest.raises(UnsupportedContentError):
        to_openai_request(request, model="m")


def test_gemini_native_tool_is_rejected():
    request = ModelRequest(messages=[Message.user("hi")], tools=[GeminiTool(payload={"googleSearch": {}})])
    with pytest.raises(UnsupportedContentError):
        to_openai_request(request, model="m")


def test_reasoning_sent_as_content_with_warning():
    request = ModelRequest(messages=[Message.assistant(TextPart(text="hmm", ext={"reasoning.thinking": True}), "42")])
    plan = ConversionPlan(provider_name="openai")
    content = to_openai_request(request, model="m", plan=plan)["messages"][0]["content"]
    assert [c["text"] for c in content] == ["hmm", "42"]  # nosec B101
    assert plan.warnings  # nosec B101


def test_refusal_round_trip():
    refusal = TextPart(text="I can't help with that.", ext={"openai.refusal": True})
    request = ModelRequest(messages=[Message.assistant(refusal)])
    wire = to_openai_request(request, model="m")["messages"][0]
    assert wire["refusal"] == "I can't help with that." and wire["content"] is None  # nosec B101
    assert from_openai_request({"messages": [wire]}).messages[0].content == [refusal]  # nosec B101


def test_later_system_messages_stay_in_place():
    payload = {
        "messages": [
            {"role": "developer", "content": "rules"},
            {"role": "user", "content": "hi"},
            {"role": "system", "content": "more rules"},
        ]
    }
    request = from_openai_request(payload)
    assert request.system_message == Message.system("rules")  # nosec B101
    assert [m.role for m in request.messages] == [MessageRole.USER, MessageRole.SYSTEM]  # nosec B101


def test_malformed_wire_input_raises():
    with pytest.raises(MessageConversionError):
        from_openai_request({"messages": [{"role": "narrator", "content": "x"}]})
    bad_call = {
        "role": "assistant",
        "content": None,
        "tool_calls": [{"id": "1", "type": "function", "function": {"name": "f", "arguments": "{oops"}}],
    }
    with pytest.raises(MessageConversionError):
        from_openai_request({"messages": [bad_call]})
    with pytest.raises(MessageConversionError):
        from_openai_response({"error": {"message": "overloaded"}})


def test_response_decoding():
    response = from_openai_response(
        {
            "id": "chatcmpl-1",
            "model": "gpt-4o-mini-2024",
            "choices": [
                {
                    "index": 0,
                    "finish_reason": "tool_calls",
                    "message": {
                        "role": "assistant",
                        "content": "checking",
                        "tool_calls": [
                            {"id": "c1", "type": "function", "function": {"name": "f", "arguments": '{"x": 1}'}}
                        ],
                    },
                }
            ],
            "usage": {"prompt_tokens": 3, "completion_tokens": 4, "total_tokens": 7},
        }
    )
    assert response.finish_reason is FinishReason.TOOL_CALLS  # nosec B101
    assert response.vendor_name == "openai" and response.model_name == "gpt-4o-mini-2024"  # nosec B101
    assert response.response_id == "chatcmpl-1"  # nosec B101
    assert response.message.content == [TextPart(text="checking"), ToolUsePart(id="c1", name="f", args={"x": 1})]  # nosec B101
    assert response.usage.total_tokens() == 7  # nosec B101


def test_unknown_finish_reason_maps_to_other():
    response = from_openai_response({"choices": [{"message": {"content": "x"}, "finish_reason": "weird"}]})
    assert response.finish_reason is FinishReason.OTHER  # nosec B101
    assert response.usage.requests == 0  # nosec B101


def test_blob_name_and_description_are_reported():
    image = blob_from_uri("https://x.test/cat.png", "image/png", name="cat.png", description="a cat")
    plan = ConversionPlan(provider_name="openai")
    to_openai_request(ModelRequest(messages=[Message.user("look", image)]), model="m", plan=plan)
    assert plan.warnings == ["message 0 part 1: blob name and description not sent to openai"]  # nosec B101
    assert plan.is_lossless()  # nosec B101


def test_multi_part_tool_message_keeps_every_item():
    payload = {
        "messages": [
            {
                "role": "tool",
                "tool_call_id": "c1",
                "name": "render",
                "content": [
                    {"type": "text", "text": "see chart"},
                    {"type": "image_url", "image_url": {"url": "https://x.test/chart.png"}},
                ],
            }
        ]
    }
    result = from_openai_request(payload).messages[0].content[0]
    assert isinstance(result, ToolResultPart) and result.name == "render"  # nosec B101
    assert result.parts == [  # nosec B101
        TextPart(text="see chart"),
        blob_from_uri("https://x.test/chart.png", "image/png"),
    ]


def test_single_text_item_tool_message_reads_like_a_string():
    payload = {"messages": [{"role": "tool", "tool_call_id": "c1", "content": [{"type": "text", "text": "done"}]}]}
    result = from_openai_request(payload).messages[0].content[0]
    assert result.parts == [TextPart(text="done")] and result.name == "unknown"  # nosec B101


def test_non_object_function_is_rejected():
    payload = {
        "messages": [
            {"role": "assistant", "content": None, "tool_calls": [{"id": "c1", "type": "function", "function": "f"}]}
        ]
    }
    with pytest.raises(MessageConversionError):
        from_openai_request(payload)


@pytest.mark.parametrize(
    "choice",
    [
        "not a choice",
        {"message": "hello", "finish_reason": "stop"},
    ],
)
def test_malformed_choice_is_rejected(choice):
    with pytest.raises(MessageConversionError):
        from_openai_response({"choices": [choice]})


def test_non_object_input_audio_is_rejected():
    payload = {"messages": [{"role": "user", "content": [{"type": "input_audio", "input_audio": "QUJD"}]}]}
    with pytest.raises(MessageConversionError):
        from_openai_request(payload)


@pytest.mark.parametrize(
    "tools",
    [
        {"type": "function"},
        [{"type": "function", "function": {"description": "no name"}}],
        [{"type": "web_search"}],
        [{"type": "function", "function": {"name": "f", "parameters": "nope"}}],
    ],
)
def test_malformed_tool_declarations_are_rejected(tools):
    with pytest.raises(MessageConversionError):
        from_openai_request({"messages": [], "tools": tools})


def test_tool_message_extra_parts_are_reported():
    message = Message(
        role=MessageRole.TOOL,
        content=[ToolResultPart(id="c1", name="f", parts=[TextPart(text="ok")]), TextPart(text="note")],
    )
    plan = ConversionPlan(provider_name="openai")
    to_openai_request(ModelRequest(messages=[message]), model="m", plan=plan)
    assert "message 0: text parts of a tool message sent as a user turn" in plan.warnings  # nosec B101
