"""Gemini generateContent conversion.

Covers:
- system instruction, roles and system demotion
- structured functionResponse round trips (exact JSON text, nested parts)
- vendor-authored responses, synthesized call ids, code execution
- finish reasons and blocked prompts
"""
from __future__ import annotations

import json

import pytest

from relay_providers.base.conversion import ConversionPlan, ConversionPolicy
from relay_providers.base.errors import MessageConversionError, UnsupportedContentError, UnsupportedMimeTypeError
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
from relay_providers.gemini import CODE_INTERPRETER, from_gemini_request, from_gemini_response, to_gemini_request
from relay_providers.tests.utils import tool_exchange_request


def _round_trip(request: ModelRequest) -> ModelRequest:
    return from_gemini_request(to_gemini_request(request, model="gemini-2.5-flash"))


def test_tool_exchange_wire_shape_and_round_trip():
    request = tool_exchange_request()
    payload = to_gemini_request(request, model="gemini-2.5-flash")
    assert "model" not in payload  # nosec B101
    assert payload["systemInstruction"] == {"parts": [{"text": "You are a weather bot."}]}  # nosec B101
    assert [c["role"] for c in payload["contents"]] == ["user", "model", "user", "model"]  # nosec B101
    assert payload["contents"][1]["parts"][0] == {  # nosec B101
        "functionCall": {"id": "call_1", "name": "get_weather", "args": {"city": "Paris"}}
    }
    response = payload["contents"][2]["parts"][0]["functionResponse"]
    assert response == {"id": "call_1", "name": "get_weather", "response": {"content": [{"text": "18C and sunny"}]}}  # nosec B101
    assert payload["tools"][0]["functionDeclarations"][0]["name"] == "get_weather"  # nosec B101
    assert _round_trip(request) == request  # nosec B101


def test_machine_generated_json_text_survives_exactly():
    raw = '{"temperature":18.50,  "unit":"C","nested":{"ok":true}}'
    result = ToolResultPart(id="c1", name="get_weather", parts=[TextPart(text=raw), TextPart(text="note")])
    request = ModelRequest(
        messages=[Message.assistant(ToolUsePart(id="c1", name="get_weather")), Message.tool(result)]
    )
    back = _round_trip(request)
    decoded = back.messages[1].content[0]
    assert decoded.parts[0].text == raw  # nosec B101
    assert decoded == result  # nosec B101


def test_nested_parts_keep_ext_and_blob_metadata():
    inner = ToolResultPart(id="n1", name="sub", parts=[TextPart(text="deep", ext={"custom.tag": 1})])
    blob = blob_from_base64("QUJD", "image/png", name="chart.png", description="weekly chart")
    result = ToolResultPart(id="c1", name="report", parts=[blob, inner], ext={"custom.status": "ok"})
    request = ModelRequest(messages=[Message.assistant(ToolUsePart(id="c1", name="report")), Message.tool(result)])
    payload = to_gemini_request(request, model="m")
    content = payload["contents"][1]["parts"][0]["functionResponse"]["response"]
    assert content["ext"] == {"custom.status": "ok"}  # nosec B101
    assert content["content"][0]["inlineData"]["displayName"] == "chart.png"  # nosec B101
    assert _round_trip(request).messages[1].content[0] == result  # nosec B101


def test_vendor_authored_response_is_kept_verbatim():
    payload = {
        "contents": [
            {"role": "model", "parts": [{"functionCall": {"name": "lookup", "args": {"q": "x"}}}]},
            {"role": "user", "parts": [{"functionResponse": {"name": "lookup", "response": {"result": [1, 2], "ok": True}}}]},
        ]
    }
    request = from_gemini_request(payload)
    call = request.messages[0].content[0]
    result = request.messages[1].content[0]
    assert call.id.startswith("call_") and result.id == call.id  # nosec B101
    assert request.messages[1].role is MessageRole.TOOL  # nosec B101
    assert result.parts == [TextPart(text=json.dumps({"result": [1, 2], "ok": True}), ext={"gemini.response_json": True})]  # nosec B101
    rebuilt = to_gemini_request(request, model="m")["contents"][1]["parts"][0]["functionResponse"]
    assert rebuilt["response"] == {"result": [1, 2], "ok": True}  # nosec B101


def test_synthesized_ids_are_unique_per_call():
    payload = {
        "contents": [
            {
                "role": "model",
                "parts": [
                    {"functionCall": {"name": "f", "args": {}}},
                    {"functionCall": {"name": "f", "args": {"n": 2}}},
                ],
            },
            {
                "role": "user",
                "parts": [
                    {"functionResponse": {"name": "f", "response": {"content": [{"text": "one"}]}}},
                    {"functionResponse": {"name": "f", "response": {"content": [{"text": "two"}]}}},
                ],
            },
        ]
    }
    request = from_gemini_request(payload)
    first, second = request.messages[0].content
    assert first.id != second.id  # nosec B101
    assert [r.id for r in request.messages[1].content] == [first.id, second.id]  # nosec B101
    assert request.messages[1].content[1].parts == [TextPart(text="two")]  # nosec B101


def test_thoughts_and_signatures():
    thought = TextPart(text="considering", ext={"reasoning.thinking": True, "gemini.thought_signature": "c2ln"})
    request = ModelRequest(messages=[Message.user("q"), Message.assistant(thought, "answer")])
    parts = to_gemini_request(request, model="m")["contents"][1]["parts"]
    assert parts[0] == {"text": "considering", "thought": True, "thoughtSignature": "c2ln"}  # nosec B101
    assert _round_trip(request) == request  # nosec B101


def test_code_execution_round_trip():
    payload = {
        "contents": [
            {
                "role": "model",
                "parts": [
                    {"executableCode": {"language": "PYTHON", "code": "print(1 + 1)"}},
                    {"codeExecutionResult": {"outcome": "OUTCOME_OK", "output": "2\n"}},
                    {"text": "The answer is 2."},
                ],
            }
        ]
    }
    request = from_gemini_request(payload)
    code, result, text = request.messages[0].content
    assert code.name == CODE_INTERPRETER and code.args == {"language": "PYTHON", "code": "print(1 + 1)"}  # nosec B101
    assert result.id == code.id and result.ext["gemini.outcome"] == "OUTCOME_OK"  # nosec B101
    assert to_gemini_request(request, model="m")["contents"] == payload["contents"]  # nosec B101


def test_blobs_and_files():
    request = ModelRequest(
        messages=[
            Message.user(
                blob_from_base64("AAAA", "video/mp4"),
                blob_from_uri("gs://bucket/doc.pdf", "application/pdf", name="doc.pdf"),
            )
        ]
    )
    parts = to_gemini_request(request, model="m")["contents"][0]["parts"]
    assert parts[0] == {"inlineData": {"mimeType": "video/mp4", "data": "AAAA"}}  # nosec B101
    assert parts[1] == {"fileData": {"mimeType": "application/pdf", "fileUri": "gs://bucket/doc.pdf", "displayName": "doc.pdf"}}  # nosec B101
    assert _round_trip(request) == request  # nosec B101


def test_inline_blob_name_is_warned():
    request = ModelRequest(messages=[Message.user(blob_from_base64("AAAA", "image/png", name="a.png"))])
    plan = ConversionPlan(provider_name="gemini")
    to_gemini_request(request, model="m", plan=plan)
    assert any("a.png" in w for w in plan.warnings)  # nosec B101


def test_system_message_in_list_is_demoted():
    request = ModelRequest(messages=[Message.user("hi"), Message.system("be terse")])
    plan = ConversionPlan(provider_name="gemini")
    payload = to_gemini_request(request, model="m", plan=plan)
    assert payload["contents"][1] == {"role": "user", "parts": [{"text": "be terse"}]}  # nosec B101
    assert plan.warnings  # nosec B101


def test_native_tools_pass_through():
    request = ModelRequest(messages=[Message.user("search")], tools=[GeminiTool(payload={"googleSearch": {}})])
    payload = to_gemini_request(request, model="m")
    assert payload["tools"] == [{"googleSearch": {}}]  # nosec B101
    assert from_gemini_request(payload).tools == request.tools  # nosec B101


def test_foreign_opaque_and_unsupported_mime_rejected():
    with pytest.raises(UnsupportedContentError):
        to_gemini_request(ModelRequest(messages=[Message.user(OpaquePart(provider="weird-provider", kind="k"))]), model="m")
    with pytest.raises(UnsupportedMimeTypeError):
        to_gemini_request(ModelRequest(messages=[Message.user(blob_from_base64("UEsD", "application/zip"))]), model="m")


def test_response_decoding():
    response = from_gemini_response(
        {
            "candidates": [
                {
                    "content": {"role": "model", "parts": [{"functionCall": {"id": "fc1", "name": "f", "args": {}}}]},
                    "finishReason": "STOP",
                }
            ],
            "usageMetadata": {"promptTokenCount": 4, "candidatesTokenCount": 2, "totalTokenCount": 6},
            "modelVersion": "gemini-2.5-flash-001",
            "responseId": "r-1",
        }
    )
    assert response.finish_reason is FinishReason.TOOL_CALLS  # nosec B101
    assert response.message.content == [ToolUsePart(id="fc1", name="f", args={})]  # nosec B101
    assert response.model_name == "gemini-2.5-flash-001" and response.response_id == "r-1"  # nosec B101
    assert response.usage.total_tokens() == 6  # nosec B101


@pytest.mark.parametrize(
    "reason, expected",
    [("STOP", FinishReason.STOP), ("MAX_TOKENS", FinishReason.LENGTH), ("SAFETY", FinishReason.CONTENT_FILTER), ("OTHER", FinishReason.OTHER)],
)
def test_finish_reason_mapping(reason, expected):
    body = {"candidates": [{"content": {"parts": [{"text": "x"}]}, "finishReason": reason}]}
    assert from_gemini_response(body).finish_reason is expected  # nosec B101


def test_blocked_prompt_and_empty_body():
    blocked = from_gemini_response({"promptFeedback": {"blockReason": "SAFETY"}})
    assert blocked.finish_reason is FinishReason.CONTENT_FILTER and blocked.message.content == []  # nosec B101
    with pytest.raises(MessageConversionError):
        from_gemini_response({})


def test_nested_opaque_part_round_trip():
    clip = OpaquePart(provider="gemini", kind="videoMetadata", payload={"videoMetadata": {"startOffset": "1s"}})
    result = ToolResultPart(id="c1", name="f", parts=[TextPart(text="ok"), clip])
    request = ModelRequest(messages=[Message(role=MessageRole.TOOL, content=[result])])
    response = to_gemini_request(request, model="m")["contents"][0]["parts"][0]["functionResponse"]["response"]
    assert response["content"][1] == {  # nosec B101
        "opaque": {"provider": "gemini", "kind": "videoMetadata", "payload": {"videoMetadata": {"startOffset": "1s"}}}
    }
    assert _round_trip(request) == request  # nosec B101


def _code_result(*parts) -> ModelRequest:
    result = ToolResultPart(
        id="c1", name=CODE_INTERPRETER, parts=list(parts), ext={"gemini.kind": "code_execution_result"}
    )
    return ModelRequest(messages=[Message.assistant(result)])


def test_code_result_text_parts_are_merged_with_warning():
    plan = ConversionPlan(provider_name="gemini")
    payload = to_gemini_request(_code_result(TextPart(text="a"), TextPart(text="b")), model="m", plan=plan)
    assert payload["contents"][0]["parts"][0]["codeExecutionResult"]["output"] == "ab"  # nosec B101
    assert "message 0 part 0: 2 text parts merged into one codeExecutionResult output" in plan.warnings  # nosec B101


def test_code_result_rejects_non_text_parts():
    with pytest.raises(UnsupportedContentError):
        to_gemini_request(_code_result(TextPart(text="a"), blob_from_base64("AAAA", "image/png")), model="m")
    plan = ConversionPlan(provider_name="gemini", policy=ConversionPolicy.SHADOW_ALLOWED)
    payload = to_gemini_request(
        _code_result(TextPart(text="a"), blob_from_base64("AAAA", "image/png")), model="m", plan=plan
    )
    assert payload["contents"][0]["parts"][0]["codeExecutionResult"]["output"] == "a"  # nosec B101
    assert not plan.is_lossless()  # nosec B101


@pytest.mark.parametrize(
    "part",
    [
        {"functionCall": "f"},
        {"functionResponse": ["f"]},
        {"executableCode": "print(1)"},
        {"codeExecutionResult": 2},
        {"inlineData": "AAAA"},
        {"fileData": "gs://bucket/a.pdf"},
    ],
)
def test_non_object_part_fields_are_rejected(part):
    with pytest.raises(MessageConversionError):
        from_gemini_request({"contents": [{"role": "user", "parts": [part]}]})


@pytest.mark.parametrize(
    "body",
    [
        {"candidates": ["text"]},
        {"promptFeedback": "blocked"},
    ],
)
def test_malformed_response_bodies_are_rejected(body):
    with pytest.raises(MessageConversionError):
        from_gemini_response(body)


def test_non_object_system_instruction_is_rejected():
    with pytest.raises(MessageConversionError):
        from_gemini_request({"contents": [], "systemInstruction": "be terse"})


@pytest.mark.parametrize(
    "tools",
    [
        {"functionDeclarations": []},
        ["googleSearch"],
        [{"functionDeclarations": [{"description": "no name"}]}],
    ],
)
def test_malformed_tools_are_rejected(tools):
    with pytest.raises(MessageConversionError):
        from_gemini_request({"contents": [], "tools": tools})


def test_tool_message_extra_parts_are_reported():
    message = Message(
        role=MessageRole.TOOL,
        content=[ToolResultPart(id="c1", name="f", parts=[TextPart(text="ok")]), TextPart(text="note")],
    )
    plan = ConversionPlan(provider_name="gemini")
    to_gemini_request(ModelRequest(messages=[message]), model="m", plan=plan)
    assert "message 0: text parts of a tool message sent as a user turn" in plan.warnings  # nosec B101
