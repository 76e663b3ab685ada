"""Mistral conversion: string image URLs, thinking chunks, capability limits."""
from __future__ import annotations

import pytest

from relay_providers.base.conversion import ConversionPlan, ConversionPolicy
from relay_providers.base.errors import UnsupportedContentError
from relay_providers.base.models import (
    FinishReason,
    Message,
    ModelRequest,
    TextPart,
    blob_from_base64,
    blob_from_uri,
)
from relay_providers.mistral import from_mistral_request, from_mistral_response, to_mistral_request
from relay_providers.tests.utils import tool_exchange_request

_THINKING = {"reasoning.thinking": True}


def test_tool_exchange_round_trip_with_names():
    request = tool_exchange_request()
    payload = to_mistral_request(request, model="mistral-small-latest")
    assert payload["messages"][3]["name"] == "get_weather"  # nosec B101
    assert from_mistral_request(payload) == request  # nosec B101


def test_image_url_is_bare_string():
    image = blob_from_uri("https://x.test/a.jpg", "image/jpeg")
    request = ModelRequest(messages=[Message.user("look", image)])
    content = to_mistral_request(request, model="m")["messages"][0]["content"]
    assert content[1] == {"type": "image_url", "image_url": "https://x.test/a.jpg"}  # nosec B101
    assert from_mistral_request(to_mistral_request(request, model="m")).messages[0].content[1] == image  # nosec B101


def test_base64_is_rejected():
    request = ModelRequest(messages=[Message.user(blob_from_base64("QUJD", "image/png"))])
    with pytest.raises(UnsupportedContentError) as info:
        to_mistral_request(request, model="m")
    assert info.value.part_index == 0 and info.value.message_index == 0  # nosec B101


def test_base64_is_shadowed_under_shadow_policy():
    request = ModelRequest(messages=[Message.user("see", blob_from_base64("QUJD", "image/png"))])
    plan = ConversionPlan(provider_name="mistral", policy=ConversionPolicy.SHADOW_ALLOWED)
    content = to_mistral_request(request, model="m", plan=plan)["messages"][0]["content"]
    assert content[1]["type"] == "text"  # nosec B101
    assert plan.shadow_metadata["0.1"]["mime_type"] == "image/png"  # nosec B101


def test_thinking_chunk_round_trip():
    request = ModelRequest(messages=[Message.assistant(TextPart(text="let me see", ext=_THINKING), "7")])
    wire = to_mistral_request(request, model="m")["messages"][0]
    assert wire["content"] == [  # nosec B101
        {"type": "thinking", "thinking": [{"type": "text", "text": "let me see"}]},
        {"type": "text", "text": "7"},
    ]
    assert from_mistral_request({"messages": [wire]}).messages[0].content == request.messages[0].content  # nosec B101


def test_response_with_thinking_and_length_finish():
    response = from_mistral_response(
        {
            "id": "m-1",
            "model": "magistral-small",
            "choices": [
                {
                    "finish_reason": "length",
                    "message": {
                        "role": "assistant",
                        "content": [
                            {"type": "thinking", "thinking": [{"type": "text", "text": "a"}, {"type": "text", "text": "b"}]},
                            {"type": "text", "text": "partial"},
                        ],
                    },
                }
            ],
        }
    )
    assert response.message.content == [TextPart(text="ab", ext=_THINKING), TextPart(text="partial")]  # nosec B101
    assert response.finish_reason is FinishReason.LENGTH  # nosec B101


def test_blob_metadata_is_reported():
    image = blob_from_uri("https://x.test/a.jpg", "image/jpeg", name="a.jpg")
    plan = ConversionPlan(provider_name="mistral")
    to_mistral_request(ModelRequest(messages=[Message.user(image)]), model="m", plan=plan)
    assert "message 0 part 0: blob name not sent to mistral" in plan.warnings  # nosec B101
