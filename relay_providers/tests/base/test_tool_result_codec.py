"""Tool-result codec tests.

Covers:
- exact round trip for every part kind, deep nesting and large payloads
- flatten/unflatten fast path and envelope escaping
- strict rejection of structurally invalid envelopes
"""
from __future__ import annotations

import base64
import json

import pytest

from relay_providers.base.errors import ToolResultDecodeError
from relay_providers.base.models import (
    OpaquePart,
    TextPart,
    ToolResultPart,
    ToolUsePart,
    blob_from_base64,
    blob_from_uri,
)
from relay_providers.base.tools import (
    decode_tool_result,
    decode_tool_result_parts,
    encode_tool_result,
    flatten_tool_result,
    is_encoded_tool_result,
    unflatten_tool_result,
)


def _nested(depth: int) -> ToolResultPart:
    part = ToolResultPart(id=f"c{depth}", name=f"level{depth}", parts=[TextPart(text=f"leaf {depth}")])
    for level in range(depth - 1, 0, -1):
        part = ToolResultPart(id=f"c{level}", name=f"level{level}", parts=[TextPart(text=str(level)), part])
    return part


def test_round_trip_every_part_kind():
    parts = [
        TextPart(text="héllo", ext={"reasoning.thinking": True}),
        blob_from_base64("QUJD", "image/png", name="a.png"),
        blob_from_uri("https://x.test/doc.pdf", "application/pdf", description="spec"),
        ToolUsePart(id="t1", name="lookup", args={"q": [1, None, "x"]}),
        OpaquePart(provider="gemini", kind="custom", payload={"k": 1}),
        _nested(2),
    ]
    name, decoded, ext = decode_tool_result(encode_tool_result("multi", parts, {"anthropic.is_error": False}))
    assert name == "multi"  # nosec B101
    assert decoded == parts  # nosec B101
    assert ext == {"anthropic.is_error": False}  # nosec B101


def test_four_level_nesting_round_trips():
    tree = _nested(4)
    name, parts, _ = decode_tool_result(encode_tool_result(tree.name, tree.parts))
    rebuilt = ToolResultPart(id=tree.id, name=name, parts=parts)
    assert rebuilt == tree  # nosec B101
    assert rebuilt.parts[1].parts[1].parts[1].parts[0].text == "leaf 4"  # nosec B101


def test_large_base64_blob_round_trips():
    data = base64.b64encode(b"\x00\x01\x02\x03" * (512 * 1024 // 4)).decode("ascii")
    blob = blob_from_base64(data, "image/png")
    _, parts, _ = decode_tool_result(encode_tool_result("img", [blob]))
    assert parts == [blob]  # nosec B101
    assert parts[0].base64_size() >= 512 * 1024  # nosec B101


def test_encoding_is_compact_and_keeps_unicode():
    text = encode_tool_result("f", [TextPart(text="日本")])
    assert "日本" in text and ": " not in text  # nosec B101
    assert "ext" not in json.loads(text)["ai_ox_tool_result"]  # nosec B101


def test_flatten_plain_text_uses_raw_string():
    part = ToolResultPart(id="1", name="f", parts=[TextPart(text="42")])
    assert flatten_tool_result(part) == "42"  # nosec B101
    assert unflatten_tool_result("42") == (None, [TextPart(text="42")], {})  # nosec B101


def test_flatten_escapes_envelope_looking_text():
    envelope_text = encode_tool_result("spoof", [TextPart(text="x")])
    part = ToolResultPart(id="1", name="real", parts=[TextPart(text=envelope_text)])
    flat = flatten_tool_result(part)
    assert flat != envelope_text  # nosec B101
    name, parts, ext = unflatten_tool_result(flat)
    assert name == "real" and parts == part.parts and ext == {}  # nosec B101


def test_flatten_structured_result_uses_envelope():
    part = ToolResultPart(id="1", name="f", parts=[TextPart(text="a"), TextPart(text="b")])
    flat = flatten_tool_result(part)
    assert is_encoded_tool_result(flat)  # nosec B101
    assert unflatten_tool_result(flat) == ("f", part.parts, {})  # nosec B101


def test_json_text_that_is_not_an_envelope_stays_raw():
    raw = json.dumps({"temperature": 18})
    assert not is_encoded_tool_result(raw)  # nosec B101
    assert flatten_tool_result(ToolResultPart(id="1", name="f", parts=[TextPart(text=raw)])) == raw  # nosec B101


@pytest.mark.parametrize(
    "payload",
    [
        '{"ai_ox_tool_result": {"name": 123, "content": []}}',
        '{"ai_ox_tool_result": {"name": "f"}}',
        '{"ai_ox_tool_result": {"name": "f", "content": "text"}}',
        '{"ai_ox_tool_result": {"name": "f", "content": [], "ext": []}}',
        '{"ai_ox_tool_result": {"name": "f", "content": [], "extra": 1}}',
        '{"ai_ox_tool_result": {"name": "f", "content": []}, "other": 1}',
        '{"ai_ox_tool_result": []}',
        '{"name": "f", "content": []}',
        '[1, 2]',
        'not json',
        '{"ai_ox_tool_result": {"name": "f", "content": [{"type": "mystery"}]}}',
        '{"ai_ox_tool_result": {"name": "f", "content": [], "ext": {"nonamespace": 1}}}',
    ],
)
def test_malformed_envelopes_are_rejected(payload):
    with pytest.raises(ToolResultDecodeError):
        decode_tool_result_parts(payload)


def test_depth_limit_is_enforced():
    tree = _nested(5)
    encoded = encode_tool_result(tree.name, tree.parts)
    with pytest.raises(ToolResultDecodeError):
        decode_tool_result(encoded, max_depth=3)
    assert decode_tool_result(encoded, max_depth=5)[0] == "level1"  # nosec B101


def test_depth_limit_from_environment(monkeypatch):
    monkeypatch.setenv("RELAY_TOOL_RESULT_MAX_DEPTH", "2")
    tree = _nested(4)
    with pytest.raises(ToolResultDecodeError):
        decode_tool_result(encode_tool_result(tree.name, tree.parts))


def test_decode_error_metadata():
    with pytest.raises(ToolResultDecodeError) as info:
        decode_tool_result('{"ai_ox_tool_result": {"name": 123, "content": []}}')
    assert info.value.kind == "decode"  # nosec B101
    assert "name" in info.value.message  # nosec B101
