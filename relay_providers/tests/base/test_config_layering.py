"""Configuration layering: defaults, config file, environment, overrides."""
from __future__ import annotations

import json

import pytest

from relay_providers.config import (
    DEFAULTS,
    get_conversion_settings,
    get_model,
    get_provider_config,
    reset_config_cache,
)
from relay_providers.config.defaults import HTTP_DEFAULT_TIMEOUT_SECONDS, TOOL_RESULT_MAX_DEPTH
from relay_providers.config.env import get_env_var_candidates, is_placeholder, resolve_provider_key


def test_defaults_only():
    cfg = get_provider_config("anthropic")
    assert cfg["model"] == DEFAULTS["anthropic"]["model"]  # nosec B101
    assert cfg["max_tokens"] == DEFAULTS["anthropic"]["max_tokens"]  # nosec B101
    assert cfg["timeout"] == HTTP_DEFAULT_TIMEOUT_SECONDS  # nosec B101
    assert "api_key" not in cfg  # nosec B101


def test_yaml_file_then_env_then_overrides(tmp_path, monkeypatch):
    path = tmp_path / "relay.yaml"
    path.write_text("openai:\n  model: file-model\n  base_url: https://proxy.local/v1\n", encoding="utf-8")
    monkeypatch.setenv("RELAY_PROVIDERS_CONFIG_FILE", str(path))
    reset_config_cache()
    assert get_model("openai") == "file-model"  # nosec B101

    monkeypatch.setenv("OPENAI_MODEL", "env-model")
    cfg = get_provider_config("openai")
    assert cfg["model"] == "env-model"  # nosec B101
    assert cfg["base_url"] == "https://proxy.local/v1"  # nosec B101

    cfg = get_provider_config("openai", {"model": "override", "base_url": None})
    assert cfg["model"] == "override"  # nosec B101
    assert cfg["base_url"] == "https://proxy.local/v1"  # nosec B101


def test_json_file_is_accepted(tmp_path, monkeypatch):
    path = tmp_path / "relay.json"
    path.write_text(json.dumps({"mistral": {"timeout": 5}}), encoding="utf-8")
    monkeypatch.setenv("RELAY_PROVIDERS_CONFIG_FILE", str(path))
    reset_config_cache()
    assert get_provider_config("mistral")["timeout"] == 5  # nosec B101


def test_invalid_config_file_raises(tmp_path, monkeypatch):
    path = tmp_path / "broken.yaml"
    path.write_text("openai: [unclosed\n", encoding="utf-8")
    monkeypatch.setenv("RELAY_PROVIDERS_CONFIG_FILE", str(path))
    reset_config_cache()
    with pytest.raises(ValueError):
        get_provider_config("openai")


def test_int_env_fields_are_coerced(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_MAX_TOKENS", "1024")
    assert get_provider_config("anthropic")["max_tokens"] == 1024  # nosec B101
    monkeypatch.setenv("ANTHROPIC_MAX_TOKENS", "lots")
    assert get_provider_config("anthropic")["max_tokens"] == DEFAULTS["anthropic"]["max_tokens"]  # nosec B101


def test_api_key_aliases_and_placeholders(monkeypatch):
    assert list(get_env_var_candidates("gemini")) == ["GEMINI_API_KEY", "GOOGLE_API_KEY"]  # nosec B101
    monkeypatch.setenv("GOOGLE_API_KEY", "g-key")
    assert resolve_provider_key("gemini") == ("g-key", "GOOGLE_API_KEY")  # nosec B101
    assert get_provider_config("gemini")["api_key"] == "g-key"  # nosec B101
    monkeypatch.setenv("OPENAI_API_KEY", "sk-placeholder")
    assert resolve_provider_key("openai") == (None, None)  # nosec B101
    assert is_placeholder(" ChangeMe ")  # nosec B101
    assert not is_placeholder(None)  # nosec B101


def test_conversion_settings_from_env(monkeypatch):
    settings = get_conversion_settings()
    assert settings.policy == "strict"  # nosec B101
    assert settings.tool_result_max_depth == TOOL_RESULT_MAX_DEPTH  # nosec B101
    monkeypatch.setenv("RELAY_CONVERSION_POLICY", "Shadow_Allowed")
    monkeypatch.setenv("RELAY_TOOL_RESULT_MAX_DEPTH", "0")
    settings = get_conversion_settings()
    assert settings.policy == "shadow_allowed"  # nosec B101
    assert settings.tool_result_max_depth == 1  # nosec B101
    monkeypatch.setenv("RELAY_CONVERSION_POLICY", "lenient")
    monkeypatch.setenv("RELAY_TOOL_RESULT_MAX_DEPTH", "deep")
    settings = get_conversion_settings()
    assert (settings.policy, settings.tool_result_max_depth) == ("strict", TOOL_RESULT_MAX_DEPTH)  # nosec B101
