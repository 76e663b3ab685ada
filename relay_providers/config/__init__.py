"""Unified configuration layer for relay_providers.

Goals
-----
* Centralize defaults (models, base URLs, token limits, codec constants).
* Merge sources in a predictable order (later wins):
    1. Built-in defaults
    2. Optional external config file (JSON or YAML) pointed to by
       ``RELAY_PROVIDERS_CONFIG_FILE``
    3. Environment variables (e.g. ``OPENAI_MODEL``, ``ANTHROPIC_MAX_TOKENS``)
    4. In-code overrides passed to the helper
* Provide a single call site: ``get_provider_config(provider: str)``.

Environment Variable Conventions
--------------------------------
<PROVIDER>_MODEL, <PROVIDER>_API_KEY, <PROVIDER>_BASE_URL, <PROVIDER>_MAX_TOKENS
e.g. OPENAI_MODEL, OPENROUTER_BASE_URL. API keys additionally honor the
aliases in :mod:`relay_providers.config.env` (``GOOGLE_API_KEY`` for Gemini).

Conversion settings come from ``RELAY_CONVERSION_POLICY`` (``strict`` or
``shadow_allowed``) and ``RELAY_TOOL_RESULT_MAX_DEPTH``.

External Config File (Optional)
-------------------------------
JSON is tried first, then YAML (PyYAML). Structure example:

```
anthropic:
  model: claude-sonnet-4-20250514
  max_tokens: 8192
openrouter:
  base_url: https://openrouter.ai/api/v1
```

Public API
----------
* get_provider_config(provider: str, overrides: dict | None = None) -> dict
* get_model(provider: str) -> str | None
* get_conversion_settings() -> ConversionSettings
* reset_config_cache() -> None
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .defaults import (
    ANTHROPIC_DEFAULT_BASE_URL,
    ANTHROPIC_DEFAULT_MAX_TOKENS,
    ANTHROPIC_DEFAULT_MODEL,
    CONVERSION_DEFAULT_POLICY,
    GEMINI_DEFAULT_BASE_URL,
    GEMINI_DEFAULT_MODEL,
    HTTP_DEFAULT_TIMEOUT_SECONDS,
    MISTRAL_DEFAULT_BASE_URL,
    MISTRAL_DEFAULT_MODEL,
    OPENAI_DEFAULT_BASE_URL,
    OPENAI_DEFAULT_MODEL,
    OPENROUTER_DEFAULT_BASE_URL,
    OPENROUTER_DEFAULT_MODEL,
    TOOL_RESULT_ENVELOPE_KEY,
    TOOL_RESULT_MAX_DEPTH,
)
from .env import resolve_provider_key


# -------------------- Defaults --------------------

DEFAULTS: Dict[str, Dict[str, Any]] = {
    "openai": {"model": OPENAI_DEFAULT_MODEL, "base_url": OPENAI_DEFAULT_BASE_URL},
    "anthropic": {
        "model": ANTHROPIC_DEFAULT_MODEL,
        "base_url": ANTHROPIC_DEFAULT_BASE_URL,
        "max_tokens": ANTHROPIC_DEFAULT_MAX_TOKENS,
    },
    "gemini": {"model": GEMINI_DEFAULT_MODEL, "base_url": GEMINI_DEFAULT_BASE_URL},
    "openrouter": {"model": OPENROUTER_DEFAULT_MODEL, "base_url": OPENROUTER_DEFAULT_BASE_URL},
    "mistral": {"model": MISTRAL_DEFAULT_MODEL, "base_url": MISTRAL_DEFAULT_BASE_URL},
}


ENV_FIELD_MAP = {
    "model": "MODEL",
    "api_key": "API_KEY",  # pragma: allowlist secret - env suffix name, not a secret
    "base_url": "BASE_URL",
    "max_tokens": "MAX_TOKENS",
}

_INT_FIELDS = frozenset({"max_tokens"})

_FILE_CACHE: Optional[Dict[str, Any]] = None


def _load_external_config() -> Dict[str, Any]:
    """Load and cache the optional config file.

    Raises:
        ValueError: when the file exists but is neither JSON nor YAML.
    """
    global _FILE_CACHE
    if _FILE_CACHE is not None:
        return _FILE_CACHE
    path = os.getenv("RELAY_PROVIDERS_CONFIG_FILE")
    if not path or not Path(path).exists():
        _FILE_CACHE = {}
        return _FILE_CACHE
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"config file {path} is neither valid JSON nor YAML") from exc
    _FILE_CACHE = data if isinstance(data, dict) else {}
    return _FILE_CACHE


def reset_config_cache() -> None:
    """Forget the cached config file so the next lookup re-reads it."""
    global _FILE_CACHE
    _FILE_CACHE = None


def _env_overrides(provider: str) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    prefix = provider.upper()
    for field, suffix in ENV_FIELD_MAP.items():
        val = os.getenv(f"{prefix}_{suffix}")
        if val is None:
            continue
        if field in _INT_FIELDS:
            try:
                out[field] = int(val)
            except ValueError:
                continue
        else:
            out[field] = val
    if "api_key" not in out:
        key, _ = resolve_provider_key(provider)
        if key:
            out["api_key"] = key
    return out


def get_provider_config(provider: str, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return merged configuration for a provider.

    Merge order (later wins): defaults -> external config -> env vars -> overrides.
    ``None`` values in ``overrides`` are ignored.
    """
    name = (provider or "").lower().strip()
    cfg: Dict[str, Any] = {"timeout": HTTP_DEFAULT_TIMEOUT_SECONDS}

    # 1. Defaults
    cfg |= DEFAULTS.get(name, {})

    # 2. External config file section
    file_cfg = _load_external_config().get(name)
    if isinstance(file_cfg, dict):
        cfg |= file_cfg

    # 3. Env overrides
    cfg |= _env_overrides(name)

    # 4. Explicit overrides arg
    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}

    return cfg


def get_model(provider: str) -> Optional[str]:
    return get_provider_config(provider).get("model")


@dataclass(frozen=True)
class ConversionSettings:
    """Process-level conversion knobs.

    Attributes:
        policy: ``"strict"`` or ``"shadow_allowed"``.
        tool_result_max_depth: Maximum envelope nesting accepted by the codec.
        envelope_key: Reserved JSON key used by the tool-result codec.
    """

    policy: str = CONVERSION_DEFAULT_POLICY
    tool_result_max_depth: int = TOOL_RESULT_MAX_DEPTH
    envelope_key: str = TOOL_RESULT_ENVELOPE_KEY


def get_conversion_settings() -> ConversionSettings:
    """Read conversion settings from the environment (falls back to defaults)."""
    policy = (os.getenv("RELAY_CONVERSION_POLICY") or CONVERSION_DEFAULT_POLICY).strip().lower()
    if policy not in ("strict", "shadow_allowed"):
        policy = CONVERSION_DEFAULT_POLICY
    depth = TOOL_RESULT_MAX_DEPTH
    raw_depth = os.getenv("RELAY_TOOL_RESULT_MAX_DEPTH")
    if raw_depth:
        try:
            depth = max(1, int(raw_depth))
        except ValueError:
            depth = TOOL_RESULT_MAX_DEPTH
    return ConversionSettings(policy=policy, tool_result_max_depth=depth)


__all__ = [
    "get_provider_config",
    "get_model",
    "get_conversion_settings",
    "reset_config_cache",
    "ConversionSettings",
    "DEFAULTS",
]
