"""Pytest configuration for the relay_providers test suite.

Isolates every test from the developer's environment: provider API keys,
``RELAY_*`` settings and the cached config file are cleared before each test,
and pooled HTTP clients are closed afterwards.
"""

from __future__ import annotations

from typing import Iterator

import pytest

from relay_providers.base.http import close_all_clients
from relay_providers.config import reset_config_cache
from relay_providers.config.env import ENV_ALIASES, ENV_MAP

_ISOLATED_VARS = (
    "RELAY_PROVIDERS_CONFIG_FILE",
    "RELAY_CONVERSION_POLICY",
    "RELAY_TOOL_RESULT_MAX_DEPTH",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    names = set(_ISOLATED_VARS) | set(ENV_MAP.values())
    for aliases in ENV_ALIASES.values():
        names.update(aliases)
    for provider in ENV_MAP:
        for suffix in ("MODEL", "BASE_URL", "MAX_TOKENS"):
            names.add(f"{provider.upper()}_{suffix}")
    for name in names:
        monkeypatch.delenv(name, raising=False)
    reset_config_cache()
    yield
    reset_config_cache()
    close_all_clients()
