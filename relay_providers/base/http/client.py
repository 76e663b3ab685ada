"""Shared HTTP client pool for chat models.

Purpose:
    Provide a thread-safe pool of reusable ``httpx.Client`` instances so each
    chat call does not pay connection setup. Converters never touch HTTP; only
    :class:`relay_providers.base.chat_model.ChatModel` obtains clients here.

External dependencies:
    - ``httpx`` for the underlying synchronous HTTP client.

Timeout strategy:
    - The timeout is fixed when a client is first created. It comes from the
      caller (normally the provider config ``timeout``) and falls back to
      ``HTTP_DEFAULT_TIMEOUT_SECONDS``.

Lifecycle & cleanup:
    - Clients are cached by ``(base_url, purpose, timeout)``.
    - All clients are closed at interpreter exit via ``atexit``. Tests may call
      :func:`close_all_clients` explicitly.
"""

from __future__ import annotations

import atexit
import threading
from typing import Dict, Optional, Tuple

import httpx

from ...config.defaults import HTTP_DEFAULT_TIMEOUT_SECONDS
from ..logging import get_logger

_logger = get_logger("relay_providers.http")

# Internal cache keyed by (base_url, purpose, timeout)
_CLIENTS: Dict[Tuple[Optional[str], str, float], httpx.Client] = {}
_LOCK = threading.RLock()


def get_httpx_client(base_url: Optional[str], purpose: str = "chat", timeout: Optional[float] = None) -> httpx.Client:
    """Return a pooled ``httpx.Client`` for the given base URL and purpose.

    Parameters:
        base_url: API base URL set on the client so callers can post relative
            paths. ``None`` groups clients under a shared key.
        purpose: Short string discriminating separate pools.
        timeout: Seconds for the whole request; defaults to
            ``HTTP_DEFAULT_TIMEOUT_SECONDS``.
    """
    seconds = float(timeout if timeout is not None else HTTP_DEFAULT_TIMEOUT_SECONDS)
    key = (base_url, purpose, seconds)
    client = _CLIENTS.get(key)
    if client is not None:
        return client

    with _LOCK:
        client = _CLIENTS.get(key)
        if client is not None:
            return client
        client = httpx.Client(base_url=base_url, timeout=seconds) if base_url else httpx.Client(timeout=seconds)
        _CLIENTS[key] = client
        return client


def close_all_clients() -> None:
    """Close and clear all pooled HTTP clients."""
    with _LOCK:
        for c in _CLIENTS.values():
            try:
                c.close()
            except httpx.HTTPError as exc:
                _logger.debug("closing pooled client failed: %s", exc)
        _CLIENTS.clear()


def _cleanup_at_exit() -> None:
    """atexit hook to ensure clients are closed on interpreter exit."""
    close_all_clients()


atexit.register(_cleanup_at_exit)

__all__ = ["get_httpx_client", "close_all_clients"]
