"""Thin chat transport shared by every provider model.

Purpose:
    Convert a canonical :class:`ModelRequest` with the provider's converter,
    POST it with a pooled ``httpx`` client, and convert the reply into a
    :class:`ModelResponse`. Subclasses supply only the endpoint path and the
    authentication headers.

External dependencies:
    - ``httpx`` for HTTP.

Errors & Observability:
    - Conversion errors propagate unchanged (they already carry the offending
      part).
    - Transport failures (non-2xx status, network errors, non-JSON bodies) are
      wrapped in :class:`ProviderError` using :func:`classify_exception`.
    - Emits normalized ``chat.start`` and ``chat.end`` events.

No retries, streaming or rate limiting happen here.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

import httpx

from ..config import get_conversion_settings, get_provider_config
from .conversion.plan import ConversionPlan
from .conversion.policy import ConversionPolicy
from .conversion.registry import get_converter
from .errors import ErrorCode, ProviderError, classify_exception
from .http import get_httpx_client
from .log_support import LogContext
from .logging import get_logger, normalized_log_event
from .models import ModelRequest, ModelResponse

MISSING_API_KEY_ERROR = "missing_api_key"  # pragma: allowlist secret - generic placeholder string, not a real secret

_BODY_PREVIEW_CHARS = 500


class ChatModel:
    """Base class for provider chat models.

    Parameters:
        api_key: Explicit API key; resolved from config/env when omitted.
        model: Model name; defaults to the provider config ``model``.
        base_url: API base URL; defaults to the provider config ``base_url``.
        policy: Conversion policy; defaults to ``RELAY_CONVERSION_POLICY``.
        timeout: Request timeout in seconds; defaults to the config ``timeout``.
        http_client: Optional ``httpx.Client`` used instead of the shared pool.
        extra_headers: Headers added to every request.
    """

    provider_name: str = ""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        *,
        policy: Union[ConversionPolicy, str, None] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
        extra_headers: Optional[Dict[str, str]] = None,
    ) -> None:
        cfg = get_provider_config(
            self.provider_name,
            {"api_key": api_key, "model": model, "base_url": base_url, "timeout": timeout},
        )
        self._config = cfg
        self._api_key = cfg.get("api_key")
        self._model = cfg.get("model")
        self._base_url = str(cfg.get("base_url") or "").rstrip("/")
        self._timeout = cfg.get("timeout")
        self._policy = ConversionPolicy.coerce(policy if policy is not None else get_conversion_settings().policy)
        self._http_client = http_client
        self._extra_headers = dict(extra_headers or {})
        self._converter = get_converter(self.provider_name)
        self._logger = get_logger(f"relay_providers.{self.provider_name}")

    @property
    def model(self) -> Optional[str]:
        return self._model

    @property
    def policy(self) -> ConversionPolicy:
        return self._policy

    # ---- subclass hooks ------------------------------------------------
    def endpoint(self) -> str:
        """Path appended to the base URL."""
        return "/chat/completions"

    def auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"}

    def build_payload(self, request: ModelRequest, plan: ConversionPlan) -> Dict[str, Any]:
        return self._converter.to_request(request, model=self._model, plan=plan)

    # ---- request -------------------------------------------------------
    def request(self, request: ModelRequest, **options: Any) -> ModelResponse:
        """Send ``request`` and return the converted response.

        ``options`` are merged into the top level of the wire payload (for
        example ``temperature`` or Gemini ``generationConfig``).

        Raises:
            ProviderError: missing API key or transport failure.
            ConversionError: the request cannot be represented for this
                provider under the configured policy.
        """
        ctx = LogContext(provider=self.provider_name, model=self._model)
        if not self._api_key:
            raise ProviderError(
                code=ErrorCode.AUTH,
                message=MISSING_API_KEY_ERROR,
                provider=self.provider_name,
                model=self._model,
            )
        plan = ConversionPlan(provider_name=self.provider_name, policy=self._policy)
        payload = self.build_payload(request, plan)
        payload.update(options)
        normalized_log_event(
            self._logger,
            "chat.start",
            ctx,
            phase="start",
            attempt=1,
            emitted=False,
            tokens=None,
            messages=len(request.messages),
            lossless=plan.is_lossless(),
        )
        client = self._http_client or get_httpx_client(self._base_url, "chat", self._timeout)
        url = f"{self._base_url}{self.endpoint()}"
        try:
            resp = client.post(url, json=payload, headers={**self.auth_headers(), **self._extra_headers})
            resp.raise_for_status()
            body = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            code = classify_exception(exc)
            normalized_log_event(
                self._logger,
                "chat.end",
                ctx,
                phase="finalize",
                attempt=1,
                error_code=code.value,
                emitted=False,
                tokens=None,
                level=logging.ERROR,
            )
            raise ProviderError(
                code=code,
                message=_describe(exc),
                provider=self.provider_name,
                model=self._model,
                retryable=code.retryable,
                raw=exc,
            ) from exc
        response = self._converter.from_response(body)
        normalized_log_event(
            self._logger,
            "chat.end",
            ctx,
            phase="finalize",
            attempt=1,
            emitted=True,
            tokens=response.usage,
            response_id=response.response_id,
            finish_reason=response.finish_reason.value if response.finish_reason else None,
        )
        return response


def _describe(exc: Exception) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        return f"HTTP {exc.response.status_code}: {exc.response.text[:_BODY_PREVIEW_CHARS]}"
    return str(exc) or exc.__class__.__name__


__all__ = ["ChatModel", "MISSING_API_KEY_ERROR"]
