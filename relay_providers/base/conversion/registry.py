"""Converter lookup and cross-provider relay.

Purpose:
    Resolve the converter functions of a provider package by name, importing
    the package lazily, and chain one provider's reverse request converter into
    another provider's forward converter.

External dependencies:
    - Standard library only (``importlib``).

Failure modes:
    - :class:`UnknownProviderError` for names without a converter package.
    - Any ``ConversionError`` raised by the chained converters propagates.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any, Callable, Dict, NamedTuple, Optional, Tuple, Union

from ..errors import UnknownProviderError
from ..models import ModelRequest, ModelResponse
from .plan import ConversionPlan
from .policy import ConversionPolicy

_PROVIDERS: Tuple[str, ...] = ("openai", "anthropic", "gemini", "openrouter", "mistral")


class ProviderConverter(NamedTuple):
    """The three converter functions exported by a provider package."""

    name: str
    to_request: Callable[..., Dict[str, Any]]
    from_request: Callable[[Dict[str, Any]], ModelRequest]
    from_response: Callable[[Dict[str, Any]], ModelResponse]


_CACHE: Dict[str, ProviderConverter] = {}


def converter_names() -> Tuple[str, ...]:
    return _PROVIDERS


def get_converter(provider: str) -> ProviderConverter:
    """Return the converter triple for ``provider`` (case-insensitive).

    Raises:
        UnknownProviderError: when ``provider`` has no converter package.
    """
    name = (provider or "").lower().strip()
    cached = _CACHE.get(name)
    if cached is not None:
        return cached
    if name not in _PROVIDERS:
        raise UnknownProviderError(f"Unknown provider '{provider}'")
    module = import_module(f"relay_providers.{name}.conversion")
    converter = ProviderConverter(
        name=name,
        to_request=getattr(module, f"to_{name}_request"),
        from_request=getattr(module, f"from_{name}_request"),
        from_response=getattr(module, f"from_{name}_response"),
    )
    _CACHE[name] = converter
    return converter


def relay_request(
    payload: Dict[str, Any],
    source: str,
    target: str,
    *,
    model: str,
    policy: Union[ConversionPolicy, str, None] = ConversionPolicy.STRICT,
    plan: Optional[ConversionPlan] = None,
    **options: Any,
) -> Dict[str, Any]:
    """Translate a ``source`` wire request into a ``target`` wire request.

    ``options`` are forwarded to the target converter (e.g. ``max_tokens`` for
    Anthropic).
    """
    canonical = get_converter(source).from_request(payload)
    return get_converter(target).to_request(canonical, model=model, policy=policy, plan=plan, **options)


__all__ = ["ProviderConverter", "converter_names", "get_converter", "relay_request"]
