"""Provider Factory utilities.

Purpose
-------
Centralize provider-agnostic creation of :class:`ChatModel` instances. Model
classes are imported lazily using ``importlib`` so importing the factory does
not pull every provider package.

External dependencies
---------------------
- Standard library only (``importlib``).

Scope
-----
Supported providers: ``openai``, ``anthropic``, ``gemini``, ``openrouter`` and
``mistral``. The factory performs no retries or fallbacks; it either returns
an instance or raises :class:`UnknownProviderError`.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any, Dict, Tuple, Type

from .errors import UnknownProviderError


def create_model(provider: str, **kwargs: Any) -> Any:
    """Shorthand for :meth:`ProviderFactory.create`."""
    return ProviderFactory.create(provider, **kwargs)


class ProviderFactory:
    """Create chat models based on a canonical name (e.g., ``"openai"``)."""

    # Map canonical provider names to import paths and class names
    _PROVIDERS: Dict[str, Dict[str, str]] = {
        "openai": {"module": "relay_providers.openai.client", "class": "OpenAIModel"},
        "anthropic": {"module": "relay_providers.anthropic.client", "class": "AnthropicModel"},
        "gemini": {"module": "relay_providers.gemini.client", "class": "GeminiModel"},
        "openrouter": {"module": "relay_providers.openrouter.client", "class": "OpenRouterModel"},
        "mistral": {"module": "relay_providers.mistral.client", "class": "MistralModel"},
    }

    @classmethod
    def create(cls, provider: str, **kwargs: Any) -> Any:
        """Create a chat model instance.

        Parameters
        ----------
        provider:
            Canonical provider name (case-insensitive).
        **kwargs:
            Forwarded to the model constructor (``api_key``, ``model``,
            ``base_url``, ``policy``, ``timeout``, ``http_client``...).

        Raises
        ------
        UnknownProviderError
            If the provider is unknown, its module or class cannot be loaded,
            or the constructor rejects the arguments.
        """
        name = (provider or "").lower().strip()
        spec = cls._PROVIDERS.get(name)
        if not spec:
            raise UnknownProviderError(f"Unknown provider '{provider}'")

        module_path, class_name = spec["module"], spec["class"]
        try:
            mod = import_module(module_path)
        except ImportError as exc:  # pragma: no cover - import failure path
            raise UnknownProviderError(
                f"Failed to import module '{module_path}' for provider '{provider}': {exc}"
            ) from exc

        try:
            klass: Type = getattr(mod, class_name)
        except AttributeError as exc:  # pragma: no cover - registry typo
            raise UnknownProviderError(
                f"Model class '{class_name}' not found in '{module_path}' for provider '{provider}'"
            ) from exc

        try:
            return klass(**kwargs)
        except TypeError as exc:
            raise UnknownProviderError(f"Invalid arguments for '{provider}' model constructor: {exc}") from exc

    @classmethod
    def supported(cls) -> Tuple[str, ...]:
        """Return the supported canonical provider names in deterministic order."""
        return tuple(cls._PROVIDERS.keys())


__all__ = ["ProviderFactory", "create_model"]
