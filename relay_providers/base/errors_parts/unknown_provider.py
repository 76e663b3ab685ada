"""Lookup error for provider names that are not registered."""
from __future__ import annotations


class UnknownProviderError(LookupError):
    """Raised when a provider cannot be resolved or initialized.

    Failure modes include:
    - The provider name is not registered (capabilities, converters, factory).
    - The provider module cannot be imported or the model class is missing.
    - The model constructor raised an exception during initialization.
    """


__all__ = ["UnknownProviderError"]
