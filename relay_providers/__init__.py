"""relay_providers package

Multi-provider LLM client library built around a canonical content model and
lossless conversion to and from vendor wire formats.

Public API (re-exported):
    - Version: ``__version__``
    - Exceptions: :class:`ProviderError`, :class:`ErrorCode`,
      :class:`ConversionError`
    - Canonical model: :class:`Message`, :class:`MessageRole`,
      :class:`ModelRequest`, :class:`ModelResponse`
    - Conversion: :class:`ConversionPolicy`, :func:`get_converter`,
      :func:`relay_request`, :func:`plan_request`
    - Factory: :func:`create`, :class:`ProviderFactory`
"""

from .base.conversion import ConversionPolicy, get_converter, plan_request, relay_request
from .base.errors import ConversionError, ErrorCode, ProviderError
from .base.factory import ProviderFactory
from .base.models import Message, MessageRole, ModelRequest, ModelResponse

__version__ = "0.1.0"


def create(provider: str, **kwargs):
    """Create a chat model by canonical provider name (``"openai"``...)."""
    return ProviderFactory.create(provider, **kwargs)


__all__ = [
    "__version__",
    "ProviderError",
    "ErrorCode",
    "ConversionError",
    "Message",
    "MessageRole",
    "ModelRequest",
    "ModelResponse",
    "ConversionPolicy",
    "get_converter",
    "relay_request",
    "plan_request",
    "ProviderFactory",
    "create",
]
