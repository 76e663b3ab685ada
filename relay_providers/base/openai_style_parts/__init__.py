"""Shared chat-completions conversion for OpenAI-compatible vendors.

Re-exports provide a stable import surface for the per-vendor converters.
"""

from .converter import TEXT_EXT_HANDLED, OpenAIStyleConverter, Routed

__all__ = ["OpenAIStyleConverter", "Routed", "TEXT_EXT_HANDLED"]
