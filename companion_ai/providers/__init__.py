"""Provider catalog, registry and wire-dialect adapters."""

from .registry import registry


# Defer provider registration to avoid circular imports
def _register_all_providers():
    """Register all provider types."""
    from . import ai
    ai.register_providers()


_register_all_providers()

__all__ = ["registry"]
