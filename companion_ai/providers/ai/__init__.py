"""AI provider adapters."""


def register_providers():
    """Register all AI provider adapters."""
    # Import at function level to avoid circular imports
    from ..registry import registry
    from ...config.settings import settings
    from .anthropic import AnthropicProvider
    from .gemini import GeminiProvider
    from .openai import OpenAIProvider

    def get_adapter_config():
        return settings.adapter_config()

    registry.register_ai_provider("openai", OpenAIProvider, get_adapter_config)
    registry.register_ai_provider("anthropic", AnthropicProvider, get_adapter_config)
    registry.register_ai_provider("gemini", GeminiProvider, get_adapter_config)
