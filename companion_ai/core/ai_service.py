"""Single entry point dispatching chat and screen analysis to the configured provider."""

import threading
from typing import Callable, Dict, Iterable, Iterator, Optional, Tuple

import structlog

from ..prompts.composer import SystemPromptContext
from ..providers import registry as default_registry
from ..providers.ai.base import AIProvider
from ..providers.registry import ProviderRegistry
from .exceptions import ConfigurationError
from .types import ChatMessage, MessageLike, ProviderConfig, StreamDelta, coerce_messages


logger = structlog.get_logger()


MISSING_KEY_MESSAGE = "API key not configured. Please add your API key in settings."


class AIService:
    """
    Validates a ProviderConfig and routes the call to that provider's adapter.

    The service keeps no per-conversation state. Memory directives are not
    interpreted here; callers apply them once a reply is complete.
    """

    def __init__(
        self,
        provider_registry: Optional[ProviderRegistry] = None,
        knowledge_store=None,
        **adapter_kwargs,
    ):
        self.registry = provider_registry or default_registry
        self.knowledge_store = knowledge_store
        self._adapter_kwargs = adapter_kwargs
        self._adapters: Dict[str, AIProvider] = {}
        self._lock = threading.Lock()

    def _adapter(self, provider: str) -> AIProvider:
        with self._lock:
            if provider not in self._adapters:
                self._adapters[provider] = self.registry.get_ai_provider(
                    provider, **self._adapter_kwargs
                )
            return self._adapters[provider]

    def _resolve(self, config: ProviderConfig) -> Tuple[AIProvider, str]:
        if not config.api_key:
            raise ConfigurationError(MISSING_KEY_MESSAGE)
        adapter = self._adapter(config.provider)
        model = config.model or adapter.info.default_model
        return adapter, model

    def _prepare_context(self, context: SystemPromptContext) -> SystemPromptContext:
        if context.knowledge_text is None and self.knowledge_store is not None:
            return context.with_knowledge(self.knowledge_store.text())
        return context

    def chat(
        self,
        config: ProviderConfig,
        messages: Iterable[MessageLike],
        prompt_context: SystemPromptContext,
        web_search: bool = False,
    ) -> str:
        """Send the conversation and return the complete reply."""
        adapter, model = self._resolve(config)
        return adapter.complete(
            config.api_key,
            model,
            coerce_messages(messages),
            self._prepare_context(prompt_context),
            web_search=web_search,
        )

    def iter_chat_stream(
        self,
        config: ProviderConfig,
        messages: Iterable[MessageLike],
        prompt_context: SystemPromptContext,
        web_search: bool = False,
        cancel: Optional[threading.Event] = None,
    ) -> Iterator[StreamDelta]:
        """
        Validate eagerly, then return a lazy iterator of reply fragments.

        Configuration errors surface at call time rather than on first
        iteration.
        """
        adapter, model = self._resolve(config)
        return adapter.iter_stream(
            config.api_key,
            model,
            coerce_messages(messages),
            self._prepare_context(prompt_context),
            web_search=web_search,
            cancel=cancel,
        )

    def chat_stream(
        self,
        config: ProviderConfig,
        messages: Iterable[MessageLike],
        prompt_context: SystemPromptContext,
        on_delta: Optional[Callable[[str], None]] = None,
        web_search: bool = False,
        cancel: Optional[threading.Event] = None,
    ) -> str:
        """Stream the reply through ``on_delta`` and return the full text."""
        adapter, model = self._resolve(config)
        return adapter.stream(
            config.api_key,
            model,
            coerce_messages(messages),
            self._prepare_context(prompt_context),
            on_delta=on_delta,
            web_search=web_search,
            cancel=cancel,
        )

    def analyze_screen(
        self,
        config: ProviderConfig,
        base64_image: str,
        analysis_context: SystemPromptContext,
    ) -> str:
        """Ask for a brief tip about a base64-encoded JPEG screenshot."""
        adapter, model = self._resolve(config)
        return adapter.analyze_image(
            config.api_key, model, base64_image, self._prepare_context(analysis_context)
        )

    def test_connection(self, config: ProviderConfig) -> bool:
        """Whether a minimal chat round-trip succeeds with this configuration."""
        try:
            self.chat(
                config,
                [ChatMessage(role="user", content="Hello")],
                SystemPromptContext(persona_name="Test", user_name="Test", knowledge_text=""),
            )
            return True
        except Exception as e:
            logger.warning(
                "Connection test failed", provider=config.provider, error=str(e)
            )
            return False

    def close(self) -> None:
        """Close every adapter this service created."""
        with self._lock:
            for adapter in self._adapters.values():
                adapter.close()
            self._adapters.clear()
