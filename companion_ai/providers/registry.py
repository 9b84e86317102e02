"""Provider registry mapping provider tags to catalog entries and adapters."""

from typing import Any, Callable, Dict, List, Optional, Type

import structlog

from ..core.exceptions import UnknownProviderError
from .ai.base import AIProvider
from .catalog import ProviderInfo


logger = structlog.get_logger()


class ProviderRegistry:
    """Registry for AI provider adapters and their static catalog entries."""

    def __init__(self):
        self._ai_providers: Dict[str, Type[AIProvider]] = {}
        self._provider_configs: Dict[str, Callable[[], Dict[str, Any]]] = {}

    def register_ai_provider(
        self,
        name: str,
        provider_class: Type[AIProvider],
        config_getter: Optional[Callable[[], Dict[str, Any]]] = None,
    ) -> None:
        """Register an AI provider adapter under its tag."""
        self._ai_providers[name] = provider_class
        if config_getter:
            self._provider_configs[name] = config_getter
        logger.debug(
            "Registered AI provider", name=name, class_name=provider_class.__name__
        )

    def _provider_class(self, name: str) -> Type[AIProvider]:
        if name not in self._ai_providers:
            raise UnknownProviderError(name)
        return self._ai_providers[name]

    def get_ai_provider(self, name: str, **kwargs) -> AIProvider:
        """Create an adapter instance for ``name``."""
        provider_class = self._provider_class(name)

        # Registered configuration fills in anything the caller left out
        if name in self._provider_configs:
            for key, value in self._provider_configs[name]().items():
                kwargs.setdefault(key, value)

        return provider_class(**kwargs)

    def get_provider_info(self, name: str) -> ProviderInfo:
        return self._provider_class(name).info

    def default_model(self, name: str) -> str:
        return self.get_provider_info(name).default_model

    def list_ai_providers(self) -> List[str]:
        """List registered provider tags."""
        return list(self._ai_providers.keys())

    def clear(self) -> None:
        """Clear all registered providers."""
        self._ai_providers.clear()
        self._provider_configs.clear()


# Global registry instance
registry = ProviderRegistry()
