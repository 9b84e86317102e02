"""Static catalog of supported AI providers and their models."""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Mapping, Optional, Tuple


@dataclass(frozen=True)
class ModelInfo:
    id: str
    name: str


@dataclass(frozen=True)
class ProviderInfo:
    """Display name, models and web-search capabilities of one provider."""
    name: str
    display_name: str
    models: Tuple[ModelInfo, ...]
    default_model: str
    # Prefix of synthesized "<label> API error: <status>" messages
    api_label: str = ""
    search_models: FrozenSet[str] = frozenset()
    # Search-capable replacements for models that cannot search themselves
    search_model_variants: Mapping[str, str] = field(default_factory=dict)

    @property
    def error_label(self) -> str:
        return self.api_label or self.display_name

    def model_ids(self) -> Tuple[str, ...]:
        return tuple(model.id for model in self.models)

    def supports_search(self, model: str) -> bool:
        return model in self.search_models

    def search_variant(self, model: str) -> str:
        return self.search_model_variants.get(model, model)


OPENAI = ProviderInfo(
    name="openai",
    display_name="OpenAI",
    models=(
        ModelInfo("gpt-4o", "GPT-4o (Latest)"),
        ModelInfo("gpt-4o-mini", "GPT-4o Mini (Fast & Cheap)"),
        ModelInfo("gpt-4-turbo", "GPT-4 Turbo"),
        ModelInfo("gpt-3.5-turbo", "GPT-3.5 Turbo"),
    ),
    default_model="gpt-4o-mini",
    search_models=frozenset({"gpt-4o", "gpt-4o-mini"}),
    search_model_variants={
        "gpt-4o": "gpt-4o-search-preview",
        "gpt-4o-mini": "gpt-4o-mini-search-preview",
    },
)

ANTHROPIC = ProviderInfo(
    name="anthropic",
    display_name="Anthropic",
    models=(
        ModelInfo("claude-sonnet-4-20250514", "Claude Sonnet 4 (Latest)"),
        ModelInfo("claude-3-5-sonnet-20241022", "Claude 3.5 Sonnet"),
        ModelInfo("claude-3-5-haiku-20241022", "Claude 3.5 Haiku (Fast)"),
        ModelInfo("claude-3-opus-20240229", "Claude 3 Opus"),
    ),
    default_model="claude-sonnet-4-20250514",
    search_models=frozenset(
        {
            "claude-sonnet-4-20250514",
            "claude-3-5-sonnet-20241022",
            "claude-3-5-haiku-20241022",
        }
    ),
)

GEMINI = ProviderInfo(
    name="gemini",
    display_name="Google Gemini",
    api_label="Gemini",
    models=(
        ModelInfo("gemini-2.0-flash", "Gemini 2.0 Flash"),
        ModelInfo("gemini-1.5-pro", "Gemini 1.5 Pro"),
        ModelInfo("gemini-1.5-flash", "Gemini 1.5 Flash (Fast)"),
        ModelInfo("gemini-1.0-pro", "Gemini 1.0 Pro"),
    ),
    default_model="gemini-1.5-flash",
    search_models=frozenset({"gemini-2.0-flash", "gemini-1.5-pro", "gemini-1.5-flash"}),
)

PROVIDERS: Dict[str, ProviderInfo] = {
    info.name: info for info in (OPENAI, ANTHROPIC, GEMINI)
}


def get_provider_info(name: str) -> Optional[ProviderInfo]:
    return PROVIDERS.get(name)
