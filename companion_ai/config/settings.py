"""Configuration settings for the companion AI core."""

import os
import json
import threading
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import structlog
from dotenv import load_dotenv

from ..core.types import ProviderConfig
from ..prompts.composer import Preset, SystemPromptContext


logger = structlog.get_logger()


KNOWN_PROVIDERS = ("openai", "anthropic", "gemini")

# Provider-specific key variables, consulted when AI_API_KEY is unset
PROVIDER_KEY_VARS = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "gemini": "GOOGLE_API_KEY",
}


@dataclass
class AISettings:
    """Provider selection and request parameters."""
    provider: str = "openai"
    api_key: str = ""
    model: str = ""
    max_tokens: int = 500
    vision_max_tokens: int = 200
    temperature: float = 0.7
    request_timeout: float = 60.0  # seconds
    web_search: bool = False


@dataclass
class PersonaSettings:
    """Persona voice and naming."""
    persona_name: str = "Joshua"
    user_name: str = "User"
    preset: str = "retro"


@dataclass
class StorageSettings:
    """Where durable companion data lives."""
    data_folder: str = "~/WOPR"
    brain_dir_name: str = "brain"
    knowledge_file: str = "knowledge.md"
    profile_file: str = "config.json"

    @property
    def data_path(self) -> Path:
        return Path(self.data_folder).expanduser()

    @property
    def brain_dir(self) -> Path:
        return self.data_path / self.brain_dir_name

    @property
    def profile_path(self) -> Path:
        return self.data_path / self.profile_file


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = "INFO"
    format: str = "dev"
    file_enabled: bool = False
    file_rotation_mb: int = 10
    file_backup_count: int = 7


SECTIONS = ("ai", "persona", "storage", "logging")


class Settings:
    """Main settings object: defaults, then JSON file, then environment."""

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        self.config_file = Path(config_file) if config_file else None
        self._lock = threading.RLock()
        self._env_loaded = False

        self.ai = AISettings()
        self.persona = PersonaSettings()
        self.storage = StorageSettings()
        self.logging = LoggingSettings()

        self._load_env_file()

        if self.config_file and self.config_file.exists():
            self.load_from_file()

        self.load_from_env()

    def _load_env_file(self) -> None:
        """Load environment variables from the nearest .env file."""
        if self._env_loaded:
            return
        current_dir = Path.cwd()
        for parent in [current_dir] + list(current_dir.parents):
            env_file = parent / ".env"
            if env_file.exists():
                load_dotenv(env_file)
                logger.debug("Loaded .env file", path=str(env_file))
                break
        self._env_loaded = True

    def load_from_file(self) -> None:
        """Load settings from the JSON configuration file."""
        if not self.config_file or not self.config_file.exists():
            return

        try:
            with self._lock:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    config = json.load(f)

                for section_name in SECTIONS:
                    section = getattr(self, section_name)
                    for key, value in config.get(section_name, {}).items():
                        if hasattr(section, key):
                            setattr(section, key, value)

                logger.info("Loaded settings from file", file=str(self.config_file))

        except (OSError, ValueError) as e:
            logger.error(
                "Failed to load settings from file",
                file=str(self.config_file),
                error=str(e),
            )

    def load_from_env(self) -> None:
        """Apply environment variable overrides."""
        with self._lock:
            if os.getenv("AI_PROVIDER"):
                self.ai.provider = os.getenv("AI_PROVIDER").strip().lower()
            if os.getenv("AI_MODEL"):
                self.ai.model = os.getenv("AI_MODEL")

            api_key = self._env_api_key(self.ai.provider)
            if api_key:
                self.ai.api_key = api_key

            if os.getenv("AI_MAX_TOKENS"):
                self.ai.max_tokens = int(os.getenv("AI_MAX_TOKENS"))
            if os.getenv("AI_TEMPERATURE"):
                self.ai.temperature = float(os.getenv("AI_TEMPERATURE"))
            if os.getenv("AI_REQUEST_TIMEOUT"):
                self.ai.request_timeout = float(os.getenv("AI_REQUEST_TIMEOUT"))
            if os.getenv("AI_WEB_SEARCH"):
                self.ai.web_search = os.getenv("AI_WEB_SEARCH").lower() == "true"

            if os.getenv("PERSONA_NAME"):
                self.persona.persona_name = os.getenv("PERSONA_NAME")
            if os.getenv("USER_NAME"):
                self.persona.user_name = os.getenv("USER_NAME")
            if os.getenv("PERSONA_PRESET"):
                self.persona.preset = Preset.from_value(os.getenv("PERSONA_PRESET")).value

            if os.getenv("DATA_FOLDER"):
                self.storage.data_folder = os.getenv("DATA_FOLDER")

            if os.getenv("LOG_LEVEL"):
                self.logging.level = os.getenv("LOG_LEVEL")
            if os.getenv("LOG_FORMAT"):
                self.logging.format = os.getenv("LOG_FORMAT")
            if os.getenv("LOG_FILE_ENABLED"):
                self.logging.file_enabled = os.getenv("LOG_FILE_ENABLED").lower() == "true"

    def save_to_file(
        self,
        file_path: Optional[Union[str, Path]] = None,
        include_api_key: bool = False,
    ) -> None:
        """Save current settings to a JSON file."""
        save_path = Path(file_path) if file_path else self.config_file
        if not save_path:
            raise ValueError("No file path provided")

        with self._lock:
            config = self.to_dict(include_api_key=include_api_key)
            save_path.parent.mkdir(parents=True, exist_ok=True)
            with open(save_path, "w", encoding="utf-8") as f:
                json.dump(config, f, indent=2, ensure_ascii=False)

        logger.info("Saved settings to file", file=str(save_path))

    def reload(self) -> None:
        """Reload settings from file and environment."""
        with self._lock:
            if self.config_file and self.config_file.exists():
                self.load_from_file()
            self.load_from_env()
            logger.info("Settings reloaded")

    def _env_api_key(self, provider: str) -> str:
        return os.getenv("AI_API_KEY") or os.getenv(PROVIDER_KEY_VARS.get(provider, ""), "")

    def api_key_for(self, provider: str) -> str:
        """
        API key to use for ``provider``.

        AI_API_KEY wins, then the provider-specific variable. The key loaded
        into the settings only applies to the configured provider.
        """
        api_key = self._env_api_key(provider)
        if api_key:
            return api_key
        if provider == self.ai.provider:
            return self.ai.api_key
        return ""

    def provider_config(self) -> ProviderConfig:
        """Per-request provider selection built from current settings."""
        return ProviderConfig(
            provider=self.ai.provider, api_key=self.ai.api_key, model=self.ai.model
        )

    def prompt_context(self, **overrides) -> SystemPromptContext:
        """Prompt context for the configured persona; keyword overrides win."""
        values: Dict[str, Any] = {
            "persona_name": self.persona.persona_name,
            "user_name": self.persona.user_name,
            "preset": Preset.from_value(self.persona.preset),
        }
        values.update(overrides)
        return SystemPromptContext(**values)

    def adapter_config(self) -> Dict[str, Any]:
        """Constructor keyword arguments shared by every provider adapter."""
        return {
            "timeout": self.ai.request_timeout,
            "max_tokens": self.ai.max_tokens,
            "vision_max_tokens": self.ai.vision_max_tokens,
            "temperature": self.ai.temperature,
        }

    def validate(self) -> List[str]:
        """Validate current settings and return a list of issues."""
        issues = []

        if self.ai.provider not in KNOWN_PROVIDERS:
            issues.append(f"Unknown AI provider: {self.ai.provider}")
        if not self.ai.api_key:
            issues.append("API key not configured")
        if self.ai.max_tokens <= 0:
            issues.append(f"Invalid max tokens: {self.ai.max_tokens}")
        if not 0.0 <= self.ai.temperature <= 2.0:
            issues.append(f"Invalid temperature: {self.ai.temperature}")
        if self.ai.request_timeout <= 0:
            issues.append(f"Invalid request timeout: {self.ai.request_timeout}")
        if self.persona.preset not in [preset.value for preset in Preset]:
            issues.append(f"Unknown persona preset: {self.persona.preset}")

        return issues

    def to_dict(self, include_api_key: bool = False) -> Dict[str, Any]:
        """Convert settings to a dictionary for serialization."""
        data = {name: asdict(getattr(self, name)) for name in SECTIONS}
        if not include_api_key:
            data["ai"].pop("api_key", None)
        return data


# Global settings instance
settings = Settings()
