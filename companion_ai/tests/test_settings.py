"""Tests for settings loading."""

import json

import pytest

from companion_ai.config.settings import Settings
from companion_ai.prompts.composer import Preset


ENV_VARS = (
    "AI_PROVIDER",
    "AI_API_KEY",
    "AI_MODEL",
    "AI_MAX_TOKENS",
    "AI_TEMPERATURE",
    "AI_REQUEST_TIMEOUT",
    "AI_WEB_SEARCH",
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "GOOGLE_API_KEY",
    "PERSONA_NAME",
    "USER_NAME",
    "PERSONA_PRESET",
    "DATA_FOLDER",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FILE_ENABLED",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep any developer .env out of the picture
    monkeypatch.chdir(tmp_path)


class TestSettings:
    """Defaults, file and environment layering."""

    def test_defaults(self):
        settings = Settings()

        assert settings.ai.provider == "openai"
        assert settings.ai.max_tokens == 500
        assert settings.ai.vision_max_tokens == 200
        assert settings.ai.temperature == 0.7
        assert settings.persona.persona_name == "Joshua"
        assert settings.storage.brain_dir.name == "brain"
        assert settings.storage.profile_path.name == "config.json"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("AI_PROVIDER", " Anthropic ")
        monkeypatch.setenv("AI_API_KEY", "ant-key")
        monkeypatch.setenv("AI_MODEL", "claude-3-5-haiku-20241022")
        monkeypatch.setenv("AI_WEB_SEARCH", "true")
        monkeypatch.setenv("PERSONA_PRESET", "preset2")

        settings = Settings()

        assert settings.provider_config().provider == "anthropic"
        assert settings.provider_config().api_key == "ant-key"
        assert settings.provider_config().model == "claude-3-5-haiku-20241022"
        assert settings.ai.web_search is True
        assert settings.persona.preset == "cozy"

    def test_provider_specific_key(self, monkeypatch):
        monkeypatch.setenv("AI_PROVIDER", "gemini")
        monkeypatch.setenv("GOOGLE_API_KEY", "g-key")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-key")

        assert Settings().ai.api_key == "g-key"

    def test_api_key_for_other_provider(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant")
        settings = Settings()

        assert settings.ai.api_key == "sk-openai"
        assert settings.api_key_for("anthropic") == "sk-ant"
        assert settings.api_key_for("gemini") == ""

    def test_api_key_for_generic_key(self, monkeypatch):
        monkeypatch.setenv("AI_API_KEY", "shared")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant")

        assert Settings().api_key_for("anthropic") == "shared"

    def test_api_key_for_configured_provider_from_file(self, tmp_path):
        config_file = tmp_path / "settings.json"
        config_file.write_text(json.dumps({"ai": {"api_key": "from-file"}}), encoding="utf-8")
        settings = Settings(config_file)

        assert settings.api_key_for("openai") == "from-file"
        assert settings.api_key_for("anthropic") == ""

    def test_file_then_env(self, monkeypatch, tmp_path):
        config_file = tmp_path / "settings.json"
        config_file.write_text(
            json.dumps(
                {
                    "ai": {"provider": "gemini", "temperature": 0.2, "unknown": 1},
                    "persona": {"user_name": "David"},
                }
            ),
            encoding="utf-8",
        )
        monkeypatch.setenv("AI_TEMPERATURE", "0.9")

        settings = Settings(config_file)

        assert settings.ai.provider == "gemini"
        assert settings.ai.temperature == 0.9
        assert settings.persona.user_name == "David"
        assert not hasattr(settings.ai, "unknown")

    def test_corrupt_file_keeps_defaults(self, tmp_path):
        config_file = tmp_path / "settings.json"
        config_file.write_text("{", encoding="utf-8")

        assert Settings(config_file).ai.provider == "openai"

    def test_save_omits_api_key(self, tmp_path, monkeypatch):
        monkeypatch.setenv("AI_API_KEY", "secret")
        settings = Settings()
        path = tmp_path / "out" / "settings.json"

        settings.save_to_file(path)
        saved = json.loads(path.read_text(encoding="utf-8"))

        assert "api_key" not in saved["ai"]
        assert saved["persona"]["persona_name"] == "Joshua"

    def test_prompt_context_overrides(self, monkeypatch):
        monkeypatch.setenv("PERSONA_NAME", "Pixel")
        monkeypatch.setenv("PERSONA_PRESET", "cozy")

        context = Settings().prompt_context(user_name="David", screen_context="IDE")

        assert context.persona_name == "Pixel"
        assert context.user_name == "David"
        assert context.preset is Preset.COZY
        assert context.screen_context == "IDE"

    def test_adapter_config(self, monkeypatch):
        monkeypatch.setenv("AI_MAX_TOKENS", "800")

        assert Settings().adapter_config() == {
            "timeout": 60.0,
            "max_tokens": 800,
            "vision_max_tokens": 200,
            "temperature": 0.7,
        }

    def test_validate(self, monkeypatch):
        monkeypatch.setenv("AI_PROVIDER", "grok")
        settings = Settings()
        settings.ai.temperature = 3.0

        issues = settings.validate()

        assert "Unknown AI provider: grok" in issues
        assert "API key not configured" in issues
        assert "Invalid temperature: 3.0" in issues
