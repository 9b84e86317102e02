"""Tests for persona prompt assembly."""

import pytest

from companion_ai.core.types import ChatMessage
from companion_ai.prompts.composer import (
    Preset,
    SystemPromptContext,
    build_screen_analysis_prompt,
    build_system_prompt,
)


KNOWLEDGE = "- favorite color is blue\n- plays chess on Fridays"


class TestSystemPrompt:
    """Chat system prompt."""

    @pytest.mark.parametrize("preset", list(Preset))
    def test_knowledge_included_verbatim(self, preset):
        base = SystemPromptContext(persona_name="Joshua", user_name="David", preset=preset)

        without = build_system_prompt(base)
        with_knowledge = build_system_prompt(base.with_knowledge(KNOWLEDGE))

        assert KNOWLEDGE in with_knowledge
        assert len(with_knowledge) > len(without)
        assert with_knowledge.startswith(without)

    @pytest.mark.parametrize("knowledge", [None, "", "  \n "])
    def test_blank_knowledge_omitted(self, knowledge):
        prompt = build_system_prompt(SystemPromptContext(knowledge_text=knowledge))

        assert "PERSISTENT MEMORY (things" not in prompt

    def test_retro_persona(self):
        prompt = build_system_prompt(SystemPromptContext(persona_name="Joshua", user_name="David"))

        assert prompt.startswith("You are Joshua, the WOPR")
        assert "The user is designated: DAVID" in prompt
        assert "GLOBAL THERMONUCLEAR WAR" in prompt

    def test_cozy_persona(self):
        prompt = build_system_prompt(
            SystemPromptContext(persona_name="Pixel", user_name="David", preset=Preset.COZY)
        )

        assert prompt.startswith("You are Pixel, a friendly and helpful desktop companion.")
        assert "The user's name is: David" in prompt
        assert "WOPR" not in prompt

    def test_screen_context_after_knowledge(self):
        prompt = build_system_prompt(
            SystemPromptContext(knowledge_text=KNOWLEDGE, screen_context="Editor: main.py")
        )

        assert prompt.endswith("CURRENT SCREEN CONTEXT:\nEditor: main.py")
        assert prompt.index(KNOWLEDGE) < prompt.index("CURRENT SCREEN CONTEXT:")

    def test_cozy_headers(self):
        prompt = build_system_prompt(
            SystemPromptContext(
                preset=Preset.COZY, knowledge_text=KNOWLEDGE, screen_context="Browser"
            )
        )

        assert f"THINGS YOU REMEMBER:\n{KNOWLEDGE}" in prompt
        assert prompt.endswith("CURRENT CONTEXT:\nBrowser")


class TestScreenAnalysisPrompt:
    """Vision system prompt."""

    def test_recent_conversation(self):
        context = SystemPromptContext(
            persona_name="Joshua",
            user_name="David",
            recent_messages=(
                ChatMessage(role="user", content="what game?"),
                ChatMessage(role="assistant", content="CHESS."),
            ),
        )

        prompt = build_screen_analysis_prompt(context)

        assert prompt.endswith("RECENT CONVERSATION:\nDavid: what game?\nJoshua: CHESS.\n")

    def test_knowledge_header_names_user(self):
        prompt = build_screen_analysis_prompt(
            SystemPromptContext(user_name="David", knowledge_text=KNOWLEDGE)
        )

        assert f"THINGS YOU KNOW ABOUT DAVID:\n{KNOWLEDGE}" in prompt
        assert "monitoring DAVID's display" in prompt

    def test_cozy_analysis(self):
        prompt = build_screen_analysis_prompt(
            SystemPromptContext(
                persona_name="Pixel",
                user_name="David",
                preset=Preset.COZY,
                knowledge_text=KNOWLEDGE,
                recent_messages=(ChatMessage(role="user", content="hi"),),
            )
        )

        assert "observing David's screen" in prompt
        assert "Things you remember about David:" in prompt
        assert prompt.endswith("Recent chat:\nDavid: hi\n")

    def test_minimal(self):
        prompt = build_screen_analysis_prompt(SystemPromptContext())

        assert "RECENT CONVERSATION" not in prompt
        assert "THINGS YOU KNOW" not in prompt


class TestPreset:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("cozy", Preset.COZY),
            ("preset2", Preset.COZY),
            (" COZY ", Preset.COZY),
            ("retro", Preset.RETRO),
            ("preset1", Preset.RETRO),
            (None, Preset.RETRO),
            ("unknown", Preset.RETRO),
            (Preset.COZY, Preset.COZY),
        ],
    )
    def test_from_value(self, value, expected):
        assert Preset.from_value(value) is expected
