"""System prompt assembly for the companion personas."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Sequence

from ..core.types import ChatMessage
from . import templates


class Preset(str, Enum):
    """Persona voice driving prompt assembly."""
    RETRO = "retro"
    COZY = "cozy"

    @classmethod
    def from_value(cls, value: Optional[str]) -> "Preset":
        """Resolve a persona name or UI preset id ("preset1"/"preset2")."""
        if isinstance(value, cls):
            return value
        normalized = (value or "").strip().lower()
        if normalized in ("cozy", "preset2"):
            return cls.COZY
        return cls.RETRO


@dataclass(frozen=True)
class SystemPromptContext:
    """Everything the persona templates need for one request."""
    persona_name: str = "Joshua"
    user_name: str = "User"
    screen_context: Optional[str] = None
    knowledge_text: Optional[str] = None
    recent_messages: Sequence[ChatMessage] = ()
    preset: Preset = Preset.RETRO

    def with_knowledge(self, knowledge_text: str) -> "SystemPromptContext":
        return replace(self, knowledge_text=knowledge_text)


def _fields(context: SystemPromptContext) -> dict:
    return {
        "persona_name": context.persona_name,
        "user_name": context.user_name,
        "user_name_upper": context.user_name.upper(),
    }


def _has_knowledge(context: SystemPromptContext) -> bool:
    return bool(context.knowledge_text and context.knowledge_text.strip())


def _section(header: str, body: str) -> str:
    return f"\n\n{header}\n{body}"


def _recent_conversation(context: SystemPromptContext) -> str:
    lines = []
    for message in context.recent_messages:
        speaker = context.user_name if message.role == "user" else context.persona_name
        lines.append(f"{speaker}: {message.content}\n")
    return "".join(lines)


def build_system_prompt(context: SystemPromptContext) -> str:
    """
    Build the chat system prompt for the context's persona.

    The knowledge block and then the screen-context block are appended only
    when they have content.
    """
    fields = _fields(context)
    if Preset.from_value(context.preset) is Preset.COZY:
        prompt = templates.COZY_SYSTEM_TEMPLATE.format(**fields)
        knowledge_header = templates.COZY_KNOWLEDGE_HEADER
        screen_header = templates.COZY_SCREEN_HEADER
    else:
        prompt = templates.RETRO_SYSTEM_TEMPLATE.format(**fields)
        knowledge_header = templates.RETRO_KNOWLEDGE_HEADER
        screen_header = templates.RETRO_SCREEN_HEADER

    if _has_knowledge(context):
        prompt += _section(knowledge_header, context.knowledge_text)

    if context.screen_context:
        prompt += _section(screen_header, context.screen_context)

    return prompt


def build_screen_analysis_prompt(context: SystemPromptContext) -> str:
    """Build the shorter prompt used for proactive screen tips."""
    fields = _fields(context)
    if Preset.from_value(context.preset) is Preset.COZY:
        prompt = templates.COZY_ANALYSIS_TEMPLATE.format(**fields)
        knowledge_header = templates.COZY_ANALYSIS_KNOWLEDGE_HEADER.format(**fields)
        recent_header = templates.COZY_ANALYSIS_RECENT_HEADER
    else:
        prompt = templates.RETRO_ANALYSIS_TEMPLATE.format(**fields)
        knowledge_header = templates.RETRO_ANALYSIS_KNOWLEDGE_HEADER.format(**fields)
        recent_header = templates.RETRO_ANALYSIS_RECENT_HEADER

    if _has_knowledge(context):
        prompt += _section(knowledge_header, context.knowledge_text)

    if context.recent_messages:
        prompt += _section(recent_header, _recent_conversation(context))

    return prompt
