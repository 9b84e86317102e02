"""Persona prompt assembly."""

from .composer import (
    Preset,
    SystemPromptContext,
    build_screen_analysis_prompt,
    build_system_prompt,
)

__all__ = [
    "Preset",
    "SystemPromptContext",
    "build_screen_analysis_prompt",
    "build_system_prompt",
]
