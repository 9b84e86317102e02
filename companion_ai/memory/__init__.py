"""Durable memory: knowledge store, user profile and directive interpreter."""

from .directives import (
    DirectiveResult,
    DirectiveStreamFilter,
    MemoryDirective,
    apply_directives,
    parse_directives,
)
from .knowledge import FileKnowledgeBackend, KnowledgeStore, MemoryKnowledgeBackend
from .profile import JsonProfileStore

__all__ = [
    "DirectiveResult",
    "DirectiveStreamFilter",
    "FileKnowledgeBackend",
    "JsonProfileStore",
    "KnowledgeStore",
    "MemoryDirective",
    "MemoryKnowledgeBackend",
    "apply_directives",
    "parse_directives",
]
