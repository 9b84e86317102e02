"""
Companion AI - Conversational core of a desktop companion.

Sends conversation turns (and optionally a screenshot) to OpenAI,
Anthropic or Gemini, streams back incremental text, and lets the model
remember and forget facts about the user through bracketed memory
directives embedded in its own replies.
"""

__version__ = "1.0.0"
