"""Memory directives embedded by the model in its own replies.

The model stores facts with ``[REMEMBER: fact]`` and drops them with
``[FORGET: keyword]``. Directives are applied once a reply is complete and
removed from the text shown to the user.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

import structlog

from .knowledge import KnowledgeStore
from .profile import update_user_name


logger = structlog.get_logger()


REMEMBER_PATTERN = re.compile(r"\[REMEMBER:\s*([^\]]+)\]", re.IGNORECASE)
FORGET_PATTERN = re.compile(r"\[FORGET:\s*([^\]]+)\]", re.IGNORECASE)
_EXCESS_NEWLINES = re.compile(r"\n{3,}")

# Tried in order; the first match wins
NAME_PATTERNS = (
    re.compile(r"(?:user(?:'s)?|player(?:'s)?)\s+name\s+is\s+(\w+)", re.IGNORECASE),
    re.compile(r"name\s+is\s+(\w+)", re.IGNORECASE),
    re.compile(r"called\s+(\w+)", re.IGNORECASE),
    re.compile(r"user\s+is\s+(\w+)", re.IGNORECASE),
)


class DirectiveKind(str, Enum):
    REMEMBER = "REMEMBER"
    FORGET = "FORGET"


@dataclass(frozen=True)
class MemoryDirective:
    kind: DirectiveKind
    payload: str
    span: Tuple[int, int]


@dataclass
class DirectiveResult:
    visible_text: str
    applied_actions: List[str] = field(default_factory=list)
    directives: List[MemoryDirective] = field(default_factory=list)


def _scan(pattern: re.Pattern, kind: DirectiveKind, text: str) -> List[MemoryDirective]:
    return [
        MemoryDirective(kind=kind, payload=match.group(1).strip(), span=match.span())
        for match in pattern.finditer(text)
    ]


def parse_directives(raw_text: str) -> List[MemoryDirective]:
    """
    All REMEMBER directives in text order, followed by all FORGET directives.

    The two kinds are scanned in separate passes, so a FORGET written before
    a REMEMBER in the same reply is still applied after it.
    """
    return _scan(REMEMBER_PATTERN, DirectiveKind.REMEMBER, raw_text) + _scan(
        FORGET_PATTERN, DirectiveKind.FORGET, raw_text
    )


def strip_directives(raw_text: str) -> str:
    """Remove directive spans, collapse 3+ newlines to 2 and trim."""
    text = REMEMBER_PATTERN.sub("", raw_text)
    text = FORGET_PATTERN.sub("", text)
    return _EXCESS_NEWLINES.sub("\n\n", text).strip()


class DirectiveStreamFilter:
    """
    Removes directive spans from streamed text as it arrives.

    Text from an opening bracket onward is held back until it either
    completes a directive (dropped) or can no longer start one (released).
    The result matches ``strip_directives`` apart from whitespace cleanup.
    """

    TAGS = ("[REMEMBER:", "[FORGET:")

    def __init__(self):
        self._pending = ""

    def _could_be_tag(self, text: str) -> bool:
        head = text.upper()
        return any(head[: len(tag)] == tag[: len(head)] for tag in self.TAGS)

    def feed(self, fragment: str) -> str:
        """Consume a fragment and return the text that is safe to show."""
        self._pending += fragment
        visible = []
        while self._pending:
            start = self._pending.find("[")
            if start == -1:
                visible.append(self._pending)
                self._pending = ""
                break

            visible.append(self._pending[:start])
            self._pending = self._pending[start:]

            if not self._could_be_tag(self._pending):
                visible.append("[")
                self._pending = self._pending[1:]
                continue

            end = self._pending.find("]")
            if end == -1:
                break

            span = self._pending[: end + 1]
            if not (REMEMBER_PATTERN.fullmatch(span) or FORGET_PATTERN.fullmatch(span)):
                visible.append(span)
            self._pending = self._pending[end + 1:]

        return "".join(visible)

    def flush(self) -> str:
        """Release anything still held once the stream has ended."""
        rest, self._pending = self._pending, ""
        return rest


def extract_user_name(item: str) -> Optional[str]:
    """Return the user's name if ``item`` states it."""
    for pattern in NAME_PATTERNS:
        match = pattern.search(item)
        if match:
            return match.group(1)
    return None


def _propagate_user_name(profile_store, item: str) -> None:
    name = extract_user_name(item)
    if not name or profile_store is None:
        return
    try:
        update_user_name(profile_store, name)
    except Exception as e:
        logger.warning("Failed to update profile user_name", user_name=name, error=str(e))


def apply_directives(
    raw_text: str, store: KnowledgeStore, profile_store=None
) -> DirectiveResult:
    """
    Apply every directive in ``raw_text`` to ``store`` and return the cleaned text.

    Args:
        raw_text: Complete model reply
        store: Knowledge store to mutate
        profile_store: Optional profile store that receives detected user
            names; failures there are logged and never undo knowledge updates

    Returns:
        DirectiveResult with the visible text and a human-readable audit trail
    """
    directives = parse_directives(raw_text)
    actions = []

    for directive in directives:
        if directive.kind is DirectiveKind.REMEMBER:
            if store.add(directive.payload):
                actions.append(f"Remembered: {directive.payload}")
            _propagate_user_name(profile_store, directive.payload)
        else:
            if store.remove(directive.payload):
                actions.append(f"Forgot: {directive.payload}")

    return DirectiveResult(
        visible_text=strip_directives(raw_text),
        applied_actions=actions,
        directives=directives,
    )
