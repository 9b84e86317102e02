"""Durable knowledge store of remembered user facts."""

import os
import re
import tempfile
import threading
from pathlib import Path
from typing import List, Union

import structlog


logger = structlog.get_logger()


KNOWLEDGE_FILE = "knowledge.md"
BULLET = "- "
_BULLET_PREFIX = re.compile(r"^[-*]\s*")


def normalize_entry(text: str) -> str:
    """Comparison form of an entry: bullet stripped, trimmed, lowercased."""
    return _BULLET_PREFIX.sub("", text.strip()).strip().lower()


def _atomic_write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="w", dir=path.parent, delete=False, suffix=".tmp", encoding="utf-8"
    ) as tmp_file:
        tmp_file.write(content)
        tmp_file.flush()
        os.fsync(tmp_file.fileno())
        tmp_path = tmp_file.name
    os.replace(tmp_path, path)


class FileKnowledgeBackend:
    """Keeps the knowledge text in ``<brain_dir>/knowledge.md``."""

    def __init__(self, brain_dir: Union[str, Path], filename: str = KNOWLEDGE_FILE):
        self.path = Path(brain_dir).expanduser() / filename

    def load(self) -> str:
        if not self.path.exists():
            return ""
        return self.path.read_text(encoding="utf-8")

    def save(self, content: str) -> None:
        _atomic_write_text(self.path, content)


class MemoryKnowledgeBackend:
    """Process-local backend, useful for ephemeral sessions."""

    def __init__(self, content: str = ""):
        self.content = content

    def load(self) -> str:
        return self.content

    def save(self, content: str) -> None:
        self.content = content


class KnowledgeStore:
    """
    Ordered, newline-delimited list of ``- fact`` bullets.

    Any object with ``load() -> str`` and ``save(text)`` can back the store.
    Read-modify-write operations are serialized with a lock, so concurrent
    replies applying directives do not lose each other's updates within one
    process.
    """

    def __init__(self, backend):
        self.backend = backend
        self._lock = threading.RLock()

    def text(self) -> str:
        """Current knowledge text; an unreadable backend reads as empty."""
        try:
            return self.backend.load() or ""
        except (OSError, ValueError) as e:
            logger.error("Failed to load knowledge", error=str(e))
            return ""

    def _load_for_update(self) -> str:
        # Never rewrite a file that could not be read
        return self.backend.load() or ""

    def entries(self) -> List[str]:
        """Stored facts without their bullet prefix."""
        return [
            _BULLET_PREFIX.sub("", line.strip()).strip()
            for line in self.text().split("\n")
            if line.strip()
        ]

    def contains(self, item: str) -> bool:
        target = normalize_entry(item)
        return any(normalize_entry(entry) == target for entry in self.entries())

    def add(self, item: str) -> bool:
        """Append ``item`` as a new bullet unless an equal entry exists."""
        item = item.strip()
        if not item:
            return False

        with self._lock:
            current = self._load_for_update()
            target = item.lower()
            for line in current.split("\n"):
                if line.strip() and normalize_entry(line) == target:
                    logger.debug("Knowledge already present", item=item)
                    return False

            entry = f"{BULLET}{item}"
            updated = f"{current.strip()}\n{entry}" if current.strip() else entry
            self.backend.save(updated)

        logger.info("Remembered knowledge", item=item)
        return True

    def remove(self, keyword: str) -> bool:
        """Drop every entry containing ``keyword``; True when anything was removed."""
        target = keyword.strip().lower()
        if not target:
            return False

        with self._lock:
            lines = self._load_for_update().split("\n")
            kept = [line for line in lines if target not in normalize_entry(line)]
            removed = len(kept) < len(lines)
            if removed:
                self.backend.save("\n".join(kept).strip())

        if removed:
            logger.info("Forgot knowledge", keyword=keyword.strip())
        return removed

    def clear(self) -> None:
        with self._lock:
            self.backend.save("")
        logger.info("Cleared knowledge")
