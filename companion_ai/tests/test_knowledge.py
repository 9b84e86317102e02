"""Tests for knowledge and profile persistence."""

import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from companion_ai.memory.knowledge import (
    FileKnowledgeBackend,
    KnowledgeStore,
    MemoryKnowledgeBackend,
    normalize_entry,
)
from companion_ai.memory.profile import JsonProfileStore, update_user_name


class BrokenBackend:
    def load(self):
        raise PermissionError("no access")

    def save(self, content):
        raise PermissionError("no access")


class TestKnowledgeStore:
    """Bullet list semantics."""

    def setup_method(self):
        self.store = KnowledgeStore(MemoryKnowledgeBackend())

    def test_add_appends_bullets(self):
        assert self.store.add("likes tea")
        assert self.store.add("plays chess")

        assert self.store.text() == "- likes tea\n- plays chess"
        assert self.store.entries() == ["likes tea", "plays chess"]

    def test_add_dedup_ignores_case_and_whitespace(self):
        self.store.add("Likes Tea")

        assert not self.store.add("  likes tea ")
        assert self.store.contains("LIKES TEA")

    def test_add_empty(self):
        assert not self.store.add("   ")
        assert self.store.text() == ""

    def test_remove_by_substring(self):
        for item in ("likes green tea", "favorite color is green", "plays chess"):
            self.store.add(item)

        assert self.store.remove("GREEN")
        assert self.store.entries() == ["plays chess"]

    def test_remove_nothing(self):
        self.store.add("plays chess")

        assert not self.store.remove("poker")
        assert not self.store.remove("  ")
        assert self.store.entries() == ["plays chess"]

    def test_existing_text_without_bullets(self):
        store = KnowledgeStore(MemoryKnowledgeBackend("* plays chess\n\nlikes tea\n"))

        assert store.entries() == ["plays chess", "likes tea"]
        assert not store.add("likes tea")

    def test_clear(self):
        self.store.add("likes tea")
        self.store.clear()

        assert self.store.text() == ""

    def test_unreadable_backend_reads_empty(self):
        store = KnowledgeStore(BrokenBackend())

        assert store.text() == ""
        assert store.entries() == []

    def test_concurrent_adds_are_not_lost(self):
        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(self.store.add, [f"fact {i}" for i in range(40)]))

        assert len(self.store.entries()) == 40

    @pytest.mark.parametrize(
        "text,expected",
        [("- Likes Tea", "likes tea"), ("*   chess ", "chess"), ("plain", "plain")],
    )
    def test_normalize_entry(self, text, expected):
        assert normalize_entry(text) == expected


class TestFileKnowledgeBackend:
    """Knowledge persisted to brain/knowledge.md."""

    def test_missing_file_reads_empty(self, tmp_path):
        backend = FileKnowledgeBackend(tmp_path / "brain")

        assert backend.load() == ""

    def test_round_trip_across_instances(self, tmp_path):
        brain_dir = tmp_path / "brain"
        KnowledgeStore(FileKnowledgeBackend(brain_dir)).add("likes tea")

        reopened = KnowledgeStore(FileKnowledgeBackend(brain_dir))

        assert (brain_dir / "knowledge.md").read_text(encoding="utf-8") == "- likes tea"
        assert reopened.entries() == ["likes tea"]
        assert list(brain_dir.glob("*.tmp")) == []

    def test_undecodable_file(self, tmp_path):
        """Test that a non-UTF-8 file reads as empty and is never overwritten."""
        brain_dir = tmp_path / "brain"
        brain_dir.mkdir()
        path = brain_dir / "knowledge.md"
        path.write_bytes(b"- likes caf\xe9\n")
        store = KnowledgeStore(FileKnowledgeBackend(brain_dir))

        assert store.text() == ""
        assert store.entries() == []
        with pytest.raises(UnicodeDecodeError):
            store.add("plays chess")
        with pytest.raises(UnicodeDecodeError):
            store.remove("caf")

        assert path.read_bytes() == b"- likes caf\xe9\n"


class TestProfileStore:
    """JSON profile persistence."""

    def test_missing_profile(self, tmp_path):
        store = JsonProfileStore(tmp_path / "config.json")

        assert store.load() == {}
        assert store.user_name() == ""

    def test_update_preserves_other_keys(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"persona_name": "Joshua", "hotkey": "F9"}), encoding="utf-8")
        store = JsonProfileStore(path)

        assert update_user_name(store, "David")
        assert not update_user_name(store, "David")

        assert json.loads(path.read_text(encoding="utf-8")) == {
            "persona_name": "Joshua",
            "hotkey": "F9",
            "user_name": "David",
        }
        assert store.user_name() == "David"

    def test_corrupt_profile_user_name(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")

        assert JsonProfileStore(path).user_name() == ""
