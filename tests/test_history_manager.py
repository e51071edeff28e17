"""Tests for history files and the HistoryManager."""

import json
import re

from agchat.client.config import ChatConfig, MemoryAction
from agchat.client.history_manager import (
    HistoryManager,
    current_history_path,
    delete_history,
    history_dir,
    list_histories,
    load_history,
    new_history_path,
    save_history,
)
from agchat.client.models import ChatMessage


def _write(path, messages):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(messages))


class TestHistoryFiles:

    def test_default_directory(self, home):
        assert history_dir() == home / ".config" / "deepseek" / "histories"

    def test_new_path_is_timestamped(self, tmp_path):
        assert re.fullmatch(r"\d{14}\.json", new_history_path(tmp_path).name)

    def test_list_sorted_and_creates_directory(self, tmp_path):
        directory = tmp_path / "histories"
        assert list_histories(directory) == []
        for name in ["20240102000000.json", "20240101000000.json"]:
            _write(directory / name, [])
        assert [p.name for p in list_histories(directory)] == [
            "20240101000000.json",
            "20240102000000.json",
        ]

    def test_current_is_newest(self, tmp_path):
        _write(tmp_path / "20240101000000.json", [])
        _write(tmp_path / "20250101000000.json", [])
        assert current_history_path(tmp_path).name == "20250101000000.json"

    def test_current_without_files_is_new_path(self, tmp_path):
        path = current_history_path(tmp_path)
        assert not path.exists()
        assert path.parent == tmp_path

    def test_load_missing_creates_empty_file(self, tmp_path):
        path = tmp_path / "20240101000000.json"
        assert load_history(path) == []
        assert json.loads(path.read_text()) == []

    def test_load_corrupt_file(self, tmp_path):
        path = tmp_path / "20240101000000.json"
        path.write_text("{not json")
        assert load_history(path) == []

    def test_load_tolerates_missing_optional_fields(self, tmp_path):
        path = tmp_path / "20240101000000.json"
        _write(path, [{"role": "user", "content": "hi"}])
        assert load_history(path) == [ChatMessage(role="user", content="hi")]

    def test_save_writes_pretty_json(self, tmp_path):
        path = save_history([ChatMessage(role="user", content="你好")], tmp_path)
        text = path.read_text(encoding="utf-8")
        assert "你好" in text
        assert text.startswith("[\n  {")
        assert json.loads(text)[0]["reasoning_content"] is None

    def test_delete(self, tmp_path):
        path = save_history([], tmp_path)
        delete_history(path)
        assert not path.exists()


class TestHistoryManager:

    def test_no_memory_loads_and_saves_nothing(self, tmp_path):
        manager = HistoryManager(ChatConfig(memory=False), directory=tmp_path)
        manager.load()
        manager.add_message("user", "hi")
        assert manager.persist() is None
        assert list(tmp_path.iterdir()) == []

    def test_new_conversation_starts_empty(self, tmp_path):
        _write(tmp_path / "20240101000000.json", [{"role": "user", "content": "old"}])
        manager = HistoryManager(ChatConfig(memory=True, mem_action=MemoryAction.NEW), directory=tmp_path)
        manager.load()
        assert manager.get_history() == []

        manager.add_message("user", "fresh")
        saved = manager.persist()
        assert (tmp_path / "20240101000000.json").exists()
        assert json.loads(saved.read_text())[0]["content"] == "fresh"

    def test_continue_replaces_previous_file(self, tmp_path):
        old = tmp_path / "20240101000000.json"
        _write(old, [{"role": "user", "content": "q1"}, {"role": "assistant", "content": "a1"}])
        manager = HistoryManager(ChatConfig(memory=True), directory=tmp_path)
        manager.load()
        assert len(manager.get_history()) == 2

        manager.add_message("user", "q2")
        manager.add_message("assistant", "a2")
        saved = manager.persist()

        assert not old.exists()
        assert [m["content"] for m in json.loads(saved.read_text())] == ["q1", "a1", "q2", "a2"]
        assert list_histories(tmp_path) == [saved]

    def test_get_history_returns_copy(self, tmp_path):
        manager = HistoryManager(ChatConfig(), directory=tmp_path)
        manager.add_message("user", "hi")
        manager.get_history().clear()
        assert len(manager.conversation_history) == 1

    def test_clear_history(self, tmp_path, capsys):
        manager = HistoryManager(ChatConfig(memory=True), directory=tmp_path)
        manager.add_message("user", "hi")
        manager.current_path = tmp_path / "20240101000000.json"
        manager.clear_history()
        assert manager.get_history() == []
        assert manager.current_path is None
        assert "cleared" in capsys.readouterr().out
