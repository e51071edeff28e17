"""Tests for configuration handling."""

import argparse

import pytest

from agchat.client.config import (
    CHAT_MODEL,
    REASONER_MODEL,
    ChatConfig,
    ConfigError,
    MemoryAction,
    config_path,
    read_config,
    resolve_api_key,
    set_config,
)


def _args(**overrides):
    values = dict(base_url=None, version="v3", temperature=1.0, max_tokens=2048,
                  memory=False, action=None, debug=False, no_typing=False)
    values.update(overrides)
    return argparse.Namespace(**values)


class TestChatConfig:

    def test_defaults_from_args(self):
        config = ChatConfig.from_args(_args())
        assert config.base_url == "https://api.deepseek.com"
        assert config.model == CHAT_MODEL
        assert config.mem_action is None
        assert config.char_delay == 0.01

    def test_r1_selects_reasoner(self):
        config = ChatConfig.from_args(_args(version="r1"))
        assert config.model == REASONER_MODEL
        assert config.is_reasoning_model

    def test_unknown_version_falls_back_to_chat(self):
        assert ChatConfig.from_args(_args(version="v9")).model == CHAT_MODEL

    def test_memory_defaults_to_continue(self):
        config = ChatConfig.from_args(_args(memory=True))
        assert config.mem_action is MemoryAction.CONTINUE

    def test_action_ignored_without_memory(self):
        config = ChatConfig.from_args(_args(action="new"))
        assert config.mem_action is None

    def test_new_action_with_memory(self):
        config = ChatConfig.from_args(_args(memory=True, action="new"))
        assert config.mem_action is MemoryAction.NEW

    def test_trailing_slash_stripped(self):
        assert ChatConfig(base_url="http://proxy.local/").base_url == "http://proxy.local"

    def test_no_typing_disables_delay(self):
        assert ChatConfig.from_args(_args(no_typing=True)).char_delay == 0.0


class TestStoredConfig:

    def test_missing_file_creates_directory(self, home):
        assert read_config() is None
        assert (home / ".config" / "deepseek").is_dir()

    def test_set_then_read(self, home):
        path = set_config("  sk-test  ")
        assert path == config_path()
        assert read_config().api_key == "sk-test"

    def test_invalid_yaml(self, home):
        path = config_path()
        path.parent.mkdir(parents=True)
        path.write_text("api_key: [unclosed")
        with pytest.raises(ConfigError):
            read_config()

    def test_missing_api_key(self, home):
        path = config_path()
        path.parent.mkdir(parents=True)
        path.write_text("base_url: http://x\n")
        with pytest.raises(ConfigError):
            read_config()

    def test_blank_key_rejected(self, home):
        with pytest.raises(ConfigError):
            set_config("   ")

    def test_userprofile_used_without_home(self, tmp_path, monkeypatch):
        monkeypatch.delenv("HOME", raising=False)
        monkeypatch.setenv("USERPROFILE", str(tmp_path))
        assert config_path() == tmp_path / ".config" / "deepseek" / "config.yaml"


class TestResolveApiKey:

    def test_env_overrides_file(self, home, monkeypatch):
        set_config("from-file")
        monkeypatch.setenv("DEEPSEEK_API_KEY", "from-env")
        assert resolve_api_key(read_config()) == "from-env"

    def test_file_key(self, home):
        set_config("from-file")
        assert resolve_api_key(read_config()) == "from-file"

    def test_nothing_configured(self, home):
        assert resolve_api_key(None) is None
