"""Shared fixtures for the chat client tests."""

import json

import pytest


def sse_line(content=None, reasoning=None) -> bytes:
    """One `data:` line carrying a single-choice delta."""
    delta = {}
    if content is not None:
        delta["content"] = content
    if reasoning is not None:
        delta["reasoning_content"] = reasoning
    return f"data: {json.dumps({'choices': [{'delta': delta}]})}\n".encode("utf-8")


DONE = b"data: [DONE]\n"


@pytest.fixture
def home(tmp_path, monkeypatch):
    """Point the config and history locations at a temp directory."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("USERPROFILE", raising=False)
    monkeypatch.delenv("DEEPSEEK_API_KEY", raising=False)
    return tmp_path
