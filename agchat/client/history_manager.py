"""
Conversation history management.

Histories are stored one conversation per file under
~/.config/deepseek/histories/, named by the timestamp they were written at.
Every save produces a new file; continuing a conversation replaces the
previous file with a fresh one.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.table import Table

from .config import ChatConfig, MemoryAction, config_dir
from .models import ChatMessage

logger = logging.getLogger(__name__)

_messages_adapter = TypeAdapter(List[ChatMessage])


def history_dir() -> Path:
    return config_dir() / "histories"


def new_history_path(directory: Optional[Path] = None) -> Path:
    filename = f"{datetime.now().strftime('%Y%m%d%H%M%S')}.json"
    return (directory or history_dir()) / filename


def list_histories(directory: Optional[Path] = None) -> List[Path]:
    """All history files, oldest first (names sort chronologically)."""
    directory = directory or history_dir()
    directory.mkdir(parents=True, exist_ok=True)
    return sorted(p for p in directory.iterdir() if p.is_file())


def current_history_path(directory: Optional[Path] = None) -> Path:
    """Newest history file, or a fresh path when there is none."""
    try:
        files = list_histories(directory)
    except OSError as e:
        logger.debug(f"Cannot list histories: {e}")
        files = []
    return files[-1] if files else new_history_path(directory)


def load_history(path: Path) -> List[ChatMessage]:
    """Read a history file; a missing file is created empty."""
    if not path.exists():
        try:
            save_history_to_path(path, [])
        except OSError as e:
            Console(stderr=True).print(f"[red]❌ Failed to create history file: {e}[/red]")
        return []

    try:
        return _messages_adapter.validate_json(path.read_bytes())
    except (OSError, ValidationError) as e:
        logger.debug(f"Ignoring unreadable history {path}: {e}")
        return []


def save_history(messages: List[ChatMessage], directory: Optional[Path] = None) -> Path:
    """Save to a new timestamped file and return its path."""
    path = new_history_path(directory)
    save_history_to_path(path, messages)
    return path


def save_history_to_path(path: Path, messages: List[ChatMessage]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    data = [m.model_dump(by_alias=True) for m in messages]
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding='utf-8')


def delete_history(path: Path) -> None:
    path.unlink()


class HistoryManager:
    """Manages conversation history in memory and on disk."""

    def __init__(self, config: ChatConfig, directory: Optional[Path] = None):
        self.config = config
        self.directory = directory
        self.console = Console()
        self.conversation_history: List[ChatMessage] = []
        self.current_path: Optional[Path] = None

    def load(self) -> None:
        """Load prior turns according to the memory mode."""
        self.conversation_history = []
        self.current_path = None
        if not self.config.memory:
            return

        if self.config.mem_action is MemoryAction.CONTINUE:
            self.current_path = current_history_path(self.directory)
            self.conversation_history = load_history(self.current_path)
            logger.debug(f"Loaded {len(self.conversation_history)} message(s) from {self.current_path}")

    def add_message(self, role: str, content: str):
        """Add a message to the conversation history."""
        self.conversation_history.append(ChatMessage(role=role, content=content))

    def persist(self) -> Optional[Path]:
        """Replace the current history file with the full conversation."""
        if not self.config.memory:
            return None

        if self.current_path is not None and self.current_path.exists():
            delete_history(self.current_path)
        self.current_path = save_history(self.conversation_history, self.directory)
        logger.debug(f"Saved {len(self.conversation_history)} message(s) to {self.current_path}")
        return self.current_path

    def clear_history(self) -> None:
        """Start a new conversation; the next save goes to a new file."""
        self.conversation_history = []
        self.current_path = None
        self.console.print("[green]🧹 Conversation history cleared[/green]")

    def show_history(self) -> None:
        """Show conversation history."""
        if not self.conversation_history:
            self.console.print("[dim]📝 No conversation history[/dim]")
            return

        table = Table(title="📝 Conversation History", show_header=True, header_style="bold magenta")
        table.add_column("Turn", style="cyan", no_wrap=True, width=4)
        table.add_column("Role", style="bold", width=10)
        table.add_column("Content", style="white", overflow="fold")

        for i, msg in enumerate(self.conversation_history, 1):
            content = msg.content
            # Truncate long content for display
            if len(content) > 100:
                content = content[:97] + "..."
            table.add_row(str(i), msg.role.title(), content)

        self.console.print(table)

    def get_history(self) -> List[ChatMessage]:
        """Get the current conversation history."""
        return self.conversation_history.copy()
