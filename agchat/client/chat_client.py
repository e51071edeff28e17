"""
Main chat client that wires all components together.
"""

from typing import Optional

import requests

from .chat_engine import ChatEngine
from .config import ChatConfig
from .connection_manager import ConnectionManager
from .history_manager import HistoryManager
from .response_handler import ResponseHandler
from .ui_manager import UIManager


class ChatClient:
    """Chat client for the DeepSeek chat-completions API."""

    def __init__(self, config: ChatConfig, api_key: str,
                 session: Optional[requests.Session] = None,
                 history_manager: Optional[HistoryManager] = None):
        self.config = config

        # Initialize components
        self.connection_manager = ConnectionManager(config, api_key, session=session)
        self.response_handler = ResponseHandler(config)
        self.history_manager = history_manager or HistoryManager(config)
        self.ui_manager = UIManager(config)
        self.chat_engine = ChatEngine(
            config, self.connection_manager, self.response_handler, self.history_manager
        )

        self.history_manager.load()

    def chat(self, message: str) -> str:
        """Send a chat message and get response."""
        return self.chat_engine.chat(message)

    def save_history(self):
        """Persist the conversation when memory mode is on."""
        return self.history_manager.persist()

    def clear_history(self) -> None:
        """Clear conversation history."""
        self.history_manager.clear_history()

    def show_history(self) -> None:
        """Show conversation history."""
        self.history_manager.show_history()

    def close(self) -> None:
        self.connection_manager.close()
