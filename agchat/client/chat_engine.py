"""
Core chat functionality: one request/response cycle per call.

Learning Points:
- Dependency injection: the engine receives its collaborators, which keeps
  it testable with fakes
- The busy indicator starts before the request goes out and is always
  stopped, whether the stream succeeds, the API rejects the request, or the
  connection drops
"""

import logging
import sys
from typing import Callable, Optional

from .config import ChatConfig
from .connection_manager import ConnectionManager
from .history_manager import HistoryManager
from .models import ChatPayload
from .progress_indicator import ProgressIndicator
from .response_handler import ResponseHandler

logger = logging.getLogger(__name__)


class ChatEngine:
    """Sends a message with the conversation so far and streams the reply."""

    def __init__(self, config: ChatConfig, connection_manager: ConnectionManager,
                 response_handler: ResponseHandler, history_manager: HistoryManager,
                 is_tty: Optional[Callable[[], bool]] = None):
        self.config = config
        self.connection_manager = connection_manager
        self.response_handler = response_handler
        self.history_manager = history_manager
        self.is_tty = is_tty if is_tty is not None else sys.stdout.isatty

    def build_payload(self) -> ChatPayload:
        return ChatPayload(
            model=self.config.model,
            messages=self.history_manager.get_history(),
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
        )

    def chat(self, message: str) -> str:
        """Send a chat message and return the assistant's reply.

        On failure the user message is dropped from the history again so a
        retry in interactive mode does not send it twice.
        """
        self.history_manager.add_message("user", message)
        payload = self.build_payload()

        indicator = ProgressIndicator(self.config.model).start() if self.is_tty() else None
        try:
            response = self.connection_manager.open_stream(payload)
            chunks = self.connection_manager.iter_chunks(response)
        except BaseException:
            if indicator is not None:
                indicator.stop()
            self.history_manager.conversation_history.pop()
            raise

        try:
            content = self.response_handler.process_stream(chunks, indicator)
        except BaseException:
            self.history_manager.conversation_history.pop()
            raise

        logger.debug(f"Reply: {content[:500]}{'...' if len(content) > 500 else ''}")
        self.history_manager.add_message("assistant", content)
        return content
