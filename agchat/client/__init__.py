"""
Chat client package.

The client is split into focused components: configuration, HTTP
connection, SSE decoding, response rendering, history and UI.
"""

from .chat_client import ChatClient
from .config import ChatConfig
from .cli import main

__all__ = ['ChatClient', 'ChatConfig', 'main']
