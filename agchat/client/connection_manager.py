"""
Connection management for the DeepSeek chat-completions API.

This module handles HTTP communication with the API including:
- Bearer-token authentication
- Opening a streaming POST and surfacing non-2xx replies as ApiError
- Exposing the raw body as an iterator of byte chunks

Learning Points:
- requests.Session() reuses TCP connections across turns of a conversation
- stream=True returns as soon as headers arrive; the body is read lazily
- iter_content(chunk_size=None) yields data as the server flushes it
"""

import logging
from typing import Iterator

import requests

from .config import ChatConfig
from .models import ChatPayload

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_PATH = "/chat/completions"


class ApiError(Exception):
    """The API answered with a non-success status code."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"API returned HTTP {status_code}: {body}")


class ConnectionManager:
    """Manages HTTP connections to the chat-completions endpoint.

    Uses requests.Session for connection pooling. The session carries the
    Authorization header so individual calls only supply the payload.
    """

    def __init__(self, config: ChatConfig, api_key: str, session: requests.Session = None):
        """Initialize the connection manager.

        Args:
            config: ChatConfig with the base URL
            api_key: Bearer token for the API
            session: Optional pre-built session (tests inject a mock)
        """
        self.config = config

        # ====================================================================
        # HTTP Session Setup
        # ====================================================================
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {api_key}"})

    @property
    def endpoint(self) -> str:
        return f"{self.config.base_url}{CHAT_COMPLETIONS_PATH}"

    def open_stream(self, payload: ChatPayload) -> requests.Response:
        """POST the payload and return the response with its body unread.

        Returns:
            requests.Response: Response with a 2xx status and a pending body

        Raises:
            ApiError: If the server answered with a non-success status
            requests.exceptions.RequestException: On connection failures
        """
        logger.debug(f"POST {self.endpoint} model={payload.model} messages={len(payload.messages)}")

        response = self.session.post(
            self.endpoint,
            json=payload.to_request_json(),
            stream=True,
        )
        logger.debug(f"HTTP {response.status_code}")

        if not response.ok:
            # Error bodies are small JSON documents; read them whole
            body = response.text
            response.close()
            raise ApiError(response.status_code, body)

        return response

    @staticmethod
    def iter_chunks(response: requests.Response) -> Iterator[bytes]:
        """Yield raw body chunks as they arrive.

        Read errors (e.g. ChunkedEncodingError) propagate to the caller.
        """
        try:
            yield from response.iter_content(chunk_size=None)
        finally:
            response.close()

    def close(self) -> None:
        self.session.close()
