"""
Wire models for the chat-completions API.

Request side: ChatMessage / ChatPayload, serialized as the JSON body.
Response side: StreamingChunk and friends, parsed from each SSE data line
and reduced to a Delta by parse_delta().
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


# ============================================================================
# Request Models
# ============================================================================

class FunctionInfo(BaseModel):
    name: str
    arguments: str


class ToolCall(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    typ: str = Field(alias="type")
    function: FunctionInfo


class ChatMessage(BaseModel):
    """One turn of the conversation, as sent to the API and kept on disk."""

    role: str
    content: str
    reasoning_content: Optional[str] = None
    tool_calls: Optional[List[ToolCall]] = None


class ResponseFormat(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    typ: str = Field(default="text", alias="type")


class ChatPayload(BaseModel):
    """Request body for POST /chat/completions."""

    model: str
    messages: List[ChatMessage]
    frequency_penalty: int = 0
    max_tokens: int = 2048
    presence_penalty: int = 0
    response_format: ResponseFormat = Field(default_factory=ResponseFormat)
    stop: Optional[Any] = None
    stream: bool = True
    stream_options: Optional[Dict[str, Any]] = Field(
        default_factory=lambda: {"include_usage": True}
    )
    temperature: float = 1.0
    top_p: float = 1.0
    tools: Optional[Any] = None
    tool_choice: str = "none"
    logprobs: bool = False
    top_logprobs: Optional[Any] = None

    def to_request_json(self) -> Dict[str, Any]:
        """Plain dict ready for requests' json= argument."""
        return self.model_dump(by_alias=True)


# ============================================================================
# Streaming Response Models
# ============================================================================

class DeltaMessage(BaseModel):
    reasoning_content: Optional[str] = None
    content: Optional[str] = None


class StreamingChoice(BaseModel):
    delta: Optional[DeltaMessage] = None


class StreamingChunk(BaseModel):
    """Payload of one `data: {...}` line."""

    choices: List[StreamingChoice]


@dataclass(frozen=True)
class Delta:
    """Incremental piece of the reply, split into reasoning and answer text."""
    reasoning_fragment: Optional[str] = None
    answer_fragment: Optional[str] = None


def parse_delta(payload: str) -> Optional[Delta]:
    """Parse a data frame payload into a Delta.

    Only the first choice is considered. Malformed payloads, chunks without
    choices (e.g. the trailing usage chunk) and deltas with nothing to render
    all yield None instead of raising.
    """
    try:
        chunk = StreamingChunk.model_validate_json(payload)
    except ValidationError as e:
        logger.debug(f"Skipping malformed frame: {e.error_count()} error(s) in {payload[:80]!r}")
        return None

    if not chunk.choices:
        return None

    delta = chunk.choices[0].delta
    if delta is None:
        return None

    reasoning = delta.reasoning_content or None
    answer = delta.content or None
    if reasoning is None and answer is None:
        return None
    return Delta(reasoning_fragment=reasoning, answer_fragment=answer)
