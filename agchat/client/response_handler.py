"""
Streaming response handling.

Turns the raw body of a streaming chat-completions response into text on
the terminal and returns the full reply for the history file.

Learning Points:
- Layered parsing: bytes -> SSE frames (event_decoder) -> deltas (models)
- Reasoning models stream "reasoning_content" before the answer, so the
  handler tracks a Thinking -> Answering mode switch
- The busy indicator runs on another thread; it is joined before the first
  character goes to stdout so the two streams never interleave
"""

import enum
import logging
import sys
import time
from typing import Iterable, List, Optional, TextIO

from .config import ChatConfig
from .event_decoder import TerminalFrame, iter_frames
from .models import Delta, parse_delta
from .progress_indicator import ProgressIndicator

logger = logging.getLogger(__name__)

ANSWER_MARKER = "\nanswer:\n\n"


class Mode(enum.Enum):
    THINKING = "thinking"
    ANSWERING = "answering"


class ResponseHandler:
    """Renders a streamed reply and accumulates its text."""

    def __init__(self, config: ChatConfig, out: Optional[TextIO] = None):
        self.config = config
        self.out = out
        self.skipped_frames = 0

    @property
    def _out(self) -> TextIO:
        return self.out if self.out is not None else sys.stdout

    def process_stream(self, chunks: Iterable[bytes],
                       indicator: Optional[ProgressIndicator] = None) -> str:
        """Consume a byte-chunk stream and return the accumulated reply.

        Args:
            chunks: Raw body chunks as they arrive from the network
            indicator: Running busy indicator, or None when not on a terminal

        Returns:
            Reasoning text followed by answer text, in arrival order. Empty
            if the stream ended before any delta.

        Raises:
            Whatever the chunk iterable raises on a read error, or the
            indicator's own failure. Text already written stays written.
        """
        first_byte_seen = False
        mode = Mode.THINKING
        accumulated: List[str] = []
        self.skipped_frames = 0

        try:
            for frame in iter_frames(chunks):
                if isinstance(frame, TerminalFrame):
                    break

                delta = parse_delta(frame.payload)
                if delta is None:
                    self.skipped_frames += 1
                    continue

                if not first_byte_seen:
                    first_byte_seen = True
                    self._retire(indicator)
                    indicator = None
                    self._write(f"{self.config.model}🤖:\n")

                mode = self._render_delta(delta, mode, accumulated)
        except BaseException:
            # The read failed or was interrupted: clean stderr, keep the first error
            try:
                self._retire(indicator)
            except Exception as e:
                logger.debug(f"Indicator failed while unwinding: {e!r}")
            raise

        # Nothing arrived: the indicator is still up
        self._retire(indicator)

        result = "".join(accumulated)
        logger.debug(
            f"Stream finished: {len(result)} chars, mode={mode.value}, "
            f"skipped {self.skipped_frames} frame(s)"
        )
        return result

    def _render_delta(self, delta: Delta, mode: Mode, accumulated: List[str]) -> Mode:
        if delta.reasoning_fragment:
            self._type_out(delta.reasoning_fragment, accumulated)
            self._write("\n\n")

        if delta.answer_fragment:
            if self.config.is_reasoning_model and mode is Mode.THINKING:
                mode = Mode.ANSWERING
                self._write(ANSWER_MARKER)
            self._type_out(delta.answer_fragment, accumulated)

        return mode

    def _type_out(self, text: str, accumulated: List[str]) -> None:
        """Write text one character at a time with a typing delay."""
        for ch in text:
            self._write(ch)
            accumulated.append(ch)
            if self.config.char_delay > 0:
                time.sleep(self.config.char_delay)

    def _write(self, text: str) -> None:
        out = self._out
        out.write(text)
        out.flush()

    @staticmethod
    def _retire(indicator: Optional[ProgressIndicator]) -> None:
        if indicator is not None:
            indicator.stop()
