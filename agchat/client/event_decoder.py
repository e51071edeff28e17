"""
Server-sent event framing for the streaming chat endpoint.

The body of a streaming response is a sequence of text lines:

    data: {"choices":[{"delta":{"content":"Hi"}}]}

    data: [DONE]

Network reads do not respect line boundaries, so the decoder buffers the
trailing partial line of each chunk and completes it with the next one.
Decoding happens per complete line, which also keeps multi-byte UTF-8
characters that straddle two reads intact.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Union

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
TERMINAL_LINE = "data: [DONE]"
LINE_BREAK = re.compile(rb"\r\n|\r|\n")
MAX_LINE_BYTES = 1024 * 1024


@dataclass(frozen=True)
class TerminalFrame:
    """The `data: [DONE]` sentinel."""


@dataclass(frozen=True)
class DataFrame:
    payload: str


EventFrame = Union[TerminalFrame, DataFrame]


def classify_line(raw: bytes) -> Union[EventFrame, None]:
    """Turn one raw line into a frame, or None for lines we ignore."""
    line = raw.decode('utf-8', errors='replace').strip()
    if line == TERMINAL_LINE:
        return TerminalFrame()
    if line.startswith(DATA_PREFIX):
        return DataFrame(line[len(DATA_PREFIX):].strip())
    return None


class EventFrameDecoder:
    """Incremental line splitter and classifier.

    feed() accepts chunks of any size and returns the frames completed by
    that chunk. Once the terminal frame is seen the decoder is closed and
    ignores everything after it.

    Lines end at CRLF, CR or LF. A line longer than max_line_bytes is
    dropped whole, so a body that never breaks cannot grow the buffer
    without bound.
    """

    def __init__(self, max_line_bytes: int = MAX_LINE_BYTES):
        self.max_line_bytes = max_line_bytes
        self._buffer = b""
        self._discarding = False
        self.closed = False

    def feed(self, chunk: bytes) -> List[EventFrame]:
        if self.closed:
            return []

        *lines, tail = LINE_BREAK.split(self._buffer + chunk)
        if self._discarding:
            if lines:
                # First piece is the end of the oversized line
                lines = lines[1:]
                self._discarding = False
            else:
                tail = b""

        if len(tail) > self.max_line_bytes:
            logger.debug(f"Dropping line longer than {self.max_line_bytes} bytes")
            tail = b""
            self._discarding = True

        self._buffer = tail
        return self._classify(lines)

    def finish(self) -> List[EventFrame]:
        """Flush a final line that arrived without a trailing newline."""
        if self.closed:
            return []
        tail, self._buffer = self._buffer, b""
        if self._discarding:
            tail = b""
        frames = self._classify([tail]) if tail.strip() else []
        self.closed = True
        return frames

    def _classify(self, lines: List[bytes]) -> List[EventFrame]:
        frames: List[EventFrame] = []
        for raw in lines:
            frame = classify_line(raw)
            if frame is None:
                continue
            frames.append(frame)
            if isinstance(frame, TerminalFrame):
                self.closed = True
                self._buffer = b""
                break
        return frames


def iter_frames(chunks: Iterable[bytes]) -> Iterator[EventFrame]:
    """Lazily decode a chunk stream into frames, stopping at the sentinel.

    Exceptions raised by the chunk iterable (read errors) propagate.
    """
    decoder = EventFrameDecoder()
    for chunk in chunks:
        if not chunk:
            continue
        yield from decoder.feed(chunk)
        if decoder.closed:
            return
    yield from decoder.finish()
