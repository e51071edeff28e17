"""
Busy indicator shown on stderr while waiting for the first response byte.
"""

import itertools
import sys
import threading
from typing import Optional, TextIO

SPINNER_CHARS = ["|", "/", "-", "\\"]
FRAME_INTERVAL = 0.1


class ProgressIndicator:
    """Rotating glyph drawn by a background thread.

    The stop flag is one-way: once stop() has been called the indicator
    never draws again and cannot be restarted. stop() joins the thread, so
    when it returns nothing else will be written to the error stream.
    """

    def __init__(self, model: str, stream: Optional[TextIO] = None,
                 interval: float = FRAME_INTERVAL):
        self.model = model
        self.stream = stream if stream is not None else sys.stderr
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._error: Optional[BaseException] = None

    @property
    def running(self) -> bool:
        return (self._thread is not None and self._thread.is_alive()
                and not self._stop_event.is_set())

    def start(self) -> 'ProgressIndicator':
        if self._stop_event.is_set():
            raise RuntimeError("progress indicator cannot be restarted")
        if self._thread is None:
            self._thread = threading.Thread(
                target=self._run, name="progress-indicator", daemon=True
            )
            self._thread.start()
        return self

    def stop(self) -> None:
        """Signal the thread, wait for it, and re-raise anything it hit."""
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread is not None:
            thread.join()
        if self._error is not None:
            error, self._error = self._error, None
            raise error

    def _run(self) -> None:
        try:
            glyphs = itertools.cycle(SPINNER_CHARS)
            while not self._stop_event.is_set():
                self.stream.write(f"\r{self.model}🤖: {next(glyphs)}")
                self.stream.flush()
                self._stop_event.wait(self.interval)
            self.stream.write("\r" + " " * (len(self.model) + 6) + "\r")
            self.stream.flush()
        except Exception as e:
            self._error = e
