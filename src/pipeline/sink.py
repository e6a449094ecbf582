"""
Presentation hand-off.

The frame loop never touches the display directly. It hands each finished
frame to a PresentationSink; FrameChannel is the bounded queue that carries
frames to whichever thread owns the display.
"""

from __future__ import annotations

import logging
import queue
import time
from typing import Callable, Optional, Protocol

from models.frame import RenderedFrame


class PresentationSink(Protocol):
    def present(self, frame: RenderedFrame) -> None:
        ...


class CallbackSink(PresentationSink):
    """Calls a function with each frame, synchronously on the worker thread."""

    def __init__(self, callback: Callable[[RenderedFrame], None]):
        self._callback = callback

    def present(self, frame: RenderedFrame) -> None:
        self._callback(frame)


class FrameChannel(PresentationSink):
    """
    Bounded single-consumer channel between the worker and the display.

    present() blocks while the channel is full, so the frame loop runs at
    most `maxsize` frames ahead of the consumer. With put_timeout set, a
    frame that cannot be queued in time is dropped instead.

    Frames are tagged with the session that rendered them. Once
    set_session() names a new session, frames from any other session are
    discarded on the way in and on the way out, so a worker that outlived
    a forced release cannot show its last frame in the next run.
    """

    def __init__(self, maxsize: int = 1, put_timeout: Optional[float] = None):
        if maxsize <= 0:
            raise ValueError("maxsize must be positive")
        self._queue: "queue.Queue[RenderedFrame]" = queue.Queue(maxsize=maxsize)
        self._put_timeout = put_timeout
        self._session_id: Optional[int] = None
        self.dropped = 0
        self.stale = 0

    @property
    def maxsize(self) -> int:
        return self._queue.maxsize

    @property
    def session_id(self) -> Optional[int]:
        return self._session_id

    def set_session(self, session_id: Optional[int]) -> int:
        """Accept frames from `session_id` only (None: from no session) and drop queued ones."""
        self._session_id = session_id
        return self.drain()

    def is_current(self, frame: RenderedFrame) -> bool:
        return frame.session_id is None or frame.session_id == self._session_id

    def present(self, frame: RenderedFrame) -> None:
        if not self.is_current(frame):
            self.stale += 1
            logging.debug(f"Discarding frame {frame.frame_index} from ended session {frame.session_id}")
            return
        try:
            self._queue.put(frame, block=True, timeout=self._put_timeout)
        except queue.Full:
            self.dropped += 1
            logging.warning(
                f"Display did not accept frame {frame.frame_index} within "
                f"{self._put_timeout}s, dropping (dropped={self.dropped})"
            )

    def get(self, timeout: Optional[float] = None) -> Optional[RenderedFrame]:
        """Take the next frame of the current session, or None if none arrives within timeout."""
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            try:
                frame = self._queue.get(block=True, timeout=remaining)
            except queue.Empty:
                return None
            if self.is_current(frame):
                return frame
            self.stale += 1

    def drain(self) -> int:
        """Discard queued frames; returns how many were dropped."""
        drained = 0
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                return drained
            drained += 1

    def qsize(self) -> int:
        return self._queue.qsize()
