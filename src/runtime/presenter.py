"""
Frame presenter: the consumer side of the frame channel.

Runs on the presentation context (the main thread in the CLI). Each frame
taken from the channel is published to the web state and, optionally,
shown in an OpenCV window.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Optional

import cv2

from models.frame import RenderedFrame
from pipeline.sink import FrameChannel

WINDOW_NAME = "Video AI Detection"


class FramePresenter:
    """
    Pulls rendered frames off a FrameChannel and displays them.

    Example:
        presenter = FramePresenter(channel, web_state=state, display=True)
        presenter.run(stop_event)   # blocks until stop_event is set or 'q'
    """

    def __init__(
        self,
        channel: FrameChannel,
        web_state: Any = None,
        display: bool = False,
        poll_interval: float = 0.2,
    ):
        self._channel = channel
        self._web_state = web_state
        self._display = display
        self._poll_interval = poll_interval
        self.frames_presented = 0
        self.last_frame_ts: Optional[float] = None

    def present_once(self, timeout: Optional[float] = None) -> Optional[RenderedFrame]:
        """
        Take at most one frame from the channel and publish it.

        Returns the frame shown, or None if nothing arrived in time.
        """
        frame = self._channel.get(timeout=timeout if timeout is not None else self._poll_interval)
        if frame is None or not self._channel.is_current(frame):
            return None

        self.frames_presented += 1
        self.last_frame_ts = time.time()

        if self._web_state is not None and hasattr(self._web_state, "set_frame"):
            self._web_state.set_frame(frame.image, session_id=frame.session_id)

        if self._display:
            cv2.imshow(WINDOW_NAME, frame.image)
        return frame

    def run(self, stop_event: threading.Event) -> None:
        """Present frames until stop_event is set (or 'q' in the window)."""
        logging.info(f"Frame presenter started (display={self._display})")
        try:
            while not stop_event.is_set():
                self.present_once()
                if self._display:
                    key = cv2.waitKey(1) & 0xFF
                    if key == ord("q"):
                        logging.info("Display closed by user")
                        stop_event.set()
        finally:
            if self._display:
                cv2.destroyAllWindows()
            logging.info(f"Frame presenter stopped (frames={self.frames_presented})")
