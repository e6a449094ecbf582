"""
Pipeline engine: the frame loop for one video session.

Runs on the session's worker thread. Each iteration reads a frame, drops
it unless the decimator forwards it, then resizes, infers, filters,
renders and hands the result to the presentation sink. Every exit path
(end of stream, error, cancellation) ends in session.release().
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import cv2

from models.config import PipelineConfig
from models.frame import FrameData, RenderedFrame
from .decimator import FrameDecimator
from .notifications import Notification, Notifier, dispatch
from .session import RunState, VideoSession
from .sink import PresentationSink
from .stages.annotate import OverlayRenderer
from .stages.filter import DetectionFilter


@dataclass
class PipelineStats:
    """Runtime statistics for one session."""
    frames_read: int = 0
    frames_processed: int = 0
    detections: int = 0
    start_time: float = field(default_factory=time.time)
    end_time: Optional[float] = None

    @property
    def elapsed(self) -> float:
        return (self.end_time or time.time()) - self.start_time

    def to_dict(self) -> dict:
        return {
            "frames_read": self.frames_read,
            "frames_processed": self.frames_processed,
            "detections": self.detections,
            "elapsed_seconds": round(self.elapsed, 3),
        }


class PipelineEngine:
    """
    Frame loop for a single VideoSession.

    Cancellation is cooperative: session.cancel_event is checked at the top
    of each iteration only. An inference call or a display hand-off already
    in progress runs to completion before the stop is noticed.

    Example:
        engine = PipelineEngine(session, config, detection_filter, renderer, sink)
        threading.Thread(target=engine.run, daemon=True).start()
    """

    def __init__(
        self,
        session: VideoSession,
        config: PipelineConfig,
        detection_filter: DetectionFilter,
        renderer: OverlayRenderer,
        sink: PresentationSink,
        notifier: Optional[Notifier] = None,
    ):
        self.session = session
        self.config = config
        self._filter = detection_filter
        self._renderer = renderer
        self._sink = sink
        self._notifier = notifier
        self._decimator = FrameDecimator(config.frame_skip)
        self._presentation_size = (int(config.presentation_size[0]), int(config.presentation_size[1]))
        self._frame_delay = max(0, config.frame_delay_ms) / 1000.0
        self._callbacks: List[Callable[[RenderedFrame], None]] = []
        self.stats = PipelineStats()

    def add_callback(self, callback: Callable[[RenderedFrame], None]) -> None:
        """
        Add a callback to be called after each frame is handed off.

        Args:
            callback: Function taking the RenderedFrame.
        """
        self._callbacks.append(callback)

    def run(self) -> None:
        """
        Run the frame loop until end of stream, error, or cancellation.

        Never raises; failures are reported through the notifier.
        """
        session = self.session
        self.stats = PipelineStats()
        logging.info(
            f"Pipeline started: session={session.session_id}, source={session.source_path}, "
            f"frame_skip={self._decimator.frame_skip}"
        )

        try:
            while not session.cancelled:
                frame_data = session.source.read()

                if frame_data is None or frame_data.is_empty:
                    if session.cancelled:
                        break
                    self._complete()
                    break

                self.stats.frames_read += 1
                if not self._decimator.accept():
                    continue

                rendered = self._process_frame(frame_data)
                if session.cancelled:
                    break
                self._sink.present(rendered)

                for callback in self._callbacks:
                    try:
                        callback(rendered)
                    except Exception as e:
                        logging.warning(f"Callback error: {e}")

                if self._frame_delay:
                    session.cancel_event.wait(self._frame_delay)

        except Exception as e:
            if session.cancelled:
                logging.info(f"Session {session.session_id} ended during cancellation: {e}")
            else:
                logging.exception(f"Pipeline error in session {session.session_id}")
                session.transition((RunState.RUNNING,), RunState.FAILED)
                dispatch(self._notifier, Notification.failed(e, session.source_path))
        finally:
            self._cleanup()

    def _process_frame(self, frame_data: FrameData) -> RenderedFrame:
        """Resize, detect, filter and draw one decimated frame."""
        self.stats.frames_processed += 1
        presented = cv2.resize(frame_data.frame, self._presentation_size)
        height, width = presented.shape[:2]

        candidates = self.session.engine.infer(presented)
        accepted = self._filter.apply(candidates, width, height)
        labels = self._renderer.render(presented, accepted)
        self.stats.detections += len(accepted)

        logging.debug(
            f"Frame {frame_data.frame_index}: candidates={len(candidates)}, accepted={len(accepted)}"
        )

        return RenderedFrame(
            image=presented,
            frame_index=frame_data.frame_index,
            source=self.session.source_path,
            detections=accepted,
            labels=labels,
            session_id=self.session.session_id,
        )

    def _complete(self) -> None:
        """Natural end of stream."""
        if self.session.transition((RunState.RUNNING,), RunState.COMPLETED):
            dispatch(self._notifier, Notification.completed(self.session.source_path))

    def _cleanup(self) -> None:
        self.stats.end_time = time.time()
        self.session.release()
        logging.info(
            f"Pipeline stopped: session={self.session.session_id}, "
            f"frames_read={self.stats.frames_read}, processed={self.stats.frames_processed}, "
            f"detections={self.stats.detections}, elapsed={self.stats.elapsed:.1f}s"
        )
