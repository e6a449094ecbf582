"""
Test doubles shared by the pipeline, controller and web tests.
"""

import threading
import time
from typing import Callable, List, Optional

import numpy as np

from models.config import PipelineConfig
from models.detection import DetectionCandidate
from models.frame import FrameData, RenderedFrame
from observation.base import ObservationConfig, ObservationSource, SourceOpenError

CLASS_NAMES = ["person", "bicycle", "car", "cat", "dog"]


def fast_config(**overrides) -> PipelineConfig:
    """Pipeline config with no inter-frame delay and small frames."""
    values = dict(frame_skip=1, presentation_size=[64, 48], frame_delay_ms=0, stop_timeout=1.0)
    values.update(overrides)
    return PipelineConfig(**values)


class MockVideoSource(ObservationSource):
    """
    Mock source producing uniform frames whose pixel value is the frame index.

    max_frames=None streams forever. Lifecycle calls are appended to `events`
    as "open:<path>" / "close:<path>"; the close entry is written once close
    has finished, after `close_delay`.
    """

    def __init__(
        self,
        path: str = "clip.mp4",
        max_frames: Optional[int] = 10,
        events: Optional[list] = None,
        fail_open: bool = False,
        read_delay: float = 0.0,
        close_delay: float = 0.0,
    ):
        super().__init__(ObservationConfig(source_id=path))
        self.path = path
        self._max_frames = max_frames
        self._fail_open = fail_open
        self._read_delay = read_delay
        self._close_delay = close_delay
        self.closing = threading.Event()
        self.events = events if events is not None else []
        self.close_calls = 0
        self._lock = threading.Lock()

    def open(self) -> None:
        if self._fail_open:
            raise SourceOpenError(f"Failed to open video {self.path}")
        self._is_open = True
        self._frame_index = 0
        self.events.append(f"open:{self.path}")

    def read(self) -> Optional[FrameData]:
        if self._read_delay:
            time.sleep(self._read_delay)
        with self._lock:
            if not self._is_open:
                return None
            if self._max_frames is not None and self._frame_index >= self._max_frames:
                return None
            self._frame_index += 1
            frame = np.full((48, 64, 3), self._frame_index % 256, dtype=np.uint8)
            return FrameData.from_numpy(frame, time.time(), self._frame_index, self.path)

    def close(self) -> None:
        with self._lock:
            self.close_calls += 1
            if self._is_open:
                self.closing.set()
                if self._close_delay:
                    time.sleep(self._close_delay)
                self._is_open = False
                self.events.append(f"close:{self.path}")


class StubEngine:
    """
    Inference stub. `respond(image)` decides the candidates for each call;
    by default nothing is detected.
    """

    def __init__(
        self,
        respond: Optional[Callable[[np.ndarray], List[DetectionCandidate]]] = None,
        class_names: Optional[List[str]] = None,
    ):
        self.class_names = list(class_names or CLASS_NAMES)
        self._respond = respond or (lambda image: [])
        self.calls = 0
        self.closed = False

    def infer(self, image: np.ndarray) -> List[DetectionCandidate]:
        self.calls += 1
        return self._respond(image)

    def close(self) -> None:
        self.closed = True


class RecordingSink:
    """Sink keeping every presented frame; optionally blocks until released."""

    def __init__(self, block: Optional[threading.Event] = None):
        self.frames: List[RenderedFrame] = []
        self.entered = threading.Event()
        self._block = block

    def present(self, frame: RenderedFrame) -> None:
        self.entered.set()
        if self._block is not None:
            self._block.wait()
        self.frames.append(frame)


class RecordingNotifier:
    def __init__(self):
        self.notifications = []

    def __call__(self, notification) -> None:
        self.notifications.append(notification)

    def kinds(self):
        return [n.kind for n in self.notifications]
