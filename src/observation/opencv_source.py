"""
OpenCV-based video file source.

Wraps cv2.VideoCapture for local video files (MP4, AVI, ...). Reads and
releases are serialised so the controller can force-release the capture
from another thread without tearing it down mid-decode.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import cv2

from models.frame import FrameData
from .base import ObservationSource, ObservationConfig, SourceOpenError

SUPPORTED_EXTENSIONS = (".mp4", ".avi", ".mov", ".mkv", ".m4v")


def is_supported_video(path: str) -> bool:
    """Check the container extension against the formats we accept."""
    return os.path.splitext(str(path))[1].lower() in SUPPORTED_EXTENSIONS


@dataclass
class VideoFileSourceConfig(ObservationConfig):
    """
    Configuration for a video file source.

    Attributes:
        path: Path to the local video file.
    """
    path: str = ""

    @classmethod
    def for_path(cls, path: str) -> "VideoFileSourceConfig":
        """Create a config whose source_id is the file name."""
        return cls(source_id=os.path.basename(str(path)) or "video", path=str(path))


class VideoFileSource(ObservationSource):
    """
    Observation source reading frames from a video file.

    Example:
        with VideoFileSource(VideoFileSourceConfig.for_path("clip.mp4")) as source:
            for frame_data in source:
                process(frame_data.frame)
    """

    def __init__(self, config: VideoFileSourceConfig):
        super().__init__(config)
        self._file_config = config
        self._cap: Optional[cv2.VideoCapture] = None
        self._lock = threading.Lock()

    @property
    def path(self) -> str:
        return self._file_config.path

    def open(self) -> None:
        """Open the video file."""
        with self._lock:
            if self._is_open:
                return

            cap = cv2.VideoCapture(self.path)
            if not cap.isOpened():
                cap.release()
                raise SourceOpenError(f"Failed to open video {self.path}")

            self._cap = cap
            self._is_open = True
            self._frame_index = 0

        logging.info(f"VideoFileSource opened: source_id={self.source_id}, path={self.path}")

    def read(self) -> Optional[FrameData]:
        """Read the next frame, or None at end of stream."""
        with self._lock:
            if not self._is_open or self._cap is None:
                return None

            ret, frame = self._cap.read()
            if not ret or frame is None or frame.size == 0:
                logging.info(f"End of video reached: source_id={self.source_id}, frames={self._frame_index}")
                return None

            self._frame_index += 1
            return FrameData(
                frame=frame,
                width=frame.shape[1],
                height=frame.shape[0],
                timestamp=time.time(),
                frame_index=self._frame_index,
                source=self.path,
            )

    def close(self) -> None:
        """Release the capture. Safe to call repeatedly."""
        with self._lock:
            if self._cap is None and not self._is_open:
                return
            if self._cap is not None:
                self._cap.release()
                self._cap = None
            self._is_open = False
        logging.info(f"VideoFileSource closed: source_id={self.source_id}")

    def get_video_info(self) -> Dict[str, Any]:
        """Get information about the open video."""
        with self._lock:
            if self._cap is None or not self._cap.isOpened():
                return {}
            return {
                "width": int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
                "height": int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
                "fps": self._cap.get(cv2.CAP_PROP_FPS),
                "frame_count": int(self._cap.get(cv2.CAP_PROP_FRAME_COUNT)),
            }
