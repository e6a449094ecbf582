from __future__ import annotations

import time
from typing import Any, Iterable, Optional

import cv2
import numpy as np


class VideoService:
    @staticmethod
    def encode_jpeg(frame: np.ndarray, quality: int = 80) -> bytes:
        """Convert an annotated BGR frame to a displayable JPEG."""
        ok, buf = cv2.imencode(".jpg", frame, [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)])
        if not ok:
            raise RuntimeError("Failed to encode JPEG")
        return buf.tobytes()

    @staticmethod
    def snapshot_jpeg(web_state: Any) -> Optional[bytes]:
        frame = web_state.get_frame()
        if frame is None:
            return None
        return VideoService.encode_jpeg(frame)

    @staticmethod
    def mjpeg_stream(web_state: Any, fps: int = 15) -> Iterable[bytes]:
        """
        Yield MJPEG multipart chunks from the latest presented frame.

        Frames come from the shared state (populated by the presenter), so
        the stream never touches the video file or the model.
        """
        fps = max(1, min(30, int(fps)))
        delay = 1.0 / fps

        while True:
            frame = web_state.get_frame()
            if frame is None:
                time.sleep(0.1)
                continue
            ok, buf = cv2.imencode(".jpg", frame)
            if not ok:
                time.sleep(delay)
                continue
            yield b"--frame\r\nContent-Type: image/jpeg\r\n\r\n" + buf.tobytes() + b"\r\n"
            time.sleep(delay)
