"""
Frame models: decoded frames from a source and annotated frames for display.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .detection import AcceptedDetection


@dataclass
class FrameData:
    """
    Metadata and payload for a decoded video frame.

    Attributes:
        frame: The raw frame data as a numpy array (BGR format).
        width: Frame width in pixels.
        height: Frame height in pixels.
        timestamp: Unix timestamp when the frame was decoded.
        frame_index: 1-based frame number in decoding order.
        source: Identifier of the video the frame came from.
    """
    frame: np.ndarray
    width: int
    height: int
    timestamp: float
    frame_index: int = 0
    source: Optional[str] = None

    @classmethod
    def from_numpy(
        cls,
        frame: np.ndarray,
        timestamp: float,
        frame_index: int = 0,
        source: Optional[str] = None,
    ) -> "FrameData":
        """Create FrameData from a numpy array."""
        h, w = frame.shape[:2]
        return cls(
            frame=frame,
            width=w,
            height=h,
            timestamp=timestamp,
            frame_index=frame_index,
            source=source,
        )

    @property
    def is_empty(self) -> bool:
        """True when the payload holds no pixels (malformed decode)."""
        return self.frame is None or self.frame.size == 0

    @property
    def size(self) -> Tuple[int, int]:
        """Return (width, height)."""
        return (self.width, self.height)


@dataclass
class RenderedFrame:
    """
    An annotated frame ready to hand to the presentation sink.

    Attributes:
        image: Resized frame with overlays drawn (BGR).
        frame_index: Index of the decoded frame this was rendered from.
        source: Path of the video being processed.
        detections: Detections drawn onto the image.
        labels: Label strings drawn, one per detection.
        session_id: Session that produced the frame; None for untagged frames.
    """
    image: np.ndarray
    frame_index: int
    source: Optional[str] = None
    detections: List[AcceptedDetection] = field(default_factory=list)
    labels: List[str] = field(default_factory=list)
    session_id: Optional[int] = None

    @property
    def size(self) -> Tuple[int, int]:
        h, w = self.image.shape[:2]
        return (w, h)
