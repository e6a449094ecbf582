"""
Detection models: raw model output rows and filtered, pixel-space detections.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass(frozen=True)
class DetectionCandidate:
    """
    One raw row emitted by the inference stage before filtering.

    Attributes:
        class_index: Index into the class-name list.
        confidence: Class score in [0, 1].
        box: (center_x, center_y, width, height), normalized to [0, 1]
            relative to the image the model was given.
    """
    class_index: int
    confidence: float
    box: Tuple[float, float, float, float]

    @property
    def center(self) -> Tuple[float, float]:
        return (self.box[0], self.box[1])

    @classmethod
    def from_output_row(cls, row: np.ndarray) -> "DetectionCandidate":
        """
        Adapter: Convert a YOLO output row [cx, cy, w, h, objectness, scores...].

        The class is the argmax over the per-class scores, and its score is
        the confidence.
        """
        scores = row[5:]
        class_index = int(np.argmax(scores))
        return cls(
            class_index=class_index,
            confidence=float(scores[class_index]),
            box=(float(row[0]), float(row[1]), float(row[2]), float(row[3])),
        )


@dataclass(frozen=True)
class BoundingBox:
    """
    A bounding box in pixel coordinates, (x, y) being the top-left corner.
    """
    x: int
    y: int
    width: int
    height: int

    @property
    def x2(self) -> int:
        return self.x + self.width

    @property
    def y2(self) -> int:
        return self.y + self.height

    def as_xywh(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)

    def as_xyxy(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.x2, self.y2)

    @classmethod
    def from_normalized(
        cls,
        box: Tuple[float, float, float, float],
        frame_width: int,
        frame_height: int,
    ) -> "BoundingBox":
        """Scale a normalized center box to a pixel corner box."""
        center_x = box[0] * frame_width
        center_y = box[1] * frame_height
        width = box[2] * frame_width
        height = box[3] * frame_height
        return cls(
            x=int(center_x - width / 2),
            y=int(center_y - height / 2),
            width=int(width),
            height=int(height),
        )


@dataclass(frozen=True)
class AcceptedDetection:
    """
    A candidate that passed the detection filter.

    Attributes:
        class_index: Index into the class-name list.
        label: Resolved class name.
        confidence: Class score in [0, 1].
        box: Pixel-space box scaled to the rendered frame.
    """
    class_index: int
    label: str
    confidence: float
    box: BoundingBox

    @property
    def percent(self) -> int:
        """Confidence as a whole percentage, rounded half up."""
        return int(self.confidence * 100 + 0.5)

    @property
    def text(self) -> str:
        return f"{self.label} {self.percent}%"
