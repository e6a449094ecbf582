"""
Overlay renderer stage: boxes and labels drawn onto the presentation frame.
"""

from __future__ import annotations

from typing import List, Sequence

import cv2
import numpy as np

from models.detection import AcceptedDetection

# Colors (BGR)
COLOR_BOX = (139, 0, 0)  # Dark blue
COLOR_TEXT = (0, 128, 0)  # Green

FONT = cv2.FONT_HERSHEY_SIMPLEX
FONT_SCALE = 0.5
BOX_THICKNESS = 2
TEXT_THICKNESS = 1
LABEL_OFFSET = 10


class OverlayRenderer:
    """Draws accepted detections in place on an already-resized frame."""

    def __init__(
        self,
        box_color=COLOR_BOX,
        text_color=COLOR_TEXT,
        font_scale: float = FONT_SCALE,
    ):
        self.box_color = box_color
        self.text_color = text_color
        self.font_scale = font_scale

    def render(self, frame: np.ndarray, detections: Sequence[AcceptedDetection]) -> List[str]:
        """
        Draw one rectangle and one label per detection.

        Returns the label strings drawn, in detection order.
        """
        labels: List[str] = []
        for det in detections:
            x1, y1, x2, y2 = det.box.as_xyxy()
            cv2.rectangle(frame, (x1, y1), (x2, y2), self.box_color, BOX_THICKNESS)

            text = det.text
            cv2.putText(
                frame, text, (x1, y1 - LABEL_OFFSET),
                FONT, self.font_scale, self.text_color, TEXT_THICKNESS,
            )
            labels.append(text)
        return labels
