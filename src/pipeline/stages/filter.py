"""
Detection filter stage.

Resolves class labels, applies the confidence threshold and the active
class policy, and scales surviving boxes to the rendered frame.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import cv2

from models.detection import AcceptedDetection, BoundingBox, DetectionCandidate
from models.policy import PolicyState

# Candidates must score strictly above this to be kept.
CONFIDENCE_THRESHOLD = 0.2


class DetectionFilter:
    """
    Pipeline stage turning raw candidates into accepted detections.

    The policy is read once per candidate above the threshold, so a toggle
    changed from the UI applies from the next candidate onwards.

    Example:
        stage = DetectionFilter(engine.class_names, policy_state)
        accepted = stage.apply(candidates, frame_width, frame_height)
    """

    def __init__(
        self,
        class_names: Sequence[str],
        policy: PolicyState,
        nms_threshold: Optional[float] = None,
    ):
        self._class_names = list(class_names)
        self._policy = policy
        self._nms_threshold = nms_threshold

    @property
    def class_names(self) -> List[str]:
        return self._class_names

    def resolve_label(self, class_index: int) -> Optional[str]:
        """Label for a class index, or None when out of range."""
        if 0 <= class_index < len(self._class_names):
            return self._class_names[class_index]
        return None

    def apply(
        self,
        candidates: Sequence[DetectionCandidate],
        frame_width: int,
        frame_height: int,
    ) -> List[AcceptedDetection]:
        accepted: List[AcceptedDetection] = []
        for candidate in candidates:
            if candidate.confidence <= CONFIDENCE_THRESHOLD:
                continue

            label = self.resolve_label(candidate.class_index)
            if label is None:
                logging.debug(
                    f"Dropping candidate with class index {candidate.class_index} "
                    f"(known classes: {len(self._class_names)})"
                )
                continue

            if not self._policy.accepts(label):
                continue

            accepted.append(
                AcceptedDetection(
                    class_index=candidate.class_index,
                    label=label,
                    confidence=candidate.confidence,
                    box=BoundingBox.from_normalized(candidate.box, frame_width, frame_height),
                )
            )

        if self._nms_threshold is not None and len(accepted) > 1:
            accepted = self._suppress(accepted)
        return accepted

    def _suppress(self, detections: List[AcceptedDetection]) -> List[AcceptedDetection]:
        """Non-maximum suppression over the accepted set."""
        boxes = [list(d.box.as_xywh()) for d in detections]
        scores = [float(d.confidence) for d in detections]
        keep = cv2.dnn.NMSBoxes(boxes, scores, CONFIDENCE_THRESHOLD, self._nms_threshold)
        kept = sorted(int(i) for i in (keep.flatten() if hasattr(keep, "flatten") else keep))
        return [detections[i] for i in kept]
