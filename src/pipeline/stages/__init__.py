"""
Pipeline stages for the video detection system.

Each stage handles a specific part of the per-frame processing:
- filter: Threshold, class policy and box scaling
- annotate: Frame annotation
"""

from .filter import DetectionFilter, CONFIDENCE_THRESHOLD
from .annotate import OverlayRenderer

__all__ = ["DetectionFilter", "CONFIDENCE_THRESHOLD", "OverlayRenderer"]
