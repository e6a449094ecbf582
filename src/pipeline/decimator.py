"""
Frame decimation: only every Nth decoded frame reaches inference.
"""

from __future__ import annotations


class FrameDecimator:
    """
    Counts decoded frames and forwards those at multiples of frame_skip.

    With frame_skip=3 the 3rd, 6th, 9th... frames are forwarded; a
    frame_skip of 1 forwards every frame.
    """

    def __init__(self, frame_skip: int):
        if isinstance(frame_skip, bool) or not isinstance(frame_skip, int) or frame_skip <= 0:
            raise ValueError(f"frame_skip must be a positive integer, got {frame_skip!r}")
        self.frame_skip = frame_skip
        self._counter = 0

    @property
    def counter(self) -> int:
        """Frames seen since the last reset."""
        return self._counter

    def accept(self) -> bool:
        """Register one decoded frame; True if it should be processed."""
        self._counter += 1
        return self._counter % self.frame_skip == 0

    def reset(self) -> None:
        self._counter = 0
