"""
Observation layer for video frame sources.

This layer abstracts where frames come from so the processing pipeline
only deals with FrameData objects.
"""

from .base import ObservationSource, ObservationConfig, SourceOpenError
from .opencv_source import (
    VideoFileSource,
    VideoFileSourceConfig,
    is_supported_video,
    SUPPORTED_EXTENSIONS,
)


def create_video_source(path: str) -> VideoFileSource:
    """Factory: build an unopened source for a video file path."""
    return VideoFileSource(VideoFileSourceConfig.for_path(path))


__all__ = [
    "ObservationSource",
    "ObservationConfig",
    "SourceOpenError",
    "VideoFileSource",
    "VideoFileSourceConfig",
    "is_supported_video",
    "SUPPORTED_EXTENSIONS",
    "create_video_source",
]
