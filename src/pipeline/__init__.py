"""
Pipeline module for the video detection system.

The pipeline orchestrates one run over a video file:
- Frame acquisition and decimation
- Inference, detection filtering and overlay rendering
- Hand-off to the presentation sink
- Session lifecycle (start/stop/replay) and cancellation
"""

from .controller import PipelineController, create_controller_from_config
from .decimator import FrameDecimator
from .engine import PipelineEngine, PipelineStats
from .notifications import Notification, NotificationKind
from .session import RunState, VideoSession, release_session
from .sink import CallbackSink, FrameChannel, PresentationSink
from .stages.annotate import OverlayRenderer
from .stages.filter import DetectionFilter, CONFIDENCE_THRESHOLD

__all__ = [
    "PipelineController",
    "create_controller_from_config",
    "FrameDecimator",
    "PipelineEngine",
    "PipelineStats",
    "Notification",
    "NotificationKind",
    "RunState",
    "VideoSession",
    "release_session",
    "CallbackSink",
    "FrameChannel",
    "PresentationSink",
    "OverlayRenderer",
    "DetectionFilter",
    "CONFIDENCE_THRESHOLD",
]
