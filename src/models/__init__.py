"""
Typed models for the video detection application.
"""

from .detection import DetectionCandidate, AcceptedDetection, BoundingBox
from .frame import FrameData, RenderedFrame
from .policy import ClassPolicy, PolicyState, policy_accepts, PERSON_LABEL, DEFAULT_ALLOW_LIST
from .config import (
    Config,
    ModelConfig,
    PipelineConfig,
    DetectionConfig,
    WebConfig,
)

__all__ = [
    # Frame
    "FrameData",
    "RenderedFrame",
    # Detection
    "DetectionCandidate",
    "AcceptedDetection",
    "BoundingBox",
    # Policy
    "ClassPolicy",
    "PolicyState",
    "policy_accepts",
    "PERSON_LABEL",
    "DEFAULT_ALLOW_LIST",
    # Config
    "Config",
    "ModelConfig",
    "PipelineConfig",
    "DetectionConfig",
    "WebConfig",
]
