"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .policy import DEFAULT_ALLOW_LIST


@dataclass
class ModelConfig:
    """Detection model artifacts and OpenCV DNN settings."""
    data_dir: str = "data"
    config_file: str = "yolov3-tiny.cfg"
    weights_file: str = "yolov3-tiny.weights"
    names_file: str = "coco.names"
    input_size: List[int] = field(default_factory=lambda: [416, 416])
    backend: str = "opencv"
    target: str = "opencl"

    @property
    def config_path(self) -> str:
        return os.path.join(self.data_dir, self.config_file)

    @property
    def weights_path(self) -> str:
        return os.path.join(self.data_dir, self.weights_file)

    @property
    def names_path(self) -> str:
        return os.path.join(self.data_dir, self.names_file)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ModelConfig":
        """Adapter: Create from config dictionary."""
        return cls(
            data_dir=d.get("data_dir", "data"),
            config_file=d.get("config_file", "yolov3-tiny.cfg"),
            weights_file=d.get("weights_file", "yolov3-tiny.weights"),
            names_file=d.get("names_file", "coco.names"),
            input_size=list(d.get("input_size", [416, 416])),
            backend=d.get("backend", "opencv"),
            target=d.get("target", "opencl"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data_dir": self.data_dir,
            "config_file": self.config_file,
            "weights_file": self.weights_file,
            "names_file": self.names_file,
            "input_size": self.input_size,
            "backend": self.backend,
            "target": self.target,
        }


@dataclass
class PipelineConfig:
    """
    Frame loop and controller settings.

    Attributes:
        frame_skip: Run inference on every Nth decoded frame (N > 0).
        presentation_size: Size frames are resized to for display, [width, height].
        frame_delay_ms: Pause after each hand-off to the display.
        stop_timeout: Seconds stop() waits for the worker before forcing release.
        channel_size: Capacity of the frame channel to the display.
        put_timeout: Seconds a hand-off may block before the frame is dropped.
            None blocks until the display accepts it.
    """
    frame_skip: int = 3
    presentation_size: List[int] = field(default_factory=lambda: [900, 620])
    frame_delay_ms: int = 15
    stop_timeout: float = 2.0
    channel_size: int = 1
    put_timeout: Optional[float] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PipelineConfig":
        return cls(
            frame_skip=d.get("frame_skip", 3),
            presentation_size=list(d.get("presentation_size", [900, 620])),
            frame_delay_ms=d.get("frame_delay_ms", 15),
            stop_timeout=d.get("stop_timeout", 2.0),
            channel_size=d.get("channel_size", 1),
            put_timeout=d.get("put_timeout"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "frame_skip": self.frame_skip,
            "presentation_size": self.presentation_size,
            "frame_delay_ms": self.frame_delay_ms,
            "stop_timeout": self.stop_timeout,
            "channel_size": self.channel_size,
        }
        if self.put_timeout is not None:
            d["put_timeout"] = self.put_timeout
        return d


@dataclass
class DetectionConfig:
    """Class policy and post-filter settings."""
    policy: str = "humans_only"
    allow_list: List[str] = field(default_factory=lambda: list(DEFAULT_ALLOW_LIST))
    lock_policy: bool = False
    nms_threshold: Optional[float] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectionConfig":
        return cls(
            policy=d.get("policy", "humans_only"),
            allow_list=list(d.get("allow_list") or DEFAULT_ALLOW_LIST),
            lock_policy=d.get("lock_policy", False),
            nms_threshold=d.get("nms_threshold"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "policy": self.policy,
            "allow_list": self.allow_list,
            "lock_policy": self.lock_policy,
        }
        if self.nms_threshold is not None:
            d["nms_threshold"] = self.nms_threshold
        return d


@dataclass
class WebConfig:
    """Web adapter configuration."""
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 5000

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WebConfig":
        return cls(
            enabled=d.get("enabled", True),
            host=d.get("host", "0.0.0.0"),
            port=d.get("port", 5000),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "host": self.host, "port": self.port}


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    model: ModelConfig = field(default_factory=ModelConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    web: WebConfig = field(default_factory=WebConfig)
    log_path: str = "logs/video_detect.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            model=ModelConfig.from_dict(d.get("model", {}) or {}),
            pipeline=PipelineConfig.from_dict(d.get("pipeline", {}) or {}),
            detection=DetectionConfig.from_dict(d.get("detection", {}) or {}),
            web=WebConfig.from_dict(d.get("web", {}) or {}),
            log_path=d.get("log_path", "logs/video_detect.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for saving or logging)."""
        return {
            "model": self.model.to_dict(),
            "pipeline": self.pipeline.to_dict(),
            "detection": self.detection.to_dict(),
            "web": self.web.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
