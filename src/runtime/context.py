from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from models.config import Config
from models.policy import PolicyState
from pipeline.controller import PipelineController
from pipeline.sink import FrameChannel


@dataclass
class RuntimeContext:
    """Everything main() wires together for one process."""

    config: Config
    controller: PipelineController
    channel: FrameChannel
    policy: PolicyState
    web_state: Any = None
    config_path: Optional[str] = None
