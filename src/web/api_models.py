from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class StartRequest(BaseModel):
    path: str = Field(..., description="Path to a local video file (MP4, AVI, ...)")


class ReplayRequest(BaseModel):
    path: Optional[str] = Field(None, description="Video to replay; defaults to the last one")


class PolicyRequest(BaseModel):
    mode: str = Field(..., description="none|humans_only|all_except_humans|fixed_allow_list")


class PolicyResponse(BaseModel):
    mode: str
    locked: bool
    allow_list: List[str]


class SessionStatsResponse(BaseModel):
    frames_read: int
    frames_processed: int
    detections: int
    elapsed_seconds: float


class SessionStatusResponse(BaseModel):
    """
    Session status for frontend polling.
    """
    state: str = Field(..., description="idle|running|stop_requested|completed|failed")
    path: Optional[str] = Field(None, description="Video currently being processed")
    last_path: Optional[str] = Field(None, description="Most recently selected video")
    policy: str
    stats: Optional[SessionStatsResponse] = None
    last_frame_age_s: Optional[float] = Field(None, description="Seconds since last displayed frame")


class ActionResponse(BaseModel):
    ok: bool
    status: SessionStatusResponse


class NotificationItem(BaseModel):
    id: int
    kind: str
    message: str
    source_path: Optional[str] = None
    timestamp: float


class NotificationsResponse(BaseModel):
    notifications: List[NotificationItem]
    last_id: int


class HealthResponse(BaseModel):
    timestamp: float
    platform: str
    python: str
    opencv: str
    log_path: Optional[str]
    model_artifacts: Dict[str, bool]
    disk: Dict[str, Optional[float]]
