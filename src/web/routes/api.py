from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response, StreamingResponse

from models.config import Config
from models.policy import ClassPolicy
from observation import is_supported_video, SUPPORTED_EXTENSIONS
from ..api_models import (
    ActionResponse,
    HealthResponse,
    NotificationsResponse,
    PolicyRequest,
    PolicyResponse,
    ReplayRequest,
    SessionStatusResponse,
    StartRequest,
)
from ..services.health_service import HealthService
from ..services.logs_service import LogsService
from ..services.video_service import VideoService
from ..state import state

router = APIRouter()


def _controller():
    controller = state.controller
    if controller is None:
        raise HTTPException(status_code=503, detail="Pipeline controller not initialized")
    return controller


def _effective_config() -> Config:
    raw = state.get_config_copy()
    return Config.from_dict(raw) if raw else Config()


def _clear_previous_frame(controller) -> None:
    """Drop the preview frame unless the run now in progress drew it."""
    session = controller.session
    state.clear_frame(keep_session_id=session.session_id if session is not None else None)


def _session_status(controller) -> Dict[str, Any]:
    status = controller.status()
    last_frame_ts = state.get_system_stats_copy().get("last_frame_ts")
    status["last_frame_age_s"] = time.time() - last_frame_ts if last_frame_ts else None
    return status


@router.get("/session", response_model=SessionStatusResponse)
def session_status():
    return _session_status(_controller())


@router.post("/session/start", response_model=ActionResponse)
def session_start(req: StartRequest):
    """
    Start detection on a local video file, replacing any active run.
    """
    path = req.path.strip()
    if not path:
        raise HTTPException(status_code=400, detail="path is required")
    if not is_supported_video(path):
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported video format; expected one of {', '.join(SUPPORTED_EXTENSIONS)}",
        )

    controller = _controller()
    ok = controller.start(path)
    _clear_previous_frame(controller)
    return {"ok": ok, "status": _session_status(controller)}


@router.post("/session/stop", response_model=ActionResponse)
def session_stop():
    controller = _controller()
    controller.stop()
    return {"ok": True, "status": _session_status(controller)}


@router.post("/session/replay", response_model=ActionResponse)
def session_replay(req: Optional[ReplayRequest] = None):
    controller = _controller()
    path = req.path.strip() if req is not None and req.path else None
    if path and not is_supported_video(path):
        raise HTTPException(status_code=400, detail="Unsupported video format")
    ok = controller.replay(path)
    _clear_previous_frame(controller)
    return {"ok": ok, "status": _session_status(controller)}


@router.get("/policy", response_model=PolicyResponse)
def get_policy():
    policy = _controller().policy
    return {"mode": policy.get().value, "locked": policy.locked, "allow_list": sorted(policy.allow_list)}


@router.put("/policy", response_model=PolicyResponse)
def set_policy(req: PolicyRequest):
    controller = _controller()
    try:
        mode = ClassPolicy(req.mode)
    except ValueError:
        valid = ", ".join(p.value for p in ClassPolicy)
        raise HTTPException(status_code=400, detail=f"Unknown policy '{req.mode}'; expected one of: {valid}")
    controller.set_policy(mode)
    return get_policy()


@router.get("/notifications", response_model=NotificationsResponse)
def notifications(since: int = 0):
    items = state.get_notifications(since_id=since)
    last_id = items[-1]["id"] if items else since
    return {"notifications": items, "last_id": last_id}


@router.get("/video/snapshot.jpg")
def video_snapshot():
    try:
        jpeg_bytes = VideoService.snapshot_jpeg(state)
    except RuntimeError as e:
        logging.warning(f"Snapshot failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    if jpeg_bytes is None:
        raise HTTPException(status_code=404, detail="No frame available")
    return Response(content=jpeg_bytes, media_type="image/jpeg", headers={"Cache-Control": "no-store"})


@router.get("/video/live.mjpg")
def video_live_stream(fps: int = 15):
    """
    Stream MJPEG frames from the shared state (populated by the presenter).
    """
    return StreamingResponse(
        VideoService.mjpeg_stream(state, fps=fps),
        media_type="multipart/x-mixed-replace; boundary=frame",
    )


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthService(cfg=_effective_config()).get_health_summary()


@router.get("/logs/tail")
def logs_tail(lines: int = 200):
    log_path = _effective_config().log_path
    return {"path": log_path, "lines": LogsService.tail(log_path, lines=lines)}
