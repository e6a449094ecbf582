"""
Tests for the REST API handlers.

Handlers are called directly against the shared state singleton.
"""

import cv2
import numpy as np
import pytest
from fastapi import HTTPException

from models.policy import ClassPolicy, PolicyState
from pipeline.controller import PipelineController
from pipeline.notifications import Notification, NotificationKind
from web.api_models import PolicyRequest, ReplayRequest, StartRequest
from web.app import create_app
from web.routes import api
from web.state import state

from helpers import MockVideoSource, RecordingSink, StubEngine, fast_config


@pytest.fixture
def controller():
    ctrl = PipelineController(
        fast_config(),
        source_factory=lambda path: MockVideoSource(path, max_frames=None, read_delay=0.002),
        engine_factory=StubEngine,
        sink=RecordingSink(),
        notifier=state.notify,
        policy=PolicyState(ClassPolicy.HUMANS_ONLY),
    )
    state.set_controller(ctrl)
    return ctrl


class TestApp:
    def test_routes_registered(self):
        paths = {route.path for route in create_app().routes}

        assert {"/", "/api/session", "/api/session/start", "/api/policy", "/api/notifications"} <= paths


class TestSessionRoutes:
    def test_no_controller_is_503(self):
        with pytest.raises(HTTPException) as exc:
            api.session_status()

        assert exc.value.status_code == 503

    def test_status_idle(self, controller):
        status = api.session_status()

        assert status["state"] == "idle"
        assert status["path"] is None
        assert status["last_frame_age_s"] is None

    def test_start_and_stop(self, controller):
        started = api.session_start(StartRequest(path="clip.mp4"))

        assert started["ok"] is True
        assert started["status"]["state"] == "running"
        assert started["status"]["path"] == "clip.mp4"

        stopped = api.session_stop()

        assert stopped["status"]["state"] == "idle"
        assert controller.session is None

    @pytest.mark.parametrize("path", ["", "   ", "notes.txt"])
    def test_start_rejects_bad_path(self, controller, path):
        with pytest.raises(HTTPException) as exc:
            api.session_start(StartRequest(path=path))

        assert exc.value.status_code == 400
        assert controller.session is None

    def test_start_clears_previous_frame(self, controller):
        state.set_frame(np.zeros((4, 4, 3), dtype=np.uint8))

        api.session_start(StartRequest(path="clip.mp4"))

        assert state.get_frame() is None

    def test_start_clears_frame_from_replaced_run(self, controller):
        api.session_start(StartRequest(path="a.mp4"))
        old_id = controller.session.session_id
        state.set_frame(np.zeros((4, 4, 3), dtype=np.uint8), session_id=old_id)

        api.session_start(StartRequest(path="b.mp4"))

        assert controller.session.session_id != old_id
        assert state.get_frame() is None

    def test_keeps_frame_drawn_by_new_run(self, controller):
        api.session_start(StartRequest(path="clip.mp4"))
        state.set_frame(np.zeros((4, 4, 3), dtype=np.uint8), session_id=controller.session.session_id)

        api._clear_previous_frame(controller)

        assert state.get_frame() is not None

    def test_replay_clears_frame_from_previous_run(self, controller):
        api.session_start(StartRequest(path="clip.mp4"))
        state.set_frame(np.zeros((4, 4, 3), dtype=np.uint8), session_id=controller.session.session_id)

        api.session_replay(ReplayRequest())

        assert state.get_frame() is None

    def test_replay_without_video(self, controller):
        result = api.session_replay()

        assert result["ok"] is False
        (item,) = state.get_notifications()
        assert item["kind"] == NotificationKind.NO_VIDEO.value

    def test_replay_last_video(self, controller):
        api.session_start(StartRequest(path="clip.mp4"))
        api.session_stop()

        result = api.session_replay(ReplayRequest())

        assert result["ok"] is True
        assert result["status"]["path"] == "clip.mp4"

    def test_replay_rejects_unsupported(self, controller):
        with pytest.raises(HTTPException) as exc:
            api.session_replay(ReplayRequest(path="notes.txt"))

        assert exc.value.status_code == 400


class TestPolicyRoutes:
    def test_get_policy(self, controller):
        policy = api.get_policy()

        assert policy["mode"] == "humans_only"
        assert policy["locked"] is False
        assert "person" in policy["allow_list"]

    def test_set_policy(self, controller):
        policy = api.set_policy(PolicyRequest(mode="all_except_humans"))

        assert policy["mode"] == "all_except_humans"
        assert controller.policy.get() == ClassPolicy.ALL_EXCEPT_HUMANS

    def test_set_unknown_policy_is_400(self, controller):
        with pytest.raises(HTTPException) as exc:
            api.set_policy(PolicyRequest(mode="everything"))

        assert exc.value.status_code == 400


class TestNotificationRoutes:
    def test_since_filters_older_items(self):
        state.notify(Notification.completed("a.mp4"))
        state.notify(Notification.open_failed("b.mp4"))

        everything = api.notifications()
        newer = api.notifications(since=everything["notifications"][0]["id"])

        assert [n["kind"] for n in everything["notifications"]] == ["completed", "open_failed"]
        assert [n["source_path"] for n in newer["notifications"]] == ["b.mp4"]
        assert newer["last_id"] == everything["last_id"]

    def test_empty_keeps_since(self):
        assert api.notifications(since=5) == {"notifications": [], "last_id": 5}


class TestVideoRoutes:
    def test_snapshot_without_frame_is_404(self):
        with pytest.raises(HTTPException) as exc:
            api.video_snapshot()

        assert exc.value.status_code == 404

    def test_snapshot_returns_jpeg(self):
        state.set_frame(np.full((48, 64, 3), 128, dtype=np.uint8))

        response = api.video_snapshot()

        assert response.media_type == "image/jpeg"
        decoded = cv2.imdecode(np.frombuffer(response.body, dtype=np.uint8), cv2.IMREAD_COLOR)
        assert decoded.shape == (48, 64, 3)


class TestHealthRoutes:
    def test_health_reports_missing_artifacts(self, valid_config, tmp_path):
        valid_config["model"]["data_dir"] = str(tmp_path)
        state.set_config(valid_config, None)

        health = api.health()

        assert health["model_artifacts"] == {"config": False, "weights": False, "names": False}
        assert health["opencv"] == cv2.__version__

    def test_logs_tail(self, valid_config, tmp_path):
        log_file = tmp_path / "app.log"
        log_file.write_text("one\ntwo\nthree\n")
        valid_config["log_path"] = str(log_file)
        state.set_config(valid_config, None)

        result = api.logs_tail(lines=2)

        assert result["lines"] == ["two\n", "three\n"]
