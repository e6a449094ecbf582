"""
Pipeline controller: start, stop and replay detection runs.

At most one session is active at a time. Starting a new run first tears
the previous one down completely (signal, bounded wait, forced release),
so two frame sources are never open together.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Optional

from inference.backend import InferenceEngine, ModelLoadError
from models.config import Config, PipelineConfig
from models.policy import ClassPolicy, PolicyState
from observation import ObservationSource, SourceOpenError, create_video_source
from .engine import PipelineEngine, PipelineStats
from .notifications import Notification, Notifier, dispatch
from .session import RunState, VideoSession, release_session
from .sink import PresentationSink
from .stages.annotate import OverlayRenderer
from .stages.filter import DetectionFilter

SourceFactory = Callable[[str], ObservationSource]
EngineFactory = Callable[[], InferenceEngine]


class PipelineController:
    """
    Owns the lifecycle of video sessions.

    start/stop/replay are meant to be called from the UI side and are
    serialised by a controller lock; the worker thread never takes it.

    Example:
        controller = PipelineController(config, create_video_source, engine_factory, sink)
        controller.start("clip.mp4")
        ...
        controller.stop()
    """

    def __init__(
        self,
        config: PipelineConfig,
        source_factory: SourceFactory,
        engine_factory: EngineFactory,
        sink: PresentationSink,
        notifier: Optional[Notifier] = None,
        policy: Optional[PolicyState] = None,
        renderer: Optional[OverlayRenderer] = None,
        nms_threshold: Optional[float] = None,
    ):
        self.config = config
        self.policy = policy or PolicyState()
        self._source_factory = source_factory
        self._engine_factory = engine_factory
        self._sink = sink
        self._notifier = notifier
        self._renderer = renderer or OverlayRenderer()
        self._nms_threshold = nms_threshold
        self._lock = threading.Lock()
        self._session: Optional[VideoSession] = None
        self._engine: Optional[PipelineEngine] = None
        self._last_path: Optional[str] = None

    @property
    def session(self) -> Optional[VideoSession]:
        return self._session

    @property
    def state(self) -> RunState:
        session = self._session
        return session.state if session is not None else RunState.IDLE

    @property
    def is_running(self) -> bool:
        session = self._session
        return session is not None and session.is_active

    @property
    def current_path(self) -> Optional[str]:
        session = self._session
        return session.source_path if session is not None and session.is_active else None

    @property
    def last_path(self) -> Optional[str]:
        return self._last_path

    @property
    def stats(self) -> Optional[PipelineStats]:
        """Statistics of the active or most recent run."""
        engine = self._engine
        return engine.stats if engine is not None else None

    def start(self, path: str) -> bool:
        """
        Stop any active run, then start processing `path`.

        Returns False (after notifying) if the video or the model cannot be
        opened; no worker is launched in that case.
        """
        with self._lock:
            self._stop_locked()
            return self._start_locked(path)

    def stop(self) -> None:
        """Stop the active run, if any. No-op when idle."""
        with self._lock:
            self._stop_locked()

    def replay(self, path: Optional[str] = None) -> bool:
        """Restart from the beginning of `path`, defaulting to the last video."""
        with self._lock:
            path = path or self._last_path
            if not path:
                dispatch(self._notifier, Notification.no_video())
                return False
            self._stop_locked()
            return self._start_locked(path)

    def set_policy(self, mode: ClassPolicy) -> ClassPolicy:
        return self.policy.set(mode)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Join the current worker; True if it is no longer running."""
        session = self._session
        if session is None or session.worker is None:
            return True
        session.worker.join(timeout)
        return not session.worker.is_alive()

    def status(self) -> Dict[str, Any]:
        stats = self.stats
        return {
            "state": self.state.value,
            "path": self.current_path,
            "last_path": self._last_path,
            "policy": self.policy.get().value,
            "stats": stats.to_dict() if stats is not None else None,
        }

    def _start_locked(self, path: str) -> bool:
        self._last_path = path

        source = self._source_factory(path)
        try:
            source.open()
        except SourceOpenError as e:
            logging.warning(f"Cannot start session: {e}")
            dispatch(self._notifier, Notification.open_failed(path))
            return False

        try:
            engine = self._engine_factory()
        except ModelLoadError as e:
            logging.error(f"Cannot start session, model failed to load: {e}")
            source.close()
            dispatch(self._notifier, Notification.failed(e, path))
            return False
        except Exception as e:
            logging.exception("Unexpected error loading model")
            source.close()
            dispatch(self._notifier, Notification.failed(e, path))
            return False

        session = VideoSession(source_path=path, source=source, engine=engine)
        pipeline = PipelineEngine(
            session,
            self.config,
            DetectionFilter(engine.class_names, self.policy, nms_threshold=self._nms_threshold),
            self._renderer,
            self._sink,
            notifier=self._notifier,
        )

        if hasattr(self._sink, "set_session"):
            self._sink.set_session(session.session_id)

        session.transition((RunState.IDLE,), RunState.RUNNING)
        session.worker = threading.Thread(
            target=pipeline.run,
            name=f"pipeline-session-{session.session_id}",
            daemon=True,
        )
        self._session = session
        self._engine = pipeline
        session.worker.start()
        logging.info(f"Session {session.session_id} started: {path}")
        return True

    def _stop_locked(self) -> None:
        session = self._session
        if session is None:
            return
        self._session = None
        if hasattr(self._sink, "set_session"):
            self._sink.set_session(None)
        # Also after a natural end: the worker may still be inside release().
        release_session(session, timeout=self.config.stop_timeout)


def create_controller_from_config(
    config: Config,
    sink: PresentationSink,
    notifier: Optional[Notifier] = None,
    policy: Optional[PolicyState] = None,
) -> PipelineController:
    """
    Factory function wiring a controller from the application config.

    Video files are opened with VideoFileSource and the model is loaded
    fresh for every run with DarknetBackend.
    """
    from inference.darknet_backend import DarknetBackend

    detection = config.detection
    if policy is None:
        policy = PolicyState(
            mode=ClassPolicy(detection.policy),
            allow_list=detection.allow_list,
            locked=detection.lock_policy,
        )

    return PipelineController(
        config.pipeline,
        source_factory=create_video_source,
        engine_factory=lambda: DarknetBackend.from_model_config(config.model),
        sink=sink,
        notifier=notifier,
        policy=policy,
        nms_threshold=detection.nms_threshold,
    )
