"""
VideoSession: the state of one run over one video file.

The session owns the frame source and the inference engine. Its run state
changes only through compare-and-set transitions under a per-session lock,
and its resources are released exactly once no matter which path (end of
stream, error, stop request, forced teardown) gets there first.
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from inference.backend import InferenceEngine
    from observation.base import ObservationSource

_session_ids = itertools.count(1)


class RunState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOP_REQUESTED = "stop_requested"
    COMPLETED = "completed"
    FAILED = "failed"


ACTIVE_STATES = (RunState.RUNNING, RunState.STOP_REQUESTED)


class VideoSession:
    """
    One run of the pipeline over one video file.

    Writers:
        - controller: IDLE -> RUNNING on start
        - requester:  RUNNING -> STOP_REQUESTED on stop
        - worker:     RUNNING -> COMPLETED | FAILED
        - release():  any -> IDLE, once
    """

    def __init__(
        self,
        source_path: str,
        source: "ObservationSource",
        engine: "InferenceEngine",
    ):
        self.session_id = next(_session_ids)
        self.source_path = source_path
        self.source = source
        self.engine = engine
        self.cancel_event = threading.Event()
        self.worker: Optional[threading.Thread] = None
        self.created_at = time.time()
        self._state = RunState.IDLE
        self._lock = threading.Lock()
        self._released = False
        self._closed = threading.Event()

    def __repr__(self) -> str:
        return f"VideoSession(id={self.session_id}, path={self.source_path!r}, state={self.state.value})"

    @property
    def state(self) -> RunState:
        with self._lock:
            return self._state

    @property
    def is_active(self) -> bool:
        return self.state in ACTIVE_STATES

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    @property
    def released(self) -> bool:
        with self._lock:
            return self._released

    @property
    def closed(self) -> bool:
        """True once the source and model have actually been released."""
        return self._closed.is_set()

    def wait_closed(self, timeout: Optional[float] = None) -> bool:
        """Block until the releasing call has finished closing resources."""
        return self._closed.wait(timeout)

    def transition(self, expected: Iterable[RunState], new: RunState) -> bool:
        """Move to `new` only if the current state is one of `expected`."""
        expected = tuple(expected)
        with self._lock:
            if self._released or self._state not in expected:
                return False
            old = self._state
            self._state = new
        logging.debug(f"Session {self.session_id}: {old.value} -> {new.value}")
        return True

    def request_stop(self) -> None:
        """Signal the worker to stop at its next checkpoint."""
        self.cancel_event.set()
        self.transition((RunState.RUNNING,), RunState.STOP_REQUESTED)

    def release(self) -> bool:
        """
        Release the frame source and the model, and reset to IDLE.

        Returns True for the call that performed the release, False for any
        later call. A later call does not wait for the first to finish
        closing; use wait_closed() for that.
        """
        with self._lock:
            if self._released:
                return False
            self._released = True
            final_state = self._state
            self._state = RunState.IDLE

        try:
            try:
                self.source.close()
            except Exception as e:
                logging.warning(f"Error closing source for session {self.session_id}: {e}")

            close_engine = getattr(self.engine, "close", None)
            if close_engine is not None:
                try:
                    close_engine()
                except Exception as e:
                    logging.warning(f"Error releasing model for session {self.session_id}: {e}")
        finally:
            self._closed.set()

        logging.info(f"Session {self.session_id} released (was {final_state.value}): {self.source_path}")
        return True


def release_session(session: VideoSession, timeout: float) -> bool:
    """
    Stop a session: signal, wait up to `timeout`, then release regardless.

    Cancellation is only observed at the top of each loop iteration, so the
    worker may need up to one frame's worth of inference, rendering and
    display hand-off before it exits. If it has not exited by the deadline,
    the source and model are force-released anyway and the worker is left
    to wind down on its own.

    Returns only once the source and model are closed, whichever thread
    closes them, so a new source can be opened safely afterwards.

    Returns True if the worker exited within the timeout.
    """
    session.request_stop()

    exited = True
    worker = session.worker
    if worker is not None and worker is not threading.current_thread():
        worker.join(timeout)
        exited = not worker.is_alive()
        if not exited:
            logging.warning(
                f"Session {session.session_id} worker did not stop within {timeout}s, forcing release"
            )

    session.release()
    if not session.wait_closed(timeout):
        logging.warning(f"Session {session.session_id} is still closing its source, waiting")
        session.wait_closed()
    return exited
