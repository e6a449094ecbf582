import itertools
import threading
import time
from collections import deque


class SharedState:
    """
    Singleton class to share state between the pipeline/presenter threads
    and the FastAPI web server.
    """
    _instance = None
    _lock = threading.Lock()

    MAX_NOTIFICATIONS = 100

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(SharedState, cls).__new__(cls)
                    cls._instance._reset()
        return cls._instance

    def _reset(self):
        self.frame = None
        self.frame_session_id = None
        self.frame_lock = threading.Lock()
        self.controller = None
        self.config = None
        self.config_lock = threading.Lock()
        self.config_path = None
        self.notifications = deque(maxlen=self.MAX_NOTIFICATIONS)
        self.notifications_lock = threading.Lock()
        self._notification_ids = itertools.count(1)
        self.system_stats = {
            "last_frame_ts": None,
            "frames_presented": 0,
        }

    def set_frame(self, frame, session_id=None):
        """Update the current annotated frame and remember which session drew it."""
        with self.frame_lock:
            if frame is not None:
                self.frame = frame.copy()
                self.frame_session_id = session_id
                self.system_stats["last_frame_ts"] = time.time()
                self.system_stats["frames_presented"] = self.system_stats.get("frames_presented", 0) + 1

    def get_frame(self):
        """Get the current annotated frame."""
        with self.frame_lock:
            if self.frame is None:
                return None
            return self.frame.copy()

    def clear_frame(self, keep_session_id=None):
        """Drop the current frame unless it was drawn by `keep_session_id`."""
        with self.frame_lock:
            if keep_session_id is not None and self.frame_session_id == keep_session_id:
                return
            self.frame = None
            self.frame_session_id = None

    def set_controller(self, controller):
        self.controller = controller

    def set_config(self, config, config_path):
        with self.config_lock:
            self.config = config
            self.config_path = config_path

    def get_config_copy(self):
        with self.config_lock:
            if self.config is None:
                return None
            return dict(self.config)

    def notify(self, notification):
        """Notifier callback: store a pipeline notification for polling clients."""
        with self.notifications_lock:
            entry = dict(notification.to_dict())
            entry["id"] = next(self._notification_ids)
            self.notifications.append(entry)

    def get_notifications(self, since_id=0):
        """Notifications with id greater than since_id, oldest first."""
        with self.notifications_lock:
            return [n for n in self.notifications if n["id"] > since_id]

    def get_system_stats_copy(self):
        """Return a shallow copy of current system stats."""
        return dict(self.system_stats)


# Global instance
state = SharedState()
