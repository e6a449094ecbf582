"""
User-visible notifications emitted by the pipeline.

These are informational and non-blocking: the pipeline hands them to a
notifier callable and carries on.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

MESSAGE_OPEN_FAILED = "Could not open video"
MESSAGE_COMPLETED = "Processing complete. Please select a new video."
MESSAGE_NO_VIDEO = "No video selected. Please select a video first."


class NotificationKind(str, Enum):
    OPEN_FAILED = "open_failed"
    COMPLETED = "completed"
    FAILED = "failed"
    NO_VIDEO = "no_video"


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    message: str
    source_path: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    @classmethod
    def open_failed(cls, path: str) -> "Notification":
        return cls(NotificationKind.OPEN_FAILED, MESSAGE_OPEN_FAILED, source_path=path)

    @classmethod
    def completed(cls, path: Optional[str]) -> "Notification":
        return cls(NotificationKind.COMPLETED, MESSAGE_COMPLETED, source_path=path)

    @classmethod
    def failed(cls, error: BaseException, path: Optional[str] = None) -> "Notification":
        return cls(NotificationKind.FAILED, f"Error: {error}", source_path=path)

    @classmethod
    def no_video(cls) -> "Notification":
        return cls(NotificationKind.NO_VIDEO, MESSAGE_NO_VIDEO)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "source_path": self.source_path,
            "timestamp": self.timestamp,
        }


Notifier = Callable[[Notification], None]


def dispatch(notifier: Optional[Notifier], notification: Notification) -> None:
    """Log a notification and forward it; notifier errors never propagate."""
    if notification.kind in (NotificationKind.FAILED, NotificationKind.OPEN_FAILED):
        logging.warning(f"Notify [{notification.kind.value}] {notification.message} ({notification.source_path})")
    else:
        logging.info(f"Notify [{notification.kind.value}] {notification.message}")

    if notifier is None:
        return
    try:
        notifier(notification)
    except Exception as e:
        logging.warning(f"Notifier error: {e}")
