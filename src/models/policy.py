"""
Class policy: which detected labels are rendered.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Iterable, Optional, Tuple

PERSON_LABEL = "person"
DEFAULT_ALLOW_LIST: Tuple[str, ...] = ("person", "cat", "dog", "horse", "bird")


class ClassPolicy(str, Enum):
    NONE = "none"
    HUMANS_ONLY = "humans_only"
    ALL_EXCEPT_HUMANS = "all_except_humans"
    FIXED_ALLOW_LIST = "fixed_allow_list"


def policy_accepts(
    policy: ClassPolicy,
    label: str,
    allow_list: Iterable[str] = DEFAULT_ALLOW_LIST,
) -> bool:
    """Return True if `label` is rendered under `policy`."""
    if policy == ClassPolicy.HUMANS_ONLY:
        return label == PERSON_LABEL
    if policy == ClassPolicy.ALL_EXCEPT_HUMANS:
        return label != PERSON_LABEL
    if policy == ClassPolicy.FIXED_ALLOW_LIST:
        return label in allow_list
    return False


class PolicyState:
    """
    Thread-safe holder for the user-selected class policy.

    The UI writes the mode, and the frame loop reads a snapshot per
    candidate so toggles take effect mid-stream. A locked state always
    reports FIXED_ALLOW_LIST and ignores set().
    """

    def __init__(
        self,
        mode: ClassPolicy = ClassPolicy.HUMANS_ONLY,
        allow_list: Optional[Iterable[str]] = None,
        locked: bool = False,
    ):
        self._lock = threading.Lock()
        self._locked = locked
        self._mode = ClassPolicy.FIXED_ALLOW_LIST if locked else ClassPolicy(mode)
        self._allow_list = frozenset(allow_list if allow_list is not None else DEFAULT_ALLOW_LIST)

    @property
    def locked(self) -> bool:
        return self._locked

    @property
    def allow_list(self) -> frozenset:
        return self._allow_list

    def get(self) -> ClassPolicy:
        with self._lock:
            return self._mode

    def set(self, mode: ClassPolicy) -> ClassPolicy:
        """Switch the active mode. Returns the mode now in effect."""
        mode = ClassPolicy(mode)
        with self._lock:
            if self._locked:
                logging.info(f"Class policy is locked to {self._mode.value}, ignoring {mode.value}")
                return self._mode
            if mode != self._mode:
                logging.info(f"Class policy changed: {self._mode.value} -> {mode.value}")
            self._mode = mode
            return self._mode

    def accepts(self, label: str) -> bool:
        return policy_accepts(self.get(), label, self._allow_list)
