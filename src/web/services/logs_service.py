from __future__ import annotations

from collections import deque
from typing import List, Optional


class LogsService:
    @staticmethod
    def tail(path: Optional[str], lines: int = 200) -> List[str]:
        """Last `lines` lines of the pipeline log, or one line explaining why not."""
        if not path:
            return ["(no log file configured)"]
        try:
            with open(path, "r", encoding="utf-8", errors="replace") as log_file:
                return list(deque(log_file, maxlen=max(1, lines)))
        except FileNotFoundError:
            return [f"(no log written yet at {path})"]
        except OSError as e:
            return [f"(cannot read {path}: {e})"]
