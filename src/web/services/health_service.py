from __future__ import annotations

import os
import platform
import shutil
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import cv2

from models.config import Config


@dataclass
class HealthService:
    cfg: Config

    def get_health_summary(self) -> Dict[str, Any]:
        model = self.cfg.model
        return {
            "timestamp": time.time(),
            "platform": platform.platform(),
            "python": platform.python_version(),
            "opencv": cv2.__version__,
            "log_path": self.cfg.log_path,
            "model_artifacts": {
                "config": os.path.isfile(model.config_path),
                "weights": os.path.isfile(model.weights_path),
                "names": os.path.isfile(model.names_path),
            },
            "disk": self.disk_usage(model.data_dir if os.path.isdir(model.data_dir) else "."),
        }

    @staticmethod
    def disk_usage(path: Optional[str] = None) -> Dict[str, Optional[float]]:
        """
        Lightweight disk stats for the health endpoint.
        """
        target = path or "."
        try:
            usage = shutil.disk_usage(target)
        except OSError:
            return {"total_bytes": None, "free_bytes": None, "pct_free": None}
        pct_free = (usage.free / usage.total * 100) if usage.total else None
        return {
            "total_bytes": float(usage.total),
            "free_bytes": float(usage.free),
            "pct_free": pct_free,
        }
