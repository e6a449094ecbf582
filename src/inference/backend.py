"""
Inference engine interface.

Engines return raw candidates with boxes normalized to the image they were
given. Filtering and pixel scaling happen downstream.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Protocol

import numpy as np

from models.config import ModelConfig
from models.detection import DetectionCandidate


class ModelLoadError(RuntimeError):
    """Raised when model artifacts are missing, unreadable, or corrupt."""


@dataclass(frozen=True)
class ModelArtifacts:
    config_path: str
    weights_path: str
    names_path: str

    @classmethod
    def from_config(cls, cfg: ModelConfig) -> "ModelArtifacts":
        return cls(
            config_path=cfg.config_path,
            weights_path=cfg.weights_path,
            names_path=cfg.names_path,
        )

    def missing(self) -> List[str]:
        """Paths that do not exist as files."""
        return [
            p for p in (self.config_path, self.weights_path, self.names_path)
            if not os.path.isfile(p)
        ]

    def verify(self) -> None:
        missing = self.missing()
        if missing:
            raise ModelLoadError(f"Missing model artifacts: {', '.join(missing)}")


def load_class_names(path: str) -> List[str]:
    """Read a newline-delimited class list. Index = line number."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            names = [line.rstrip() for line in f.read().splitlines()]
    except OSError as e:
        raise ModelLoadError(f"Failed to read class names from {path}: {e}") from e

    # Drop trailing blank lines only; interior positions are class indices.
    while names and not names[-1]:
        names.pop()
    if not names:
        raise ModelLoadError(f"Class name list is empty: {path}")
    return names


class InferenceEngine(Protocol):
    class_names: List[str]

    def infer(self, image: np.ndarray) -> List[DetectionCandidate]:
        ...

    def close(self) -> None:
        ...
