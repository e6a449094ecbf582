"""
OpenCV DNN backend for Darknet (YOLO) models.

Loads a network from a .cfg/.weights pair and a class-name list, and turns
each forward pass into DetectionCandidate rows collected from every output
layer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import cv2
import numpy as np

from models.config import ModelConfig
from models.detection import DetectionCandidate
from .backend import InferenceEngine, ModelArtifacts, ModelLoadError, load_class_names

DNN_BACKENDS = {
    "default": cv2.dnn.DNN_BACKEND_DEFAULT,
    "opencv": cv2.dnn.DNN_BACKEND_OPENCV,
    "cuda": cv2.dnn.DNN_BACKEND_CUDA,
}

DNN_TARGETS = {
    "cpu": cv2.dnn.DNN_TARGET_CPU,
    "opencl": cv2.dnn.DNN_TARGET_OPENCL,
    "opencl_fp16": cv2.dnn.DNN_TARGET_OPENCL_FP16,
    "cuda": cv2.dnn.DNN_TARGET_CUDA,
}


@dataclass(frozen=True)
class DarknetConfig:
    artifacts: ModelArtifacts
    input_size: Tuple[int, int] = (416, 416)
    backend: str = "opencv"
    target: str = "opencl"

    @classmethod
    def from_model_config(cls, cfg: ModelConfig) -> "DarknetConfig":
        return cls(
            artifacts=ModelArtifacts.from_config(cfg),
            input_size=(int(cfg.input_size[0]), int(cfg.input_size[1])),
            backend=cfg.backend,
            target=cfg.target,
        )


class DarknetBackend(InferenceEngine):
    def __init__(self, cfg: DarknetConfig):
        self.cfg = cfg
        cfg.artifacts.verify()

        self.class_names: List[str] = load_class_names(cfg.artifacts.names_path)

        try:
            net = cv2.dnn.readNetFromDarknet(cfg.artifacts.config_path, cfg.artifacts.weights_path)
        except cv2.error as e:
            raise ModelLoadError(f"Failed to load Darknet network: {e}") from e
        if net is None or net.empty():
            raise ModelLoadError(
                f"Darknet network is empty: {cfg.artifacts.config_path}, {cfg.artifacts.weights_path}"
            )

        net.setPreferableBackend(DNN_BACKENDS.get(cfg.backend, cv2.dnn.DNN_BACKEND_OPENCV))
        net.setPreferableTarget(DNN_TARGETS.get(cfg.target, cv2.dnn.DNN_TARGET_CPU))

        self._net: Optional[cv2.dnn.Net] = net
        self._output_names = list(net.getUnconnectedOutLayersNames())

        logging.info(
            f"Darknet model loaded: classes={len(self.class_names)}, "
            f"outputs={self._output_names}, input={cfg.input_size}, "
            f"backend={cfg.backend}, target={cfg.target}"
        )

    @classmethod
    def from_model_config(cls, cfg: ModelConfig) -> "DarknetBackend":
        return cls(DarknetConfig.from_model_config(cfg))

    def infer(self, image: np.ndarray) -> List[DetectionCandidate]:
        net = self._net
        if net is None:
            raise RuntimeError("Model has been released")

        blob = cv2.dnn.blobFromImage(
            image,
            1 / 255.0,
            self.cfg.input_size,
            (0, 0, 0),
            swapRB=True,
            crop=False,
        )
        net.setInput(blob)
        outputs = net.forward(self._output_names)

        out: List[DetectionCandidate] = []
        for output in outputs:
            out.extend(parse_output(output))
        return out

    def close(self) -> None:
        if self._net is not None:
            self._net = None
            logging.info("Darknet model released")


def parse_output(output: np.ndarray) -> List[DetectionCandidate]:
    """
    Convert one YOLO output tensor into candidates.

    Rows are [cx, cy, w, h, objectness, class scores...]; rows whose best
    class score is zero carry no detection and are skipped.
    """
    rows = np.asarray(output, dtype=np.float32)
    if rows.ndim != 2 or rows.shape[1] <= 5 or rows.shape[0] == 0:
        return []

    scores = rows[:, 5:]
    best = scores.max(axis=1)
    return [DetectionCandidate.from_output_row(row) for row in rows[best > 0]]
