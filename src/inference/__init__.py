"""
Inference layer: model loading and raw detection output.
"""

from .backend import InferenceEngine, ModelArtifacts, ModelLoadError, load_class_names
from .darknet_backend import DarknetBackend, DarknetConfig, parse_output

__all__ = [
    "InferenceEngine",
    "ModelArtifacts",
    "ModelLoadError",
    "load_class_names",
    "DarknetBackend",
    "DarknetConfig",
    "parse_output",
]
