"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from web.state import state as shared_state  # noqa: E402


@pytest.fixture(autouse=True)
def reset_shared_state():
    """Each test starts with an empty web state singleton."""
    shared_state._reset()
    yield shared_state
    controller = shared_state.controller
    if controller is not None:
        controller.stop()
    shared_state._reset()


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
model:
  data_dir: "data"
  config_file: "yolov3-tiny.cfg"
  weights_file: "yolov3-tiny.weights"
  names_file: "coco.names"

pipeline:
  frame_skip: 3
  presentation_size: [900, 620]
  stop_timeout: 2.0

detection:
  policy: "humans_only"

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "model": {
            "data_dir": "data",
            "config_file": "yolov3-tiny.cfg",
            "weights_file": "yolov3-tiny.weights",
            "names_file": "coco.names",
            "input_size": [416, 416],
            "backend": "opencv",
            "target": "opencl",
        },
        "pipeline": {
            "frame_skip": 3,
            "presentation_size": [900, 620],
            "frame_delay_ms": 15,
            "stop_timeout": 2.0,
            "channel_size": 1,
        },
        "detection": {
            "policy": "humans_only",
            "allow_list": ["person", "cat", "dog", "horse", "bird"],
        },
        "web": {"enabled": True, "host": "127.0.0.1", "port": 5000},
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }


@pytest.fixture
def model_dir(tmp_path):
    """Directory holding placeholder model artifacts and a class list."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "yolov3-tiny.cfg").write_text("[net]\n")
    (data_dir / "yolov3-tiny.weights").write_bytes(b"\x00" * 16)
    (data_dir / "coco.names").write_text("person\nbicycle\ncar\ncat\ndog\n")
    return data_dir
