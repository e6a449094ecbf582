"""
Tests for model loading and the Darknet backend.

The OpenCV network is replaced by a MagicMock so no real weights are needed.
"""

import os
from unittest.mock import MagicMock, patch

import cv2
import numpy as np
import pytest

from inference.backend import ModelArtifacts, ModelLoadError, load_class_names
from inference.darknet_backend import DarknetBackend, DarknetConfig, parse_output
from models.config import ModelConfig


def output_row(class_index, score, box=(0.5, 0.5, 0.2, 0.2), num_classes=5):
    row = np.zeros(5 + num_classes, dtype=np.float32)
    row[:4] = box
    row[4] = 0.99
    row[5 + class_index] = score
    return row


def mock_net(outputs):
    net = MagicMock()
    net.empty.return_value = False
    net.getUnconnectedOutLayersNames.return_value = ("yolo_16", "yolo_23")
    net.forward.return_value = outputs
    return net


def model_config(data_dir):
    return ModelConfig(data_dir=str(data_dir))


class TestLoadClassNames:
    def test_reads_lines_in_order(self, tmp_path):
        path = tmp_path / "names"
        path.write_text("person\nbicycle\ncar\n\n\n")

        assert load_class_names(str(path)) == ["person", "bicycle", "car"]

    def test_interior_blank_keeps_index(self, tmp_path):
        path = tmp_path / "names"
        path.write_text("person\n\ncar\n")

        assert load_class_names(str(path)) == ["person", "", "car"]

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ModelLoadError):
            load_class_names(str(tmp_path / "nope.names"))

    def test_empty_file_raises(self, tmp_path):
        path = tmp_path / "names"
        path.write_text("\n")

        with pytest.raises(ModelLoadError):
            load_class_names(str(path))


class TestModelArtifacts:
    def test_missing_lists_absent_files(self, model_dir):
        os.remove(model_dir / "yolov3-tiny.weights")
        artifacts = ModelArtifacts.from_config(model_config(model_dir))

        assert artifacts.missing() == [str(model_dir / "yolov3-tiny.weights")]
        with pytest.raises(ModelLoadError):
            artifacts.verify()


class TestParseOutput:
    def test_skips_rows_without_score(self):
        rows = np.stack([output_row(0, 0.9), np.zeros(10, dtype=np.float32), output_row(3, 0.4)])

        candidates = parse_output(rows)

        assert [c.class_index for c in candidates] == [0, 3]
        assert candidates[0].confidence == pytest.approx(0.9)
        assert candidates[0].box == pytest.approx((0.5, 0.5, 0.2, 0.2))

    def test_confidence_is_class_score_not_objectness(self):
        (c,) = parse_output(np.stack([output_row(2, 0.3)]))

        assert c.class_index == 2
        assert c.confidence == pytest.approx(0.3)

    def test_empty_output(self):
        assert parse_output(np.zeros((0, 10), dtype=np.float32)) == []


class TestDarknetBackend:
    def test_missing_artifacts_raise(self, tmp_path):
        with pytest.raises(ModelLoadError):
            DarknetBackend.from_model_config(model_config(tmp_path))

    def test_collects_all_output_layers(self, model_dir):
        net = mock_net([
            np.stack([output_row(0, 0.9)]),
            np.stack([output_row(4, 0.5), output_row(1, 0.3)]),
        ])
        with patch("cv2.dnn.readNetFromDarknet", return_value=net):
            backend = DarknetBackend.from_model_config(model_config(model_dir))

        image = np.zeros((620, 900, 3), dtype=np.uint8)
        candidates = backend.infer(image)

        assert backend.class_names == ["person", "bicycle", "car", "cat", "dog"]
        assert [c.class_index for c in candidates] == [0, 4, 1]
        net.forward.assert_called_once_with(["yolo_16", "yolo_23"])
        blob = net.setInput.call_args[0][0]
        assert blob.shape == (1, 3, 416, 416)

    def test_read_error_becomes_model_load_error(self, model_dir):
        with patch("cv2.dnn.readNetFromDarknet", side_effect=cv2.error("bad weights")):
            with pytest.raises(ModelLoadError):
                DarknetBackend.from_model_config(model_config(model_dir))

    def test_empty_network_raises(self, model_dir):
        net = mock_net([])
        net.empty.return_value = True
        with patch("cv2.dnn.readNetFromDarknet", return_value=net):
            with pytest.raises(ModelLoadError):
                DarknetBackend.from_model_config(model_config(model_dir))

    def test_infer_after_close_raises(self, model_dir):
        with patch("cv2.dnn.readNetFromDarknet", return_value=mock_net([])):
            backend = DarknetBackend.from_model_config(model_config(model_dir))

        backend.close()
        backend.close()

        with pytest.raises(RuntimeError):
            backend.infer(np.zeros((10, 10, 3), dtype=np.uint8))

    def test_config_from_model_config(self, model_dir):
        cfg = DarknetConfig.from_model_config(
            ModelConfig(data_dir=str(model_dir), input_size=[320, 320], target="cpu")
        )

        assert cfg.input_size == (320, 320)
        assert cfg.target == "cpu"
        assert cfg.artifacts.names_path == os.path.join(str(model_dir), "coco.names")
