"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import cv2
import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


def make_output(candidates, num_classes=2):
    """
    Build a raw YOLO output tensor of shape (1, 4 + num_classes, N).

    Each candidate is (cx, cy, w, h, class_id, score); every other class
    score is 0.
    """
    out = np.zeros((1, 4 + num_classes, len(candidates)), dtype=np.float64)
    for i, (cx, cy, w, h, class_id, score) in enumerate(candidates):
        out[0, :4, i] = (cx, cy, w, h)
        out[0, 4 + class_id, i] = score
    return out


class StubModel:
    """Deterministic model returning a fixed output tensor."""

    def __init__(self, output, input_size=(640, 640), reentrant=False):
        self.output = np.asarray(output)
        self.input_size = input_size
        self.reentrant = reentrant
        self.batches = []

    def predict(self, batch):
        self.batches.append(batch)
        return self.output


def encode_png(image_rgb: np.ndarray) -> bytes:
    ok, buf = cv2.imencode(".png", cv2.cvtColor(image_rgb, cv2.COLOR_RGB2BGR))
    assert ok
    return buf.tobytes()


@pytest.fixture
def single_motorcycle_model():
    """One motorcycle (class 0) at 0.9 centred in a 640x640 input."""
    return StubModel(make_output([(320, 320, 100, 50, 0, 0.9)]))


@pytest.fixture
def png_bytes():
    """A small valid PNG image."""
    image = np.full((48, 64, 3), 127, dtype=np.uint8)
    return encode_png(image)


@pytest.fixture
def demo_dir(tmp_path, png_bytes):
    """Directory with two lane images and one non-image file."""
    d = tmp_path / "demo"
    d.mkdir()
    (d / "south.png").write_bytes(png_bytes)
    (d / "north.png").write_bytes(png_bytes)
    (d / "README.txt").write_text("not an image")
    return d


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
model:
  path: "data/artifacts/model.onnx"
  input_size: [640, 640]
  class_names:
    0: "motorcycle"
    1: "car"

detection:
  conf_threshold: 0.09
  iou_threshold: 0.45

allocation:
  cycle_seconds: 120

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "model": {
            "path": "data/artifacts/model.onnx",
            "input_size": [640, 640],
            "class_names": {0: "motorcycle", 1: "car"},
        },
        "detection": {
            "conf_threshold": 0.09,
            "iou_threshold": 0.45,
            "max_detections": 100,
        },
        "allocation": {
            "cycle_seconds": 120,
        },
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
