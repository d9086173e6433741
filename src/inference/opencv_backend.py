"""
OpenCV DNN inference backend.

Runs a YOLOv8 detection model exported to ONNX (see tools/export_onnx.py)
through cv2.dnn, so no deep learning framework is needed at runtime.
"""

from __future__ import annotations

import logging
import os
from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

from errors import ModelLoadError
from .backend import InferenceModel


class OpenCvDnnModel(InferenceModel):
    """Raw-tensor model backed by a cv2.dnn.Net."""

    # cv2.dnn.Net keeps per-call input/output blobs on the instance
    reentrant = False

    def __init__(self, net, input_size: Optional[Tuple[int, int]]):
        self._net = net
        self.input_size = input_size

    def predict(self, batch: np.ndarray) -> np.ndarray:
        # NHWC -> NCHW
        blob = np.ascontiguousarray(batch.transpose(0, 3, 1, 2), dtype=np.float32)
        self._net.setInput(blob)
        return self._net.forward()


def _parse_input_size(input_size: Optional[Sequence[int]]) -> Optional[Tuple[int, int]]:
    if input_size is None:
        return None
    if len(input_size) != 2:
        return None
    width, height = int(input_size[0]), int(input_size[1])
    if width <= 0 or height <= 0:
        return None
    return (width, height)


def load_model(path: str, input_size: Optional[Sequence[int]] = (640, 640)) -> OpenCvDnnModel:
    """
    Load an ONNX detection model.

    Args:
        path: Path to the .onnx file.
        input_size: (width, height) the model was exported with.

    Returns:
        A model handle owned by the caller.

    Raises:
        ModelLoadError: If the file is missing or cannot be parsed.
    """
    if not path or not os.path.exists(path):
        raise ModelLoadError(f"Model file not found: {path}")

    logging.info(f"Loading model from: {path}")
    try:
        net = cv2.dnn.readNetFromONNX(path)
    except cv2.error as e:
        raise ModelLoadError(f"Failed to load model {path}: {e}") from e

    if net.empty():
        raise ModelLoadError(f"Model {path} contains no layers")

    size = _parse_input_size(input_size)
    logging.info(f"Model loaded (input size: {size})")
    return OpenCvDnnModel(net, size)
