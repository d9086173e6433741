"""
Inference backend interface.

A model takes a float32 NHWC batch of shape [1, H, W, 3] scaled to [0, 1]
and returns the raw YOLO output tensor of shape [1, 4 + num_classes, N].
Post-processing lives in the detection package, not here.
"""

from __future__ import annotations

import threading
from typing import Optional, Protocol, Tuple

import numpy as np


class InferenceModel(Protocol):
    # (width, height) the model expects, None when unknown
    input_size: Optional[Tuple[int, int]]
    # True when predict() may be called from several threads at once
    reentrant: bool

    def predict(self, batch: np.ndarray) -> np.ndarray:
        ...


class SerializedModel:
    """Wraps a non-reentrant model so only one predict() runs at a time."""

    reentrant = True

    def __init__(self, model: InferenceModel):
        self._model = model
        self._lock = threading.Lock()

    @property
    def input_size(self) -> Optional[Tuple[int, int]]:
        return self._model.input_size

    def predict(self, batch: np.ndarray) -> np.ndarray:
        with self._lock:
            return self._model.predict(batch)


def ensure_serialized(model: InferenceModel) -> InferenceModel:
    """Return the model itself if it is reentrant, otherwise a serialized wrapper."""
    if getattr(model, "reentrant", False):
        return model
    return SerializedModel(model)
