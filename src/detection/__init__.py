"""
Vehicle detection over raw-tensor YOLO models.
"""

from .detector import VehicleDetector, detect, model_input_size, preprocess_image
from .postprocess import (
    MAX_DETECTIONS,
    calculate_iou,
    center_to_corners,
    decode_predictions,
    non_max_suppression,
)

__all__ = [
    "VehicleDetector",
    "detect",
    "model_input_size",
    "preprocess_image",
    "MAX_DETECTIONS",
    "calculate_iou",
    "center_to_corners",
    "decode_predictions",
    "non_max_suppression",
]
