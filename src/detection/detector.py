"""
Vehicle detection over a raw-tensor YOLO model.

detect() runs one full pass: resize and normalize the image, call the model,
then decode and suppress the raw output into DetectedObject values in model
input coordinates. Scaling to display coordinates is left to the caller
(see visualization.annotate).
"""

from __future__ import annotations

from typing import List, Optional, Tuple

import cv2
import numpy as np

from errors import InferenceError
from inference.backend import InferenceModel
from models.config import DetectionConfig
from models.detection import BoundingBox, DetectedObject
from .postprocess import MAX_DETECTIONS, center_to_corners, decode_predictions, non_max_suppression


def model_input_size(model: InferenceModel) -> Tuple[int, int]:
    """
    Return the (width, height) a model expects.

    Raises:
        InferenceError: If the model does not report a usable input size.
    """
    size = getattr(model, "input_size", None)
    if size is None or len(size) != 2:
        raise InferenceError("Model input shape is unknown")
    width, height = int(size[0]), int(size[1])
    if width <= 0 or height <= 0:
        raise InferenceError(f"Invalid model input shape: {size}")
    return width, height


def preprocess_image(image: np.ndarray, input_size: Tuple[int, int]) -> np.ndarray:
    """
    Prepare an RGB image for the model.

    Args:
        image: Decoded image (H, W, 3) in RGB order. Grayscale and RGBA
               images are converted to RGB.
        input_size: Model input (width, height).

    Returns:
        float32 array of shape (1, height, width, 3) with values in [0, 1].
    """
    if image is None or image.size == 0:
        raise InferenceError("Cannot run inference on an empty image")
    if image.ndim == 2:
        image = cv2.cvtColor(image, cv2.COLOR_GRAY2RGB)
    elif image.ndim == 3 and image.shape[2] == 4:
        image = cv2.cvtColor(image, cv2.COLOR_RGBA2RGB)
    elif image.ndim != 3 or image.shape[2] != 3:
        raise InferenceError(f"Unsupported image shape {image.shape}")

    width, height = input_size
    resized = cv2.resize(image, (width, height), interpolation=cv2.INTER_LINEAR)
    batch = resized.astype(np.float32) / 255.0
    return np.expand_dims(batch, axis=0)


def detect(
    image: np.ndarray,
    model: InferenceModel,
    confidence_threshold: float = 0.09,
    iou_threshold: float = 0.45,
    max_detections: int = MAX_DETECTIONS,
) -> List[DetectedObject]:
    """
    Detect vehicles in a single image.

    Args:
        image: Decoded RGB image of any size.
        model: Loaded model handle.
        confidence_threshold: Candidates scoring below this are dropped.
        iou_threshold: Overlap at or above which the weaker box is suppressed.
        max_detections: Upper bound on returned objects, never above MAX_DETECTIONS.

    Returns:
        Detected objects in suppression-survival order.

    Raises:
        InferenceError: If the input shape is unknown or prediction fails.
    """
    input_size = model_input_size(model)
    batch = preprocess_image(image, input_size)

    try:
        output = model.predict(batch)
    except InferenceError:
        raise
    except Exception as e:
        raise InferenceError(f"Prediction failed: {e}") from e

    boxes, scores, class_ids = decode_predictions(output)
    keep = non_max_suppression(
        center_to_corners(boxes),
        scores,
        max_output_size=min(max_detections, MAX_DETECTIONS),
        iou_threshold=iou_threshold,
        score_threshold=confidence_threshold,
    )

    detections: List[DetectedObject] = []
    for i in keep:
        cx, cy, w, h = (float(v) for v in boxes[i])
        detections.append(
            DetectedObject(
                class_id=int(class_ids[i]),
                confidence=float(scores[i]),
                bounding_box=BoundingBox.from_center(cx, cy, w, h),
            )
        )
    return detections


class VehicleDetector:
    """Binds a model handle to configured post-processing thresholds."""

    def __init__(
        self,
        model: InferenceModel,
        conf_threshold: float = 0.09,
        iou_threshold: float = 0.45,
        max_detections: int = MAX_DETECTIONS,
    ):
        self.model = model
        self.conf_threshold = conf_threshold
        self.iou_threshold = iou_threshold
        self.max_detections = max_detections

    @classmethod
    def from_config(cls, model: InferenceModel, cfg: Optional[DetectionConfig] = None) -> "VehicleDetector":
        cfg = cfg or DetectionConfig()
        return cls(
            model,
            conf_threshold=float(cfg.conf_threshold),
            iou_threshold=float(cfg.iou_threshold),
            max_detections=int(cfg.max_detections),
        )

    @property
    def input_size(self) -> Tuple[int, int]:
        return model_input_size(self.model)

    def detect(self, image: np.ndarray) -> List[DetectedObject]:
        return detect(
            image,
            self.model,
            confidence_threshold=self.conf_threshold,
            iou_threshold=self.iou_threshold,
            max_detections=self.max_detections,
        )
