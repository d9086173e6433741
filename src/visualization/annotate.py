"""
Drawing detections onto display images.

Detections are in model input coordinates; scale_box maps them to the
display image with one linear factor per axis.
"""

from __future__ import annotations

from typing import List, Mapping, Optional, Tuple

import cv2
import numpy as np

from models.detection import BoundingBox, DetectedObject

# RGB
CLASS_COLORS = {
    "car": (0, 200, 0),
    "motorcycle": (255, 160, 0),
    "bus": (0, 120, 255),
    "truck": (220, 0, 0),
}
DEFAULT_COLOR = (255, 255, 0)


def scale_box(
    box: BoundingBox,
    model_size: Tuple[int, int],
    display_size: Tuple[int, int],
) -> BoundingBox:
    """
    Map a box from model input space to display space.

    Args:
        box: Box in model input coordinates.
        model_size: Model input (width, height).
        display_size: Display image (width, height).
    """
    sx = display_size[0] / model_size[0]
    sy = display_size[1] / model_size[1]
    return BoundingBox(
        x=box.x * sx,
        y=box.y * sy,
        width=box.width * sx,
        height=box.height * sy,
    )


def draw_detections(
    image: np.ndarray,
    detections: List[DetectedObject],
    model_size: Tuple[int, int],
    class_names: Optional[Mapping[int, str]] = None,
) -> np.ndarray:
    """
    Draw labelled boxes on a copy of an RGB image.

    Returns:
        The annotated copy; the input image is left untouched.
    """
    canvas = image.copy()
    height, width = canvas.shape[:2]
    names = class_names or {}

    for det in detections:
        box = scale_box(det.bounding_box, model_size, (width, height))
        x1, y1, x2, y2 = box.as_int_xyxy()
        name = names.get(det.class_id, f"class_{det.class_id}")
        color = CLASS_COLORS.get(name, DEFAULT_COLOR)

        cv2.rectangle(canvas, (x1, y1), (x2, y2), color, 2)
        cv2.putText(
            canvas,
            f"{name} {det.confidence:.2f}",
            (x1, max(y1 - 10, 10)),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.5,
            color,
            2,
        )
    return canvas


def save_annotated(path: str, image: np.ndarray) -> bool:
    """Write an RGB image to disk. Returns False if OpenCV could not write it."""
    return bool(cv2.imwrite(path, cv2.cvtColor(image, cv2.COLOR_RGB2BGR)))
