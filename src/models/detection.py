"""
Detection models for object detection results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class BoundingBox:
    """
    A bounding box in model input coordinates.

    Coordinates are not clamped, so boxes near the image edge may have a
    negative origin or extend past the input size.

    Attributes:
        x: Left edge x coordinate.
        y: Top edge y coordinate.
        width: Box width (>= 0).
        height: Box height (>= 0).
    """
    x: float
    y: float
    width: float
    height: float

    @property
    def x2(self) -> float:
        return self.x + self.width

    @property
    def y2(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def area(self) -> float:
        return self.width * self.height

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        """Return as (x1, y1, x2, y2) tuple."""
        return (self.x, self.y, self.x2, self.y2)

    def as_int_xyxy(self) -> Tuple[int, int, int, int]:
        """Return as integer (x1, y1, x2, y2) tuple."""
        return (int(self.x), int(self.y), int(self.x2), int(self.y2))

    @classmethod
    def from_center(cls, cx: float, cy: float, w: float, h: float) -> "BoundingBox":
        """Create from YOLO center form (cx, cy, width, height)."""
        return cls(x=cx - w / 2, y=cy - h / 2, width=w, height=h)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class DetectedObject:
    """
    A single detection produced by one detection pass.

    Attributes:
        class_id: Index of the highest scoring class.
        confidence: Score of that class (0-1).
        bounding_box: Box in model input coordinates.
    """
    class_id: int
    confidence: float
    bounding_box: BoundingBox

    def to_dict(self) -> Dict[str, Any]:
        return {
            "class_id": self.class_id,
            "confidence": self.confidence,
            "bounding_box": self.bounding_box.to_dict(),
        }
