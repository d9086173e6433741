"""
Still image sources for lane analysis.

Images come either from uploaded bytes or from files (including the bundled
demo assets). Everything is decoded to RGB uint8 arrays, which is what the
detector expects.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional

import cv2
import numpy as np

from errors import ImageDecodeError

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".bmp", ".webp")


def decode_image(data: bytes) -> np.ndarray:
    """
    Decode encoded image bytes (JPEG, PNG, ...) to an RGB array.

    Raises:
        ImageDecodeError: If the bytes are empty or not a supported image.
    """
    if not data:
        raise ImageDecodeError("Image data is empty")
    buf = np.frombuffer(data, dtype=np.uint8)
    bgr = cv2.imdecode(buf, cv2.IMREAD_COLOR)
    if bgr is None:
        raise ImageDecodeError("Image data could not be decoded")
    return cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)


def load_image(path: str) -> np.ndarray:
    """Read and decode an image file to an RGB array."""
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise ImageDecodeError(f"Cannot read image {path}: {e}") from e
    try:
        return decode_image(data)
    except ImageDecodeError as e:
        raise ImageDecodeError(f"{path}: {e}") from e


def lane_id_from_name(name: str) -> str:
    """
    Derive a lane id from an image file name: the name without directory
    or extension, so "lane_1.jpg" and "lane_2.jpg" are separate lanes.

    Several images are grouped under one lane only when the caller passes
    an explicit lane id.
    """
    return os.path.splitext(os.path.basename(name))[0]


@dataclass(frozen=True)
class LaneImage:
    """
    One image to analyse for a lane.

    Exactly one of data (encoded bytes) or path should be set.
    """
    lane_id: str
    source: str
    data: Optional[bytes] = None
    path: Optional[str] = None

    @classmethod
    def from_path(cls, path: str, lane_id: Optional[str] = None) -> "LaneImage":
        return cls(
            lane_id=lane_id or lane_id_from_name(path),
            source=os.path.basename(path),
            path=path,
        )

    @classmethod
    def from_bytes(cls, name: str, data: bytes, lane_id: Optional[str] = None) -> "LaneImage":
        return cls(
            lane_id=lane_id or lane_id_from_name(name),
            source=name,
            data=data,
        )

    def read(self) -> np.ndarray:
        """Decode the image. Raises ImageDecodeError on failure."""
        if self.data is not None:
            return decode_image(self.data)
        if self.path is not None:
            return load_image(self.path)
        raise ImageDecodeError(f"No image data for {self.source}")


def list_demo_images(directory: str) -> List[LaneImage]:
    """
    List the demo images in a directory, sorted by file name.

    Raises:
        FileNotFoundError: If the directory does not exist.
    """
    if not os.path.isdir(directory):
        raise FileNotFoundError(f"Demo assets directory not found: {directory}")
    names = sorted(
        n for n in os.listdir(directory)
        if n.lower().endswith(IMAGE_EXTENSIONS)
    )
    return [LaneImage.from_path(os.path.join(directory, n)) for n in names]
