"""
Image sources for lane analysis.

Images arrive as uploaded bytes, files on disk, or bundled demo assets, and
are decoded to RGB arrays for the detector.
"""

from .images import LaneImage, decode_image, lane_id_from_name, list_demo_images, load_image

__all__ = [
    "LaneImage",
    "decode_image",
    "lane_id_from_name",
    "list_demo_images",
    "load_image",
]
