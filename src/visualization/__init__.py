"""
Rendering helpers for detections.
"""

from .annotate import draw_detections, save_annotated, scale_box

__all__ = ["draw_detections", "save_annotated", "scale_box"]
