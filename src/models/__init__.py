"""
Typed models for the traffic light allocator.
"""

from .detection import BoundingBox, DetectedObject
from .lane import BatchResult, ImageFailure, LaneCounts, LaneDurations, LaneResult
from .config import (
    Config,
    ModelConfig,
    DetectionConfig,
    AllocationConfig,
    WebConfig,
    DEFAULT_CLASS_NAMES,
    DEFAULT_PCU_WEIGHTS,
)

__all__ = [
    # Detection
    "BoundingBox",
    "DetectedObject",
    # Lanes
    "LaneCounts",
    "LaneDurations",
    "LaneResult",
    "ImageFailure",
    "BatchResult",
    # Config
    "Config",
    "ModelConfig",
    "DetectionConfig",
    "AllocationConfig",
    "WebConfig",
    "DEFAULT_CLASS_NAMES",
    "DEFAULT_PCU_WEIGHTS",
]
