"""
Pipeline module for the traffic light allocator.

The pipeline orchestrates the full processing flow:
- Image decoding and detection, one concurrent task per image
- Per-lane count aggregation
- PCU-weighted green time allocation
"""

from .batch import (
    BatchAnalyzer,
    aggregate_counts,
    analyze_images,
    class_name_for,
    run_batch,
    tally_detections,
)

__all__ = [
    "BatchAnalyzer",
    "aggregate_counts",
    "analyze_images",
    "class_name_for",
    "run_batch",
    "tally_detections",
]
