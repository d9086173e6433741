"""
Lane-level models: counts, durations and batch results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .detection import DetectedObject

# lane id -> vehicle class name -> count
LaneCounts = Dict[str, Dict[str, int]]

# lane id -> percentage share of the signal cycle (0-100)
LaneDurations = Dict[str, float]


@dataclass(frozen=True)
class LaneResult:
    """
    Detections for one successfully analysed image.

    Attributes:
        lane_id: Lane the image belongs to.
        source: Name of the image (file name or upload name).
        detections: Objects returned by the detector.
        counts: Detections tallied by vehicle class name.
    """
    lane_id: str
    source: str
    detections: List[DetectedObject]
    counts: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lane_id": self.lane_id,
            "source": self.source,
            "detections": [d.to_dict() for d in self.detections],
            "counts": dict(self.counts),
        }


@dataclass(frozen=True)
class ImageFailure:
    """An image dropped from a batch, with the reason."""
    lane_id: str
    source: str
    error: str


@dataclass
class BatchResult:
    """Aggregated outcome of analysing a set of lane images."""
    results: List[LaneResult] = field(default_factory=list)
    failures: List[ImageFailure] = field(default_factory=list)
    lane_counts: LaneCounts = field(default_factory=dict)
    durations: LaneDurations = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "failures": [
                {"lane_id": f.lane_id, "source": f.source, "error": f.error}
                for f in self.failures
            ],
            "lane_counts": {lane: dict(c) for lane, c in self.lane_counts.items()},
            "durations": dict(self.durations),
        }
