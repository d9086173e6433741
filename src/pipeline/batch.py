"""
Batch analysis of lane images.

Every image is analysed by its own asyncio task (decode -> detect -> tally).
Decoding and inference block, so they run in worker threads. When the model
is not reentrant its predict() calls are serialized through a lock.

A failing image never aborts the batch: it is logged, recorded as a failure
and left out of the lane counts. Once all tasks have finished the counts are
aggregated per lane and handed to the allocator.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from allocation.pcu import allocate
from detection.detector import VehicleDetector
from errors import ImageDecodeError, InferenceError
from inference.backend import InferenceModel, ensure_serialized
from models.config import DEFAULT_CLASS_NAMES, DetectionConfig
from models.detection import DetectedObject
from models.lane import BatchResult, ImageFailure, LaneCounts, LaneResult
from observation.images import LaneImage


def class_name_for(class_id: int, class_names: Mapping[int, str]) -> str:
    """Class name for a model class id; unknown ids become "class_<id>"."""
    return class_names.get(class_id) or f"class_{class_id}"


def tally_detections(detections: Iterable[DetectedObject], class_names: Mapping[int, str]) -> Dict[str, int]:
    """Count detections by class name."""
    counts: Dict[str, int] = {}
    for det in detections:
        name = class_name_for(det.class_id, class_names)
        counts[name] = counts.get(name, 0) + 1
    return counts


def aggregate_counts(results: Iterable[LaneResult]) -> LaneCounts:
    """
    Sum per-image counts into LaneCounts.

    Every lane with at least one successful image gets an entry, even when
    nothing was detected, so it shows up in the allocation with 0.
    """
    lane_counts: LaneCounts = {}
    for result in results:
        lane = lane_counts.setdefault(result.lane_id, {})
        for name, count in result.counts.items():
            lane[name] = lane.get(name, 0) + count
    return lane_counts


class BatchAnalyzer:
    """
    Runs detection over many lane images concurrently and allocates green time.

    Example:
        analyzer = BatchAnalyzer(model, DetectionConfig(conf_threshold=0.25))
        result = asyncio.run(analyzer.analyze(images))
        print(result.durations)
    """

    def __init__(
        self,
        model: InferenceModel,
        detection_cfg: Optional[DetectionConfig] = None,
        class_names: Optional[Mapping[int, str]] = None,
        pcu_weights: Optional[Mapping[str, float]] = None,
    ):
        self.detector = VehicleDetector.from_config(ensure_serialized(model), detection_cfg)
        self.class_names = dict(DEFAULT_CLASS_NAMES if class_names is None else class_names)
        self.pcu_weights = pcu_weights

    async def analyze_one(self, image: LaneImage) -> Union[LaneResult, ImageFailure]:
        """Analyse one image; decode and inference errors become an ImageFailure."""
        try:
            pixels = await asyncio.to_thread(image.read)
            detections = await asyncio.to_thread(self.detector.detect, pixels)
        except (ImageDecodeError, InferenceError) as e:
            logging.warning(f"Dropping image {image.source} (lane {image.lane_id}): {e}")
            return ImageFailure(lane_id=image.lane_id, source=image.source, error=str(e))

        counts = tally_detections(detections, self.class_names)
        logging.info(f"Lane {image.lane_id}: {len(detections)} detections in {image.source} {counts}")
        return LaneResult(
            lane_id=image.lane_id,
            source=image.source,
            detections=detections,
            counts=counts,
        )

    async def analyze(self, images: Sequence[LaneImage]) -> BatchResult:
        """Analyse all images concurrently, then aggregate and allocate."""
        outcomes = await asyncio.gather(*(self.analyze_one(img) for img in images))

        batch = BatchResult()
        for outcome in outcomes:
            if isinstance(outcome, LaneResult):
                batch.results.append(outcome)
            else:
                batch.failures.append(outcome)

        batch.lane_counts = aggregate_counts(batch.results)
        batch.durations = allocate(batch.lane_counts, self.pcu_weights)

        if batch.failures:
            logging.warning(f"{len(batch.failures)} of {len(images)} images could not be analysed")
        return batch


async def analyze_images(
    images: Sequence[LaneImage],
    model: InferenceModel,
    detection_cfg: Optional[DetectionConfig] = None,
    class_names: Optional[Mapping[int, str]] = None,
    pcu_weights: Optional[Mapping[str, float]] = None,
) -> BatchResult:
    """Convenience wrapper around BatchAnalyzer.analyze()."""
    analyzer = BatchAnalyzer(model, detection_cfg, class_names, pcu_weights)
    return await analyzer.analyze(images)


def run_batch(analyzer: BatchAnalyzer, images: List[LaneImage]) -> BatchResult:
    """Run a batch to completion from synchronous code."""
    return asyncio.run(analyzer.analyze(images))
