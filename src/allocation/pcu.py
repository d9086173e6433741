"""
Passenger-car-unit (PCU) weighted green time allocation.

Each lane's vehicle counts are converted to an equivalent number of cars and
the signal cycle is split in proportion to those volumes. Results are
percentages of the cycle so the caller can scale them to any cycle length.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from numbers import Real
from typing import Dict, Mapping, Optional

from errors import AllocationInputError
from models.config import DEFAULT_PCU_WEIGHTS
from models.lane import LaneCounts, LaneDurations

PCU_WEIGHTS: Dict[str, float] = dict(DEFAULT_PCU_WEIGHTS)
DEFAULT_WEIGHT = 1.0


def _round_half_up(value: float, places: int = 2) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _check_count(lane: str, vehicle_class: str, count) -> None:
    if isinstance(count, bool) or not isinstance(count, Real):
        raise AllocationInputError(f"Count for {lane}/{vehicle_class} is not a number: {count!r}")
    if count < 0:
        raise AllocationInputError(f"Count for {lane}/{vehicle_class} is negative: {count}")
    try:
        finite = math.isfinite(count)
    except OverflowError:
        finite = False
    if not finite:
        raise AllocationInputError(f"Count for {lane}/{vehicle_class} is not a finite number")


def lane_volume(counts: Mapping[str, int], weights: Optional[Mapping[str, float]] = None) -> float:
    """
    Weighted volume of one lane.

    Classes missing from the weight table count as one car each.
    """
    weights = PCU_WEIGHTS if weights is None else weights
    total = 0.0
    for vehicle_class, count in counts.items():
        total += count * weights.get(vehicle_class, DEFAULT_WEIGHT)
    return total


def allocate(lane_counts: LaneCounts, weights: Optional[Mapping[str, float]] = None) -> LaneDurations:
    """
    Split the signal cycle across lanes by PCU-weighted volume.

    Args:
        lane_counts: Lane id -> vehicle class -> count.
        weights: Optional PCU weight table; defaults to PCU_WEIGHTS.

    Returns:
        Lane id -> percentage of the cycle, rounded half away from zero to
        two decimals. Every lane gets 0 when no vehicles were seen anywhere.

    Raises:
        AllocationInputError: If a lane entry is not a mapping, a count is
            negative, non-finite or not a number, or the weighted volume
            overflows.
    """
    volumes: Dict[str, float] = {}
    for lane, counts in lane_counts.items():
        if not isinstance(counts, Mapping):
            raise AllocationInputError(f"Counts for lane {lane} must be a mapping")
        for vehicle_class, count in counts.items():
            _check_count(lane, vehicle_class, count)
        volumes[lane] = lane_volume(counts, weights)

    total_volume = sum(volumes.values())
    if not math.isfinite(total_volume):
        raise AllocationInputError("Total weighted volume is too large to allocate")

    durations: LaneDurations = {}
    for lane, volume in volumes.items():
        if total_volume > 0:
            durations[lane] = _round_half_up(volume / total_volume * 100)
        else:
            durations[lane] = 0.0
    return durations


def durations_to_seconds(durations: Mapping[str, float], cycle_seconds: float) -> Dict[str, float]:
    """Scale percentage durations to seconds of a cycle of the given length."""
    if cycle_seconds < 0:
        raise AllocationInputError(f"cycle_seconds must be non-negative, got {cycle_seconds}")
    return {
        lane: _round_half_up(pct / 100 * cycle_seconds)
        for lane, pct in durations.items()
    }
