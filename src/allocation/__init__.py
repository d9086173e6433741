"""
Green time allocation from per-lane vehicle counts.
"""

from .pcu import PCU_WEIGHTS, allocate, durations_to_seconds, lane_volume

__all__ = ["PCU_WEIGHTS", "allocate", "durations_to_seconds", "lane_volume"]
