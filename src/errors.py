"""
Error taxonomy for the traffic light allocator.

Only ModelLoadError is fatal for a session. Decode and inference failures are
local to one image and never abort sibling images in a batch.
"""

from __future__ import annotations


class TrafficLightError(Exception):
    """Base class for all errors raised by this project."""


class ModelLoadError(TrafficLightError):
    """The model file is missing, unreadable or corrupt."""


class ImageDecodeError(TrafficLightError):
    """An image could not be decoded to pixel data."""


class InferenceError(TrafficLightError):
    """The model input shape is unknown or the prediction call failed."""


class AllocationInputError(TrafficLightError):
    """Lane counts are not well formed (e.g. negative or non-numeric counts)."""
