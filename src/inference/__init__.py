"""
Inference backends producing raw detection tensors.
"""

from .backend import InferenceModel, SerializedModel, ensure_serialized
from .opencv_backend import OpenCvDnnModel, load_model

__all__ = [
    "InferenceModel",
    "SerializedModel",
    "ensure_serialized",
    "OpenCvDnnModel",
    "load_model",
]
