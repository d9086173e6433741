from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class BoundingBoxModel(BaseModel):
    x: float
    y: float
    width: float
    height: float


class DetectedObjectModel(BaseModel):
    class_id: int
    class_name: str
    confidence: float
    bounding_box: BoundingBoxModel


class HealthResponse(BaseModel):
    status: str = Field(..., description="ok|no_model")
    model_loaded: bool
    input_size: Optional[List[int]] = Field(None, description="Model input [width, height]")
    class_names: Dict[int, str] = Field(default_factory=dict)


class DetectResponse(BaseModel):
    """
    Detections for one uploaded image.

    Boxes are in model input coordinates; scale by display / input_size
    per axis to draw them on the original image.
    """
    lane_id: str
    source: str
    input_size: List[int]
    detections: List[DetectedObjectModel]
    counts: Dict[str, int]


class AllocateRequest(BaseModel):
    lane_counts: Dict[str, Dict[str, int]]
    cycle_seconds: Optional[float] = Field(None, ge=0, description="Scale durations to this cycle length")


class AllocateResponse(BaseModel):
    durations: Dict[str, float] = Field(..., description="Percentage of the cycle per lane")
    seconds: Optional[Dict[str, float]] = Field(None, description="Durations in seconds when cycle_seconds is set")


class ImageFailureModel(BaseModel):
    lane_id: str
    source: str
    error: str


class AnalyzeResponse(BaseModel):
    results: List[DetectResponse]
    failures: List[ImageFailureModel]
    lane_counts: Dict[str, Dict[str, int]]
    durations: Dict[str, float]
    seconds: Optional[Dict[str, float]] = None
