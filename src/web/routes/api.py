from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile

from allocation.pcu import allocate, durations_to_seconds
from errors import AllocationInputError
from models.config import Config
from models.lane import BatchResult, ImageFailure, LaneResult
from observation.images import LaneImage, list_demo_images
from pipeline.batch import BatchAnalyzer, class_name_for
from ..api_models import (
    AllocateRequest,
    AllocateResponse,
    AnalyzeResponse,
    DetectResponse,
    HealthResponse,
)

router = APIRouter()


def _get_config(request: Request) -> Config:
    return request.app.state.config


def _get_analyzer(request: Request) -> BatchAnalyzer:
    analyzer: Optional[BatchAnalyzer] = request.app.state.analyzer
    if analyzer is None:
        raise HTTPException(status_code=503, detail="Detection model is not loaded")
    return analyzer


def _result_payload(result: LaneResult, analyzer: BatchAnalyzer) -> dict:
    width, height = analyzer.detector.input_size
    return {
        "lane_id": result.lane_id,
        "source": result.source,
        "input_size": [width, height],
        "detections": [
            {
                "class_id": d.class_id,
                "class_name": class_name_for(d.class_id, analyzer.class_names),
                "confidence": d.confidence,
                "bounding_box": d.bounding_box.to_dict(),
            }
            for d in result.detections
        ],
        "counts": dict(result.counts),
    }


def _batch_payload(batch: BatchResult, analyzer: BatchAnalyzer, cfg: Config) -> dict:
    seconds = None
    if cfg.allocation.cycle_seconds is not None:
        seconds = durations_to_seconds(batch.durations, cfg.allocation.cycle_seconds)
    return {
        "results": [_result_payload(r, analyzer) for r in batch.results],
        "failures": [
            {"lane_id": f.lane_id, "source": f.source, "error": f.error}
            for f in batch.failures
        ],
        "lane_counts": batch.lane_counts,
        "durations": batch.durations,
        "seconds": seconds,
    }


@router.get("/health", response_model=HealthResponse)
def health(request: Request):
    analyzer: Optional[BatchAnalyzer] = request.app.state.analyzer
    if analyzer is None:
        return {"status": "no_model", "model_loaded": False, "input_size": None, "class_names": {}}
    width, height = analyzer.detector.input_size
    return {
        "status": "ok",
        "model_loaded": True,
        "input_size": [width, height],
        "class_names": analyzer.class_names,
    }


@router.post("/allocate", response_model=AllocateResponse)
def allocate_lanes(body: AllocateRequest, request: Request):
    cfg = _get_config(request)
    try:
        durations = allocate(body.lane_counts, cfg.allocation.pcu_weights)
    except AllocationInputError as e:
        raise HTTPException(status_code=422, detail=str(e))

    cycle = body.cycle_seconds if body.cycle_seconds is not None else cfg.allocation.cycle_seconds
    seconds = durations_to_seconds(durations, cycle) if cycle is not None else None
    return {"durations": durations, "seconds": seconds}


@router.post("/detect", response_model=DetectResponse)
async def detect_image(
    request: Request,
    file: UploadFile = File(...),
    lane: Optional[str] = Form(None),
):
    analyzer = _get_analyzer(request)
    name = file.filename or "upload"
    image = LaneImage.from_bytes(name, await file.read(), lane_id=lane)

    outcome = await analyzer.analyze_one(image)
    if isinstance(outcome, ImageFailure):
        raise HTTPException(status_code=400, detail=outcome.error)
    return _result_payload(outcome, analyzer)


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_uploads(
    request: Request,
    files: List[UploadFile] = File(...),
    lanes: Optional[List[str]] = Form(None),
):
    """
    Analyse one image per upload and allocate green time across lanes.

    Lanes are taken from the optional `lanes` form list (same order as the
    files) or derived from the file names.
    """
    analyzer = _get_analyzer(request)
    if lanes is not None and len(lanes) != len(files):
        raise HTTPException(status_code=422, detail="lanes must have one entry per file")

    images = []
    for i, upload in enumerate(files):
        name = upload.filename or f"upload_{i}"
        lane_id = lanes[i] if lanes is not None else None
        images.append(LaneImage.from_bytes(name, await upload.read(), lane_id=lane_id))

    batch = await analyzer.analyze(images)
    return _batch_payload(batch, analyzer, _get_config(request))


@router.post("/demo", response_model=AnalyzeResponse)
async def analyze_demo(request: Request):
    analyzer = _get_analyzer(request)
    cfg = _get_config(request)
    if not cfg.demo_assets_dir:
        raise HTTPException(status_code=404, detail="No demo assets directory configured")
    try:
        images = list_demo_images(cfg.demo_assets_dir)
    except FileNotFoundError as e:
        logging.error(f"Demo assets unavailable: {e}")
        raise HTTPException(status_code=404, detail=str(e))

    batch = await analyzer.analyze(images)
    return _batch_payload(batch, analyzer, cfg)
