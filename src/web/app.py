"""
FastAPI application factory for the traffic light allocator.

Routes:
- /api/health   -> model status
- /api/detect   -> detections for one uploaded image
- /api/analyze  -> per-lane counts and green time for several uploads
- /api/allocate -> green time from posted lane counts
- /api/demo     -> analysis of the bundled demo images
"""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inference.backend import InferenceModel
from models.config import Config
from pipeline.batch import BatchAnalyzer
from .routes import api


def create_app(model: Optional[InferenceModel] = None, config: Optional[Config] = None) -> FastAPI:
    """
    Create the FastAPI app around an already loaded model.

    The model handle is owned by the caller. Without one, only /api/health
    and /api/allocate are usable; detection routes answer 503.
    """
    config = config or Config()
    app = FastAPI(
        title="Traffic Light Allocator",
        version="0.1.0",
        description="Vehicle detection and PCU-weighted green time allocation",
    )

    # CORS for development (frontend dev server)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.config = config
    app.state.analyzer = None
    if model is not None:
        app.state.analyzer = BatchAnalyzer(
            model,
            detection_cfg=config.detection,
            class_names=config.model.class_names,
            pcu_weights=config.allocation.pcu_weights,
        )

    app.include_router(api.router, prefix="/api")
    return app
