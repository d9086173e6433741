"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

DEFAULT_CLASS_NAMES: Dict[int, str] = {0: "motorcycle", 1: "car"}

DEFAULT_PCU_WEIGHTS: Dict[str, float] = {
    "car": 1.0,
    "motorcycle": 0.25,
    "bus": 2.5,
    "truck": 3.0,
}


@dataclass
class ModelConfig:
    """Detection model location and input geometry."""
    path: str = ""
    input_size: Optional[List[int]] = field(default_factory=lambda: [640, 640])
    class_names: Dict[int, str] = field(default_factory=lambda: dict(DEFAULT_CLASS_NAMES))

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ModelConfig":
        names = d.get("class_names") or DEFAULT_CLASS_NAMES
        return cls(
            path=d.get("path", ""),
            input_size=d.get("input_size", [640, 640]),
            # YAML keys may come back as strings
            class_names={int(k): str(v) for k, v in names.items()},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "input_size": self.input_size,
            "class_names": dict(self.class_names),
        }


@dataclass
class DetectionConfig:
    """Post-processing thresholds."""
    conf_threshold: float = 0.09
    iou_threshold: float = 0.45
    max_detections: int = 100

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectionConfig":
        return cls(
            conf_threshold=d.get("conf_threshold", 0.09),
            iou_threshold=d.get("iou_threshold", 0.45),
            max_detections=d.get("max_detections", 100),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "conf_threshold": self.conf_threshold,
            "iou_threshold": self.iou_threshold,
            "max_detections": self.max_detections,
        }


@dataclass
class AllocationConfig:
    """Green time allocation settings."""
    cycle_seconds: Optional[float] = None
    pcu_weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_PCU_WEIGHTS))

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AllocationConfig":
        return cls(
            cycle_seconds=d.get("cycle_seconds"),
            pcu_weights=dict(d.get("pcu_weights") or DEFAULT_PCU_WEIGHTS),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"pcu_weights": dict(self.pcu_weights)}
        if self.cycle_seconds is not None:
            d["cycle_seconds"] = self.cycle_seconds
        return d


@dataclass
class WebConfig:
    """Web API server settings."""
    host: str = "0.0.0.0"
    port: int = 5000

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WebConfig":
        return cls(
            host=d.get("host", "0.0.0.0"),
            port=d.get("port", 5000),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"host": self.host, "port": self.port}


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    model: ModelConfig = field(default_factory=ModelConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    allocation: AllocationConfig = field(default_factory=AllocationConfig)
    web: WebConfig = field(default_factory=WebConfig)
    demo_assets_dir: Optional[str] = None
    log_path: str = "logs/traffic_light.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        demo = d.get("demo") or {}
        return cls(
            model=ModelConfig.from_dict(d.get("model", {}) or {}),
            detection=DetectionConfig.from_dict(d.get("detection", {}) or {}),
            allocation=AllocationConfig.from_dict(d.get("allocation", {}) or {}),
            web=WebConfig.from_dict(d.get("web", {}) or {}),
            demo_assets_dir=demo.get("assets_dir"),
            log_path=d.get("log_path", "logs/traffic_light.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for saving or passing to existing code)."""
        d: Dict[str, Any] = {
            "model": self.model.to_dict(),
            "detection": self.detection.to_dict(),
            "allocation": self.allocation.to_dict(),
            "web": self.web.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
        if self.demo_assets_dir is not None:
            d["demo"] = {"assets_dir": self.demo_assets_dir}
        return d
