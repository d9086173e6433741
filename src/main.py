"""
Traffic light allocator: detect vehicles in lane images and split green time.

Each lane is photographed once (or a few times). Vehicles are detected in
every image, counted per lane, weighted by passenger car units and turned
into a share of the signal cycle.

Usage:
    python src/main.py --config config/config.yaml --image north=img/north.jpg --image south=img/south.jpg
    python src/main.py --demo --annotate-dir output/annotated
    python src/main.py --serve

Arguments:
    --config: Path to configuration file
    --image: LANE=PATH pair (repeatable); a bare PATH derives the lane from the file name
    --demo: Analyse the bundled demo images
    --annotate-dir: Write copies of the images with detections drawn on them
    --serve: Start the web API instead of running a batch
"""

import os
import sys
import argparse
import logging
import yaml
from typing import Any, Dict, List, Optional, Tuple

from allocation.pcu import durations_to_seconds
from detection.postprocess import MAX_DETECTIONS
from errors import AllocationInputError, ImageDecodeError, ModelLoadError
from inference.opencv_backend import load_model
from models.config import Config
from models.lane import BatchResult
from observation.images import LaneImage, list_demo_images
from ops.logging import setup_logging
from pipeline.batch import BatchAnalyzer, run_batch
from visualization.annotate import draw_detections, save_annotated


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def _read_yaml(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        config_dir = os.path.dirname(config_path)
        merged = _read_yaml(os.path.join(config_dir, "default.yaml"))

        local_overrides_path = os.path.join(config_dir, "config.yaml")
        merged = _deep_merge(merged, _read_yaml(local_overrides_path))

        # Finally apply explicit config_path if it's not the local override file itself
        if os.path.abspath(config_path) != os.path.abspath(local_overrides_path):
            merged = _deep_merge(merged, _read_yaml(config_path))

        return merged
    except (OSError, yaml.YAMLError) as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration file structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    # Required top-level sections
    required_sections = ['model', 'detection', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    # Validate model settings
    model = config.get('model') or {}
    if not isinstance(model.get('path'), str) or not model.get('path'):
        return False, "model.path is required"
    input_size = model.get('input_size')
    if input_size is not None:
        if not isinstance(input_size, list) or len(input_size) != 2:
            return False, "model.input_size must be a list of [width, height]"
        if not all(isinstance(x, int) and x > 0 for x in input_size):
            return False, "model.input_size values must be positive integers"
    class_names = model.get('class_names')
    if class_names is not None and not isinstance(class_names, dict):
        return False, "model.class_names must be a mapping of class id to name"

    # Validate detection thresholds
    detection = config.get('detection') or {}
    for key in ('conf_threshold', 'iou_threshold'):
        if key in detection:
            value = detection[key]
            if not _is_number(value) or not (0 <= value <= 1):
                return False, f"detection.{key} must be between 0 and 1"
    if 'max_detections' in detection:
        md = detection['max_detections']
        if isinstance(md, bool) or not isinstance(md, int) or not (0 < md <= MAX_DETECTIONS):
            return False, f"detection.max_detections must be an integer between 1 and {MAX_DETECTIONS}"

    # Optional allocation settings
    allocation = config.get('allocation') or {}
    if allocation.get('cycle_seconds') is not None:
        cycle = allocation['cycle_seconds']
        if not _is_number(cycle) or cycle <= 0:
            return False, "allocation.cycle_seconds must be a positive number"
    weights = allocation.get('pcu_weights')
    if weights is not None:
        if not isinstance(weights, dict):
            return False, "allocation.pcu_weights must be a mapping of class name to weight"
        for name, weight in weights.items():
            if not _is_number(weight) or weight < 0:
                return False, f"allocation.pcu_weights.{name} must be a non-negative number"

    # Validate log settings
    valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    if config['log_level'] not in valid_log_levels:
        return False, f"log_level must be one of: {', '.join(valid_log_levels)}"

    return True, None


def parse_image_args(values: List[str]) -> List[LaneImage]:
    """Turn LANE=PATH (or bare PATH) arguments into LaneImage entries."""
    images = []
    for value in values:
        lane, sep, path = value.partition("=")
        if sep and lane and path:
            images.append(LaneImage.from_path(path, lane_id=lane))
        else:
            images.append(LaneImage.from_path(value))
    return images


def write_annotations(batch: BatchResult, images: List[LaneImage], analyzer: BatchAnalyzer, output_dir: str) -> None:
    """Save a copy of every analysed image with its detections drawn."""
    os.makedirs(output_dir, exist_ok=True)
    by_source = {img.source: img for img in images}
    model_size = analyzer.detector.input_size
    for result in batch.results:
        image = by_source.get(result.source)
        if image is None:
            continue
        try:
            pixels = image.read()
        except ImageDecodeError as e:
            logging.warning(f"Skipping annotation for {result.source}: {e}")
            continue
        annotated = draw_detections(pixels, result.detections, model_size, analyzer.class_names)
        out_path = os.path.join(output_dir, f"{result.lane_id}_{result.source}")
        if not save_annotated(out_path, annotated):
            logging.warning(f"Could not write annotated image {out_path}")


def print_report(batch: BatchResult, cycle_seconds: Optional[float]) -> None:
    seconds = durations_to_seconds(batch.durations, cycle_seconds) if cycle_seconds else {}
    print(f"{'Lane':<20} {'Counts':<40} {'Green %':>8} {'Seconds':>8}")
    for lane, pct in batch.durations.items():
        counts = ", ".join(f"{k}={v}" for k, v in sorted(batch.lane_counts.get(lane, {}).items())) or "-"
        sec = f"{seconds[lane]:.2f}" if lane in seconds else "-"
        print(f"{lane:<20} {counts:<40} {pct:>8.2f} {sec:>8}")
    for failure in batch.failures:
        print(f"FAILED {failure.source} (lane {failure.lane_id}): {failure.error}")


def main():
    """Main application function."""
    # Parse command-line arguments
    parser = argparse.ArgumentParser(description='Traffic Light Allocator')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--image', action='append', default=[],
                        help='LANE=PATH image to analyse (repeatable)')
    parser.add_argument('--demo', action='store_true',
                        help='Analyse the bundled demo images')
    parser.add_argument('--annotate-dir', type=str, default=None,
                        help='Write annotated copies of the images to this directory')
    parser.add_argument('--serve', action='store_true',
                        help='Start the web API')
    args = parser.parse_args()

    # Load configuration
    config = load_config(args.config)

    # Validate configuration
    is_valid, error_msg = validate_config(config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    cfg = Config.from_dict(config)

    # Setup logging
    setup_logging(cfg.log_path, cfg.log_level)
    logging.info("Starting Traffic Light Allocator")

    try:
        model = load_model(cfg.model.path, cfg.model.input_size)
    except ModelLoadError as e:
        logging.error(f"Could not load detection model: {e}")
        sys.exit(1)

    if args.serve:
        import uvicorn
        from web.app import create_app

        logging.info(f"Web API starting on {cfg.web.host}:{cfg.web.port}")
        uvicorn.run(create_app(model, cfg), host=cfg.web.host, port=cfg.web.port, log_level="info")
        return

    images = parse_image_args(args.image)
    if args.demo:
        if not cfg.demo_assets_dir:
            logging.error("demo.assets_dir is not configured")
            sys.exit(1)
        try:
            images.extend(list_demo_images(cfg.demo_assets_dir))
        except FileNotFoundError as e:
            logging.error(str(e))
            sys.exit(1)

    if not images:
        parser.error("no images given (use --image LANE=PATH or --demo)")

    analyzer = BatchAnalyzer(
        model,
        detection_cfg=cfg.detection,
        class_names=cfg.model.class_names,
        pcu_weights=cfg.allocation.pcu_weights,
    )
    try:
        batch = run_batch(analyzer, images)
    except AllocationInputError as e:
        logging.error(f"Allocation failed: {e}")
        sys.exit(1)

    if args.annotate_dir:
        write_annotations(batch, images, analyzer, args.annotate_dir)

    print_report(batch, cfg.allocation.cycle_seconds)
    logging.info("Traffic Light Allocator finished")


if __name__ == "__main__":
    main()
