#!/usr/bin/env python3
"""
Export an Ultralytics YOLOv8 checkpoint to the ONNX file the allocator loads.

The exported graph returns the raw [1, 4 + num_classes, N] tensor; NMS is
done by the allocator itself, so it must not be baked into the export.

Usage:
    python tools/export_onnx.py --weights runs/detect/train/weights/best.pt
    python tools/export_onnx.py --weights best.pt --imgsz 640 --output data/artifacts/yolov8n_traffic.onnx
"""

import argparse
import os
import shutil
import sys


def export(weights: str, imgsz: int, output: str) -> int:
    try:
        from ultralytics import YOLO
    except ImportError:
        print("❌ Ultralytics not installed!")
        print("   Install with: pip install -e .[export]")
        return 1

    if not os.path.exists(weights):
        print(f"❌ Weights not found: {weights}")
        return 1

    print(f"📦 Loading checkpoint: {weights}")
    model = YOLO(weights)
    print(f"   Classes: {model.names}")

    exported = model.export(format="onnx", imgsz=imgsz, nms=False, dynamic=False, simplify=True)
    print(f"   Exported to: {exported}")

    out_dir = os.path.dirname(output)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    shutil.copyfile(exported, output)
    print(f"✅ Saved model to: {output}")
    print("   Set model.class_names in config/config.yaml to:")
    for class_id, name in sorted(model.names.items()):
        print(f"     {class_id}: \"{name}\"")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Export YOLOv8 weights to ONNX")
    parser.add_argument("--weights", required=True, help="Path to a .pt checkpoint")
    parser.add_argument("--imgsz", type=int, default=640, help="Square model input size")
    parser.add_argument("--output", default="data/artifacts/yolov8n_traffic.onnx",
                        help="Where to write the .onnx file")
    args = parser.parse_args()
    return export(args.weights, args.imgsz, args.output)


if __name__ == "__main__":
    sys.exit(main())
