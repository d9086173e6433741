"""
Post-processing for raw YOLOv8 detection output.

The raw output has one column per candidate box and 4 + num_classes rows:
center x, center y, width, height, then one score per class. Everything here
works on plain numpy arrays and index loops so it is independent of the
inference backend.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

from errors import InferenceError

MAX_DETECTIONS = 100


def decode_predictions(output: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Split a raw output tensor into boxes, confidences and class ids.

    Args:
        output: Array of shape (1, 4 + C, N) or (4 + C, N).

    Returns:
        Tuple of (boxes (N, 4) as cx, cy, w, h; scores (N,); class_ids (N,)).
        The score of a candidate is its best class score and the class id is
        the index of that score (first index on ties).

    Raises:
        InferenceError: If the array cannot be read as a YOLO output.
    """
    arr = np.asarray(output)
    if arr.ndim == 3:
        if arr.shape[0] != 1:
            raise InferenceError(f"Expected a batch of one, got output shape {arr.shape}")
        arr = arr[0]
    if arr.ndim != 2 or arr.shape[0] < 5:
        raise InferenceError(f"Unexpected model output shape {np.shape(output)}")

    # (4 + C, N) -> (N, 4 + C): one row per candidate
    candidates = arr.T
    boxes = candidates[:, :4]
    class_scores = candidates[:, 4:]

    scores = class_scores.max(axis=1)
    class_ids = class_scores.argmax(axis=1)
    return boxes, scores, class_ids


def center_to_corners(boxes: np.ndarray) -> np.ndarray:
    """Convert (cx, cy, w, h) rows to (y1, x1, y2, x2) rows."""
    boxes = np.asarray(boxes, dtype=np.float64).reshape(-1, 4)
    cx, cy, w, h = boxes[:, 0], boxes[:, 1], boxes[:, 2], boxes[:, 3]
    return np.stack(
        [cy - h / 2, cx - w / 2, cy + h / 2, cx + w / 2],
        axis=1,
    )


def calculate_iou(box1: Sequence[float], box2: Sequence[float]) -> float:
    """
    Calculate Intersection over Union (IoU) between two corner-form boxes.

    Args:
        box1: First box (y1, x1, y2, x2)
        box2: Second box (y1, x1, y2, x2)

    Returns:
        IoU value between 0 and 1. Degenerate boxes (zero area) give 0.
    """
    ymin1, ymax1 = min(box1[0], box1[2]), max(box1[0], box1[2])
    xmin1, xmax1 = min(box1[1], box1[3]), max(box1[1], box1[3])
    ymin2, ymax2 = min(box2[0], box2[2]), max(box2[0], box2[2])
    xmin2, xmax2 = min(box2[1], box2[3]), max(box2[1], box2[3])

    area1 = (ymax1 - ymin1) * (xmax1 - xmin1)
    area2 = (ymax2 - ymin2) * (xmax2 - xmin2)
    if area1 <= 0 or area2 <= 0:
        return 0.0

    inter_h = max(min(ymax1, ymax2) - max(ymin1, ymin2), 0.0)
    inter_w = max(min(xmax1, xmax2) - max(xmin1, xmin2), 0.0)
    intersection = inter_h * inter_w

    return float(intersection / (area1 + area2 - intersection))


def non_max_suppression(
    corners: np.ndarray,
    scores: np.ndarray,
    max_output_size: int = MAX_DETECTIONS,
    iou_threshold: float = 0.45,
    score_threshold: float = 0.09,
) -> List[int]:
    """
    Greedy non-max suppression.

    Candidates scoring below score_threshold are dropped first. The rest are
    visited from the highest score down (lower index first on equal scores)
    and a candidate is kept only if its IoU with every kept box is below
    iou_threshold.

    Returns:
        Indices of kept candidates in the order they survived.
    """
    scores = np.asarray(scores)
    order = [i for i in range(len(scores)) if scores[i] >= score_threshold]
    # sorted() is stable, so ties keep index order
    order = sorted(order, key=lambda i: -float(scores[i]))

    selected: List[int] = []
    for i in order:
        if len(selected) >= max_output_size:
            break
        if all(calculate_iou(corners[i], corners[j]) < iou_threshold for j in selected):
            selected.append(i)
    return selected
