"""
Tests for scaling and drawing detections.
"""

import numpy as np

from models.detection import BoundingBox, DetectedObject
from visualization.annotate import draw_detections, save_annotated, scale_box


class TestScaleBox:
    def test_scales_each_axis(self):
        box = BoundingBox(x=270, y=295, width=100, height=50)

        scaled = scale_box(box, model_size=(640, 640), display_size=(1280, 320))

        assert scaled == BoundingBox(x=540, y=147.5, width=200, height=25)

    def test_identity(self):
        box = BoundingBox(x=-5, y=10, width=20, height=30)
        assert scale_box(box, (640, 640), (640, 640)) == box


class TestDrawDetections:
    def test_draws_on_a_copy(self):
        image = np.zeros((320, 320, 3), dtype=np.uint8)
        det = DetectedObject(class_id=1, confidence=0.9, bounding_box=BoundingBox(100, 100, 200, 200))

        annotated = draw_detections(image, [det], (640, 640), {1: "car"})

        assert image.sum() == 0
        assert annotated.sum() > 0
        # box edge lands at 50px after scaling 640 -> 320
        assert annotated[100, 50].tolist() == [0, 200, 0]

    def test_no_detections(self):
        image = np.full((10, 10, 3), 7, dtype=np.uint8)
        assert np.array_equal(draw_detections(image, [], (640, 640)), image)

    def test_save(self, tmp_path):
        path = tmp_path / "out.png"
        assert save_annotated(str(path), np.zeros((4, 4, 3), dtype=np.uint8))
        assert path.exists()
