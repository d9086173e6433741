"""
Tests for image decoding and lane naming.
"""

import numpy as np
import pytest

from errors import ImageDecodeError
from observation.images import (
    LaneImage,
    decode_image,
    lane_id_from_name,
    list_demo_images,
    load_image,
)

from conftest import encode_png


class TestDecode:
    def test_decodes_to_rgb(self):
        image = np.zeros((8, 8, 3), dtype=np.uint8)
        image[..., 0] = 255  # red in RGB

        decoded = decode_image(encode_png(image))

        assert decoded.shape == (8, 8, 3)
        assert decoded[0, 0].tolist() == [255, 0, 0]

    def test_empty_bytes(self):
        with pytest.raises(ImageDecodeError):
            decode_image(b"")

    def test_garbage_bytes(self):
        with pytest.raises(ImageDecodeError):
            decode_image(b"definitely not a jpeg")

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ImageDecodeError):
            load_image(str(tmp_path / "missing.jpg"))

    def test_load_file(self, tmp_path, png_bytes):
        path = tmp_path / "lane.png"
        path.write_bytes(png_bytes)
        assert load_image(str(path)).shape == (48, 64, 3)


class TestLaneIds:
    @pytest.mark.parametrize("name,expected", [
        ("north.jpg", "north"),
        ("north_2.jpg", "north_2"),
        ("north-10.png", "north-10"),
        ("/tmp/demo/Lane_A_03.jpg", "Lane_A_03"),
        ("lane.v2.jpeg", "lane.v2"),
        ("jalur1.jpg", "jalur1"),
        ("42.jpg", "42"),
    ])
    def test_lane_id_from_name(self, name, expected):
        assert lane_id_from_name(name) == expected

    def test_numbered_lanes_stay_separate(self, png_bytes):
        images = [LaneImage.from_bytes(f"lane_{i}.jpg", png_bytes) for i in (1, 2, 3)]
        assert [i.lane_id for i in images] == ["lane_1", "lane_2", "lane_3"]

    def test_explicit_lane_wins(self, png_bytes):
        image = LaneImage.from_bytes("north.png", png_bytes, lane_id="east")
        assert image.lane_id == "east"
        assert image.source == "north.png"

    def test_read_without_data(self):
        with pytest.raises(ImageDecodeError):
            LaneImage(lane_id="a", source="a.jpg").read()


class TestDemoImages:
    def test_lists_images_sorted(self, demo_dir):
        images = list_demo_images(str(demo_dir))

        assert [i.source for i in images] == ["north.png", "south.png"]
        assert [i.lane_id for i in images] == ["north", "south"]
        assert images[0].read().shape == (48, 64, 3)

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            list_demo_images(str(tmp_path / "nope"))
