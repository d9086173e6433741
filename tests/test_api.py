"""
Tests for the web API endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from models.config import Config
from web.app import create_app

from conftest import StubModel, make_output


@pytest.fixture
def model():
    return StubModel(make_output([
        (100, 100, 50, 50, 1, 0.9),
        (400, 400, 60, 40, 0, 0.8),
    ]))


@pytest.fixture
def client(model):
    cfg = Config.from_dict({"allocation": {"cycle_seconds": 60}})
    return TestClient(create_app(model, cfg))


@pytest.fixture
def no_model_client():
    return TestClient(create_app(None))


class TestHealth:
    def test_model_loaded(self, client):
        resp = client.get("/api/health")

        assert resp.status_code == 200
        body = resp.json()
        assert body["model_loaded"] is True
        assert body["input_size"] == [640, 640]
        assert body["class_names"] == {"0": "motorcycle", "1": "car"}

    def test_no_model(self, no_model_client):
        body = no_model_client.get("/api/health").json()
        assert body["status"] == "no_model"
        assert body["model_loaded"] is False


class TestAllocate:
    def test_returns_durations_and_seconds(self, client):
        resp = client.post("/api/allocate", json={
            "lane_counts": {"A": {"car": 4}, "B": {"motorcycle": 4}},
        })

        assert resp.status_code == 200
        body = resp.json()
        assert body["durations"] == {"A": 80.0, "B": 20.0}
        assert body["seconds"] == {"A": 48.0, "B": 12.0}

    def test_request_cycle_overrides_config(self, client):
        body = client.post("/api/allocate", json={
            "lane_counts": {"A": {"car": 1}, "B": {"car": 1}},
            "cycle_seconds": 100,
        }).json()

        assert body["seconds"] == {"A": 50.0, "B": 50.0}

    def test_works_without_model(self, no_model_client):
        body = no_model_client.post("/api/allocate", json={"lane_counts": {"X": {}}}).json()

        assert body["durations"] == {"X": 0}
        assert body["seconds"] is None

    def test_negative_count_rejected(self, client):
        resp = client.post("/api/allocate", json={"lane_counts": {"A": {"car": -2}}})
        assert resp.status_code == 422

    def test_overflowing_volume_rejected(self, client):
        resp = client.post("/api/allocate", json={
            "lane_counts": {"A": {"truck": 10 ** 308}, "B": {"car": 1}},
        })
        assert resp.status_code == 422


class TestDetect:
    def test_single_image(self, client, png_bytes):
        resp = client.post("/api/detect", files={"file": ("north_1.png", png_bytes, "image/png")})

        assert resp.status_code == 200
        body = resp.json()
        assert body["lane_id"] == "north_1"
        assert body["input_size"] == [640, 640]
        assert body["counts"] == {"car": 1, "motorcycle": 1}
        first = body["detections"][0]
        assert first["class_name"] == "car"
        assert first["bounding_box"] == {"x": 75.0, "y": 75.0, "width": 50.0, "height": 50.0}

    def test_explicit_lane(self, client, png_bytes):
        resp = client.post(
            "/api/detect",
            files={"file": ("img.png", png_bytes, "image/png")},
            data={"lane": "west"},
        )
        assert resp.json()["lane_id"] == "west"

    def test_undecodable_image(self, client):
        resp = client.post("/api/detect", files={"file": ("bad.jpg", b"garbage", "image/jpeg")})
        assert resp.status_code == 400

    def test_no_model(self, no_model_client, png_bytes):
        resp = no_model_client.post("/api/detect", files={"file": ("a.png", png_bytes, "image/png")})
        assert resp.status_code == 503


class TestAnalyze:
    def test_lanes_from_file_names(self, client, png_bytes):
        resp = client.post("/api/analyze", files=[
            ("files", ("north.png", png_bytes, "image/png")),
            ("files", ("south.png", png_bytes, "image/png")),
            ("files", ("east.png", b"broken", "image/png")),
        ])

        assert resp.status_code == 200
        body = resp.json()
        assert body["durations"] == {"north": 50.0, "south": 50.0}
        assert body["seconds"] == {"north": 30.0, "south": 30.0}
        assert [f["lane_id"] for f in body["failures"]] == ["east"]
        assert body["lane_counts"]["north"] == {"car": 1, "motorcycle": 1}

    def test_numbered_file_names_are_separate_lanes(self, client, png_bytes):
        body = client.post("/api/analyze", files=[
            ("files", ("lane_1.png", png_bytes, "image/png")),
            ("files", ("lane_2.png", png_bytes, "image/png")),
        ]).json()

        assert body["durations"] == {"lane_1": 50.0, "lane_2": 50.0}

    def test_explicit_lanes(self, client, png_bytes):
        resp = client.post(
            "/api/analyze",
            files=[
                ("files", ("a.png", png_bytes, "image/png")),
                ("files", ("b.png", png_bytes, "image/png")),
            ],
            data={"lanes": ["left", "left"]},
        )

        body = resp.json()
        assert body["lane_counts"] == {"left": {"car": 2, "motorcycle": 2}}
        assert body["durations"] == {"left": 100.0}

    def test_lane_count_mismatch(self, client, png_bytes):
        resp = client.post(
            "/api/analyze",
            files=[("files", ("a.png", png_bytes, "image/png"))],
            data={"lanes": ["x", "y"]},
        )
        assert resp.status_code == 422


class TestDemo:
    def test_runs_on_demo_assets(self, model, demo_dir):
        cfg = Config.from_dict({"demo": {"assets_dir": str(demo_dir)}})
        client = TestClient(create_app(model, cfg))

        body = client.post("/api/demo").json()

        assert body["durations"] == {"north": 50.0, "south": 50.0}
        assert body["seconds"] is None

    def test_missing_demo_dir(self, model, tmp_path):
        cfg = Config.from_dict({"demo": {"assets_dir": str(tmp_path / "missing")}})
        client = TestClient(create_app(model, cfg))

        assert client.post("/api/demo").status_code == 404

    def test_not_configured(self, client):
        assert client.post("/api/demo").status_code == 404
