# test/test_detector.py
import asyncio

import numpy as np
import pytest

pytest.importorskip("ultralytics")

from advisor.detectors import yolo_detector
from advisor.detectors.yolo_detector import YoloDetector
from advisor.utils.model_io import ensure_local_model, resolve_model_path


class _Arr:
    def __init__(self, values):
        self.values = np.asarray(values, dtype=np.float32)

    def cpu(self):
        return self

    def numpy(self):
        return self.values


class _Boxes:
    xyxy = _Arr([[10, 20, 50, 120], [100, 100, 300, 300]])
    conf = _Arr([0.8, 0.4])
    cls = _Arr([9, 0])


class _Result:
    boxes = _Boxes()
    names = {0: "person", 9: "traffic light"}


class _FakeYOLO:
    def __init__(self, model_path):
        self.model_path = model_path
        self.names = _Result.names

    def predict(self, frame, **kwargs):
        return [_Result()]


@pytest.fixture
def detector(monkeypatch):
    monkeypatch.setattr(yolo_detector, "YOLO", _FakeYOLO)
    return YoloDetector(model_path="fake.pt", device="cpu")


def test_infer_converts_boxes_to_xywh(detector):
    dets = detector.infer(np.zeros((480, 640, 3), dtype=np.uint8))
    assert [d.label for d in dets] == ["traffic light", "person"]
    assert dets[0].bbox == (10.0, 20.0, 40.0, 100.0)
    assert dets[1].score == pytest.approx(0.4)


def test_detect_is_awaitable(detector):
    dets = asyncio.run(detector.detect(np.zeros((480, 640, 3), dtype=np.uint8)))
    assert len(dets) == 2


def test_ensure_local_model_existing_and_missing(tmp_path):
    existing = tmp_path / "w.pt"
    existing.write_bytes(b"x")
    assert ensure_local_model(str(existing), None) is True
    assert ensure_local_model(str(tmp_path / "missing.pt"), None) is False


def test_resolve_model_path_without_weights(tmp_path, monkeypatch):
    monkeypatch.delenv("YOLO_MODEL_URL", raising=False)
    with pytest.raises(FileNotFoundError):
        resolve_model_path({"yolo_path": str(tmp_path / "none.pt")})


def test_pipeline_from_config(tmp_path, monkeypatch):
    from advisor.pipeline import FramePipeline
    from advisor.sinks.speech import LoggingSink

    monkeypatch.setattr(yolo_detector, "YOLO", _FakeYOLO)
    weights = tmp_path / "w.pt"
    weights.write_bytes(b"x")
    scene = tmp_path / "scene.yaml"
    scene.write_text(
        f"models:\n  yolo_path: {weights}\n"
        "yolo:\n  device: cpu\n"
        "perception:\n  stop_distance_m: 3.0\n"
        "notification:\n  lang: en-US\n  speech: false\n",
        encoding="utf-8",
    )
    pipe = FramePipeline.from_config(str(scene), yolo_conf=0.5)
    assert isinstance(pipe.sink, LoggingSink)
    assert pipe.detector.conf == 0.5
    assert pipe.interpreter.stop_distance_m == 3.0
    assert pipe.debouncer.lang == "en-US"
