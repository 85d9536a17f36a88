import importlib.util
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import numpy as np

from _grid import small_config
from yolo2_kit import runtime
from yolo2_kit.config import DetectorConfig
from yolo2_kit.preprocess import make_blob
from yolo2_kit.runtime import DetectionPipeline, NodeConfig, load_pipeline, resolve_path

HAS_CV2 = importlib.util.find_spec("cv2") is not None


class _FakeGrid:
    def __init__(self, tensor: np.ndarray):
        self.tensor = tensor
        self.blobs = []

    def __call__(self, blob: np.ndarray) -> np.ndarray:
        self.blobs.append(blob)
        return self.tensor


class TestNodeConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        cfg = NodeConfig()
        self.assertEqual(cfg.label, "person")
        self.assertFalse(cfg.debug)
        self.assertFalse(cfg.normalize)

    def test_invalid(self) -> None:
        with self.assertRaises(ValueError):
            NodeConfig(confidence=1.5)
        with self.assertRaises(ValueError):
            NodeConfig(label="")


@unittest.skipUnless(HAS_CV2, "OpenCV not installed")
class TestDetectionPipeline(unittest.TestCase):
    def setUp(self) -> None:
        self.image = np.full((240, 320, 3), 200, dtype=np.uint8)
        self.infer = _FakeGrid(np.zeros((1, 125, 13, 13), dtype=np.float32))

    def test_blob_layout(self) -> None:
        pipe = DetectionPipeline(self.infer, node_config=NodeConfig(confidence=0.4))
        self.assertEqual(pipe.detect(self.image), [])
        (blob,) = self.infer.blobs
        self.assertEqual(blob.shape, (1, 3, 416, 416))
        self.assertEqual(blob.dtype, np.float32)
        self.assertEqual(float(blob.max()), 200.0)

    def test_normalize(self) -> None:
        pipe = DetectionPipeline(self.infer, node_config=NodeConfig(normalize=True))
        pipe.detect(self.image)
        self.assertAlmostEqual(float(self.infer.blobs[0].max()), 200.0 / 255.0, places=6)

    def test_markers_for_target_label(self) -> None:
        pipe = DetectionPipeline(self.infer, node_config=NodeConfig(confidence=0.02, label="aeroplane"))
        result = pipe(self.image)
        self.assertEqual(len(result.detections), 845)
        self.assertEqual(len(result.markers), 845)
        self.assertEqual(result.markers[-1].id, 844)
        self.assertEqual(result.image.shape, (416, 416, 3))

    def test_no_markers_for_other_label(self) -> None:
        pipe = DetectionPipeline(self.infer, node_config=NodeConfig(confidence=0.02, label="person", debug=True))
        result = pipe(self.image)
        self.assertEqual(len(result.detections), 845)
        self.assertEqual(result.markers, [])
        self.assertEqual(result.matched, [])
        self.assertTrue(np.all(result.image == 200))

    def test_debug_draws_matched(self) -> None:
        pipe = DetectionPipeline(self.infer, node_config=NodeConfig(confidence=0.02, label="aeroplane", debug=True))
        result = pipe(self.image)
        self.assertFalse(np.all(result.image == 200))

    def test_without_debug_frame_is_clean_and_quiet(self) -> None:
        pipe = DetectionPipeline(self.infer, node_config=NodeConfig(confidence=0.02, label="aeroplane"))
        with mock.patch.object(runtime.logger, "info") as info:
            result = pipe(self.image)
        self.assertEqual(len(result.matched), 845)
        self.assertTrue(np.all(result.image == 200))
        info.assert_not_called()

    def test_debug_logs_match(self) -> None:
        pipe = DetectionPipeline(self.infer, node_config=NodeConfig(confidence=0.02, label="aeroplane", debug=True))
        with self.assertLogs("yolo2_kit.runtime", level="INFO") as logs:
            pipe(self.image)
        self.assertIn("matched label: aeroplane", logs.output[0])

    def test_make_blob_returns_resized_frame(self) -> None:
        prep = make_blob(self.image, (64, 32))
        self.assertEqual(prep.resized.shape, (32, 64, 3))
        self.assertEqual(prep.blob.shape, (1, 3, 32, 64))
        self.assertFalse(hasattr(prep, "orig_size"))

    def test_custom_geometry(self) -> None:
        cfg = small_config(rows=2, cols=2)
        infer = _FakeGrid(np.zeros(cfg.tensor_length, dtype=np.float32))
        pipe = DetectionPipeline(infer, cfg, NodeConfig(confidence=0.2, label="cat"))
        result = pipe(self.image)
        self.assertEqual(infer.blobs[0].shape, (1, 3, 64, 64))
        self.assertEqual([m.position for m in result.markers][:2], [(16.0, 16.0, 0.0), (48.0, 16.0, 0.0)])

    def test_rejects_non_bgr(self) -> None:
        pipe = DetectionPipeline(self.infer)
        with self.assertRaises(ValueError):
            pipe(np.zeros((10, 10), dtype=np.uint8))


class TestLoadPipeline(unittest.TestCase):
    def test_resolve_path(self) -> None:
        root = Path(tempfile.gettempdir()).resolve()
        self.assertEqual(resolve_path("m.onnx", root=root), root / "m.onnx")
        self.assertEqual(resolve_path(root / "x.onnx"), root / "x.onnx")

    def test_rejects_non_onnx(self) -> None:
        with self.assertRaises(ValueError):
            load_pipeline("model.engine")

    def test_default_geometry(self) -> None:
        pipe = DetectionPipeline(lambda blob: blob)
        self.assertEqual(pipe.detector_config, DetectorConfig.tiny_yolo_voc())


if __name__ == "__main__":
    unittest.main()
