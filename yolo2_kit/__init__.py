"""
Decoding helpers for YOLOv2-style grid detectors.

Turns the raw (channels, rows, cols) output of a Tiny YOLOv2 export into a
list of labelled boxes. The decoder itself only needs NumPy; OpenCV is used
for resizing/drawing and ONNX Runtime for the optional inference backend.
"""

from .types import Detection
from .errors import DetectorConfigError, OffsetOutOfRangeError, TensorSizeError
from .config import DetectorConfig, load_detector_config, load_labels
from .offset import OffsetIndexer, grid_offset
from .activations import sigmoid, softmax
from .box_decoder import AnchorSlot, BoxDecoder, decode, decode_slot, iter_anchor_slots
from .markers import Marker, filter_by_label, markers_for_label
from .preprocess import make_blob
from .visualize import draw_detections
from .runtime import DetectionPipeline, FrameResult, NodeConfig, load_pipeline

__all__ = [
    "Detection",
    "DetectorConfigError",
    "OffsetOutOfRangeError",
    "TensorSizeError",
    "DetectorConfig",
    "load_detector_config",
    "load_labels",
    "OffsetIndexer",
    "grid_offset",
    "sigmoid",
    "softmax",
    "AnchorSlot",
    "BoxDecoder",
    "decode",
    "decode_slot",
    "iter_anchor_slots",
    "Marker",
    "filter_by_label",
    "markers_for_label",
    "make_blob",
    "draw_detections",
    "DetectionPipeline",
    "FrameResult",
    "NodeConfig",
    "load_pipeline",
]
