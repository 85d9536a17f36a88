from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

import numpy as np

from .config import DetectorConfig
from .box_decoder import BoxDecoder
from .markers import Marker, filter_by_label, markers_for_label
from .preprocess import make_blob
from .types import Detection
from .visualize import draw_detections

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class NodeConfig:
    """
    Runtime parameters of a detection node.

    - confidence: threshold for both objectness and combined score
    - label: only detections with this label produce markers
    - debug: draw rectangles for matched detections on the output image
    - frame_id: coordinate frame stamped on markers
    - normalize: scale input pixels to 0..1 (Tiny YOLOv2 expects 0..255)
    """

    confidence: float = 0.3
    label: str = "person"
    debug: bool = False
    frame_id: str = "camera"
    normalize: bool = False

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be in [0.0, 1.0], got {self.confidence}")
        if not self.label:
            raise ValueError("label must not be empty")


@dataclass(frozen=True)
class FrameResult:
    detections: List[Detection]
    markers: List[Marker]
    # Resized network-input frame; carries debug rectangles when enabled.
    image: np.ndarray
    matched: List[Detection] = field(default_factory=list)


class DetectionPipeline:
    """
    preprocess (resize) -> inference -> grid decode -> label markers.

    `infer_fn` takes the (1, 3, H, W) blob and returns the raw grid tensor;
    any shape holding `detector_config.tensor_length` values is accepted.
    """

    def __init__(
        self,
        infer_fn: Callable[[np.ndarray], np.ndarray],
        detector_config: Optional[DetectorConfig] = None,
        node_config: NodeConfig = NodeConfig(),
        *,
        backend: Optional[object] = None,
    ):
        self._infer_fn = infer_fn
        self.backend = backend
        self.detector_config = detector_config or DetectorConfig.tiny_yolo_voc()
        self.node_config = node_config
        self.decoder = BoxDecoder(self.detector_config, node_config.confidence)

    def detect(self, image_bgr: np.ndarray) -> List[Detection]:
        prep = make_blob(image_bgr, self.detector_config.input_size, normalize=self.node_config.normalize)
        return self.decoder(self._infer_fn(prep.blob))

    def __call__(self, image_bgr: np.ndarray) -> FrameResult:
        cfg = self.node_config
        prep = make_blob(image_bgr, self.detector_config.input_size, normalize=cfg.normalize)
        detections = self.decoder(self._infer_fn(prep.blob))

        matched = filter_by_label(detections, cfg.label)
        markers = markers_for_label(matched, cfg.label, cfg.frame_id)
        image = prep.resized
        if cfg.debug and matched:
            logger.info("matched label: %s (%d detections)", cfg.label, len(matched))
            image = draw_detections(image, matched)

        return FrameResult(detections=detections, markers=markers, image=image, matched=matched)


def resolve_path(path: PathLike, root: Optional[PathLike] = None) -> Path:
    """Absolute paths are returned as-is; relative ones resolve against `root` (default: cwd)."""
    p = Path(path)
    if p.is_absolute():
        return p
    base = Path(root) if root is not None else Path.cwd()
    return (base / p).resolve()


def load_pipeline(
    model_path: PathLike,
    *,
    detector_config: Optional[DetectorConfig] = None,
    node_config: NodeConfig = NodeConfig(),
    root: Optional[PathLike] = None,
    onnx_providers: Optional[Sequence[str]] = None,
    onnx_input_name: Optional[str] = None,
    onnx_output_name: Optional[str] = None,
) -> DetectionPipeline:
    """
    Create a pipeline for an ONNX YOLOv2 model on disk.

        pipe = load_pipeline("models/tinyyolov2-8.onnx")
        result = pipe(frame)
    """

    resolved = resolve_path(model_path, root=root)
    if resolved.suffix.lower() != ".onnx":
        raise ValueError(f"Only .onnx models are supported, got '{resolved.suffix}'")

    from .backends.onnxruntime_backend import OnnxRuntimeBackend, OnnxRuntimeBackendConfig

    backend = OnnxRuntimeBackend(
        resolved,
        OnnxRuntimeBackendConfig(
            providers=onnx_providers,
            input_name=onnx_input_name,
            output_name=onnx_output_name,
        ),
    )
    return DetectionPipeline(
        backend.infer,
        detector_config,
        node_config,
        backend=backend,
    )
