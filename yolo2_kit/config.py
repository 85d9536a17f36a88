from __future__ import annotations

import json
import logging
import math
import numbers
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Sequence, Tuple, Union

from .errors import DetectorConfigError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Fixed per-anchor fields: tx, ty, tw, th, objectness logit.
BOX_INFO_FEATURE_COUNT = 5

VOC_LABELS: Tuple[str, ...] = (
    "aeroplane", "bicycle", "bird", "boat", "bottle",
    "bus", "car", "cat", "chair", "cow",
    "diningtable", "dog", "horse", "motorbike", "person",
    "pottedplant", "sheep", "sofa", "train", "tvmonitor",
)

TINY_YOLO_VOC_ANCHORS: Tuple[Tuple[float, float], ...] = (
    (1.08, 1.19),
    (3.42, 4.41),
    (6.63, 11.38),
    (9.42, 5.11),
    (16.62, 10.52),
)


@dataclass(frozen=True)
class DetectorConfig:
    """
    Output geometry of a YOLOv2-style grid detector.

    `channels` must equal `anchors_per_cell * (5 + class_count)`; anchors are
    (width_scale, height_scale) pairs in cell units and `labels[i]` names
    class id `i`.
    """

    rows: int
    cols: int
    anchors_per_cell: int
    class_count: int
    channels: int
    cell_width: float
    cell_height: float
    anchors: Tuple[Tuple[float, float], ...]
    labels: Tuple[str, ...]

    def __post_init__(self) -> None:
        # Lists coming from JSON or callers are frozen into tuples.
        object.__setattr__(self, "anchors", tuple((float(w), float(h)) for w, h in _pairs(self.anchors)))
        if isinstance(self.labels, (str, bytes)) or not isinstance(self.labels, (list, tuple)):
            raise DetectorConfigError(f"labels must be a sequence of strings, got {self.labels!r}")
        object.__setattr__(self, "labels", tuple(str(label) for label in self.labels))

        for key in ("rows", "cols", "anchors_per_cell", "class_count", "channels"):
            value = getattr(self, key)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise DetectorConfigError(f"{key} must be a positive integer, got {value!r}")
        _positive_real(self.cell_width, "cell_width")
        _positive_real(self.cell_height, "cell_height")

        expected_channels = self.anchors_per_cell * self.features_per_anchor
        if self.channels != expected_channels:
            raise DetectorConfigError(
                f"channels must equal anchors_per_cell * (5 + class_count) = {expected_channels}, "
                f"got {self.channels}"
            )
        if len(self.anchors) != self.anchors_per_cell:
            raise DetectorConfigError(
                f"expected {self.anchors_per_cell} anchors, got {len(self.anchors)}"
            )
        if len(self.labels) != self.class_count:
            raise DetectorConfigError(
                f"expected {self.class_count} labels, got {len(self.labels)}"
            )

    @property
    def features_per_anchor(self) -> int:
        return BOX_INFO_FEATURE_COUNT + self.class_count

    @property
    def tensor_length(self) -> int:
        return self.channels * self.rows * self.cols

    @property
    def input_size(self) -> Tuple[int, int]:
        """(width, height) of the network input in pixels."""
        return int(round(self.cols * self.cell_width)), int(round(self.rows * self.cell_height))

    @classmethod
    def tiny_yolo_voc(cls) -> "DetectorConfig":
        """Tiny YOLOv2 trained on Pascal VOC: 125x13x13 output, 416x416 input."""
        return cls(
            rows=13,
            cols=13,
            anchors_per_cell=len(TINY_YOLO_VOC_ANCHORS),
            class_count=len(VOC_LABELS),
            channels=len(TINY_YOLO_VOC_ANCHORS) * (BOX_INFO_FEATURE_COUNT + len(VOC_LABELS)),
            cell_width=32.0,
            cell_height=32.0,
            anchors=TINY_YOLO_VOC_ANCHORS,
            labels=VOC_LABELS,
        )


def _positive_real(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise DetectorConfigError(f"{key} must be a number, got {value!r}")
    if not math.isfinite(value) or value <= 0:
        raise DetectorConfigError(f"{key} must be a positive finite number, got {value!r}")
    return float(value)


def _pairs(value: Any) -> Sequence[Tuple[Any, Any]]:
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
        raise DetectorConfigError(f"anchors must be a sequence of (width, height) pairs, got {value!r}")
    pairs = []
    for item in value:
        if isinstance(item, (str, bytes)) or not isinstance(item, (list, tuple)) or len(item) != 2:
            raise DetectorConfigError(f"anchor must be a (width, height) pair, got {item!r}")
        pairs.append((_positive_real(item[0], "anchor width"), _positive_real(item[1], "anchor height")))
    return pairs


def _require_int(payload: Dict[str, Any], key: str) -> int:
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise DetectorConfigError(f"{key} must be an integer")
    return int(value)


def _require_number(payload: Dict[str, Any], key: str) -> float:
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DetectorConfigError(f"{key} must be a number")
    return float(value)


def _require_anchors(payload: Dict[str, Any]) -> list:
    value = payload["anchors"]
    if not isinstance(value, list) or not all(isinstance(item, list) for item in value):
        raise DetectorConfigError("anchors must be a list of [width, height] pairs")
    for item in value:
        if any(isinstance(v, bool) or not isinstance(v, (int, float)) for v in item):
            raise DetectorConfigError(f"anchor values must be numbers, got {item!r}")
    return value


def load_detector_config(path: PathLike) -> DetectorConfig:
    """
    Load a `DetectorConfig` from JSON.

    Keys missing from the file keep the Tiny YOLOv2 VOC value, so a file only
    has to list what differs (e.g. a custom label set with matching
    class_count/channels).
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Detector config not found: {path}")
    raw = path.read_text(encoding="utf-8")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise DetectorConfigError(f"Invalid detector config JSON: {path}") from exc
    if not isinstance(payload, dict):
        raise DetectorConfigError("Detector config must be a JSON object")

    allowed = {
        "rows",
        "cols",
        "anchors_per_cell",
        "class_count",
        "channels",
        "cell_width",
        "cell_height",
        "anchors",
        "labels",
    }
    unknown = sorted(set(payload.keys()) - allowed)
    if unknown:
        raise DetectorConfigError(f"Unknown detector config keys: {unknown}")

    default = DetectorConfig.tiny_yolo_voc()
    kwargs: Dict[str, Any] = {}
    for key in ("rows", "cols", "anchors_per_cell", "class_count", "channels"):
        kwargs[key] = _require_int(payload, key) if key in payload else getattr(default, key)
    for key in ("cell_width", "cell_height"):
        kwargs[key] = _require_number(payload, key) if key in payload else getattr(default, key)

    kwargs["anchors"] = _require_anchors(payload) if "anchors" in payload else default.anchors

    labels = payload.get("labels", default.labels)
    if not isinstance(labels, (list, tuple)) or not all(isinstance(label, str) for label in labels):
        raise DetectorConfigError("labels must be a list of strings")
    kwargs["labels"] = labels

    config = DetectorConfig(**kwargs)
    logger.debug("Loaded detector config from %s: %dx%d grid, %d anchors, %d classes",
                 path, config.rows, config.cols, config.anchors_per_cell, config.class_count)
    return config


def load_labels(path: PathLike) -> Tuple[str, ...]:
    """
    Read class labels from a text file, one per line (line order = class id).

    Blank lines and lines starting with `#` are skipped.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Labels file not found: {path}")

    labels = []
    with open(path, "r", encoding="utf-8") as f:
        for raw in f:
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            labels.append(line)
    return tuple(labels)
