from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Union

import numpy as np

from .activations import sigmoid, softmax
from .config import BOX_INFO_FEATURE_COUNT, DetectorConfig
from .errors import TensorSizeError
from .offset import OffsetIndexer
from .types import Detection

logger = logging.getLogger(__name__)

TensorLike = Union[Sequence[float], np.ndarray]


@dataclass(frozen=True)
class AnchorSlot:
    """One (cell, anchor) pair of the grid; `channel_base` is its tx channel."""

    cell_x: int
    cell_y: int
    anchor_index: int
    channel_base: int


def iter_anchor_slots(config: DetectorConfig) -> Iterator[AnchorSlot]:
    """Yield every slot in row-major order: cell_y outer, cell_x middle, anchor inner."""
    for cy in range(config.rows):
        for cx in range(config.cols):
            for b in range(config.anchors_per_cell):
                yield AnchorSlot(cx, cy, b, b * config.features_per_anchor)


def flatten_tensor(tensor: TensorLike, config: DetectorConfig) -> np.ndarray:
    """
    Flatten the raw network output and check its length.

    Any shape is accepted as long as it holds exactly `config.tensor_length`
    values, e.g. (125,), (125, 13, 13) or (1, 125, 13, 13). A batch of more
    than one frame fails the length check.
    """

    flat = np.asarray(tensor).reshape(-1)
    if flat.size != config.tensor_length:
        raise TensorSizeError(
            f"Expected {config.tensor_length} values "
            f"({config.channels}x{config.rows}x{config.cols}), got {flat.size} "
            f"(shape {np.shape(tensor)})"
        )
    return flat


def _check_threshold(threshold: float) -> float:
    threshold = float(threshold)
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"threshold must be in [0.0, 1.0], got {threshold}")
    return threshold


def decode_slot(
    flat: np.ndarray,
    config: DetectorConfig,
    slot: AnchorSlot,
    threshold: float,
    indexer: Optional[OffsetIndexer] = None,
) -> Optional[Detection]:
    """
    Decode one anchor of one cell, or return None if it is filtered out.

    Filtering happens twice with the same threshold: first on objectness
    alone (before any class work), then on objectness * top class
    probability. Keep both checks and their order.
    """

    indexer = indexer or OffsetIndexer.for_config(config)
    cx, cy, ch = slot.cell_x, slot.cell_y, slot.channel_base

    tx = float(flat[indexer.offset(cx, cy, ch)])
    ty = float(flat[indexer.offset(cx, cy, ch + 1)])
    tw = float(flat[indexer.offset(cx, cy, ch + 2)])
    th = float(flat[indexer.offset(cx, cy, ch + 3)])
    tc = float(flat[indexer.offset(cx, cy, ch + 4)])

    anchor_w, anchor_h = config.anchors[slot.anchor_index]
    center_x = (cx + sigmoid(tx)) * config.cell_width
    center_y = (cy + sigmoid(ty)) * config.cell_height
    width = float(np.exp(tw)) * config.cell_width * anchor_w
    height = float(np.exp(th)) * config.cell_height * anchor_h

    objectness = sigmoid(tc)
    if objectness < threshold:
        return None

    class_base = ch + BOX_INFO_FEATURE_COUNT
    logits = np.empty(config.class_count, dtype=np.float64)
    for i in range(config.class_count):
        logits[i] = flat[indexer.offset(cx, cy, class_base + i)]
    probs = softmax(logits)

    # np.argmax returns the first maximal index, i.e. ties go to the lowest class id.
    top_class = int(np.argmax(probs))
    top_score = float(probs[top_class]) * objectness
    if top_score < threshold:
        return None

    return Detection(
        label=config.labels[top_class],
        x=center_x - width / 2,
        y=center_y - height / 2,
        width=width,
        height=height,
        score=top_score,
        class_id=top_class,
    )


def decode(tensor: TensorLike, config: DetectorConfig, threshold: float) -> List[Detection]:
    """
    Convert a raw YOLOv2 grid tensor into detections.

    Output order is the slot scan order (see `iter_anchor_slots`); there is
    no sorting by score and no overlap suppression. An empty list is a normal
    result.

    Both checks are `score < threshold`, so `threshold=1.0` still keeps an
    anchor whose objectness saturates to exactly 1.0 (logit above ~37) with a
    one-hot class distribution. Any finite, non-saturated input yields nothing.
    """

    threshold = _check_threshold(threshold)
    flat = flatten_tensor(tensor, config)
    indexer = OffsetIndexer.for_config(config)

    detections: List[Detection] = []
    for slot in iter_anchor_slots(config):
        det = decode_slot(flat, config, slot, threshold, indexer)
        if det is not None:
            detections.append(det)

    logger.debug(
        "Decoded %d detections from %d anchor slots (threshold=%.3f)",
        len(detections),
        config.rows * config.cols * config.anchors_per_cell,
        threshold,
    )
    return detections


class BoxDecoder:
    """
    Bound decoder for one network geometry and confidence threshold.

    Stateless between calls; one instance can be shared across threads.
    """

    def __init__(self, config: DetectorConfig, threshold: float = 0.3):
        self.config = config
        self.threshold = _check_threshold(threshold)

    def process(self, tensor: TensorLike) -> List[Detection]:
        return decode(tensor, self.config, self.threshold)

    __call__ = process
