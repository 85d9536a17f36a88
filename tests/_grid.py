from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from yolo2_kit.config import DetectorConfig


def small_config(
    rows: int = 1,
    cols: int = 1,
    labels: Sequence[str] = ("cat", "dog"),
    anchors: Sequence[Tuple[float, float]] = ((1.0, 1.0),),
    cell: float = 32.0,
) -> DetectorConfig:
    return DetectorConfig(
        rows=rows,
        cols=cols,
        anchors_per_cell=len(anchors),
        class_count=len(labels),
        channels=len(anchors) * (5 + len(labels)),
        cell_width=cell,
        cell_height=cell,
        anchors=tuple(anchors),
        labels=tuple(labels),
    )


def planar(config: DetectorConfig) -> np.ndarray:
    """Zero tensor shaped (channels, rows, cols) so tests can write grid[ch, cy, cx]."""
    return np.zeros((config.channels, config.rows, config.cols), dtype=np.float32)
