from __future__ import annotations

from typing import Iterable, Tuple

import numpy as np

from .types import Detection


def clamp_box(det: Detection, image_w: int, image_h: int) -> Tuple[int, int, int, int]:
    """
    Integer (x, y, w, h) rectangle for drawing.

    The top-left corner is truncated and clamped at 0; width/height are cut so
    the box does not run past the right/bottom edge.
    """

    x = max(int(det.x), 0)
    y = max(int(det.y), 0)
    w = min(image_w - x, int(det.width))
    h = min(image_h - y, int(det.height))
    return x, y, w, h


def draw_detections(
    image_bgr: np.ndarray,
    detections: Iterable[Detection],
    *,
    color: Tuple[int, int, int] = (255, 255, 0),
    thickness: int = 2,
    show_label: bool = False,
    font_scale: float = 0.5,
) -> np.ndarray:
    """
    Draw bounding rectangles on an OpenCV BGR image and return a copy.

    Detections are expected in the coordinates of `image_bgr` (i.e. the
    resized network input).
    """

    try:
        import cv2  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError("OpenCV is required for draw_detections(). Install with `pip install opencv-python`.") from e

    if image_bgr is None or not hasattr(image_bgr, "shape"):
        raise TypeError("image_bgr must be a NumPy array (BGR).")
    if image_bgr.ndim != 3 or image_bgr.shape[2] != 3:
        raise ValueError(f"Expected image shape (H, W, 3), got {getattr(image_bgr, 'shape', None)}")

    out = image_bgr.copy()
    h, w = out.shape[:2]

    for det in detections:
        x, y, bw, bh = clamp_box(det, w, h)
        if bw <= 0 or bh <= 0:
            continue
        cv2.rectangle(out, (x, y, bw, bh), color, thickness, cv2.LINE_8, 0)

        if show_label:
            text = f"{det.label} {det.score:.2f}"
            cv2.putText(
                out,
                text,
                (x, max(y - 4, 0)),
                cv2.FONT_HERSHEY_SIMPLEX,
                font_scale,
                color,
                thickness=1,
                lineType=cv2.LINE_AA,
            )

    return out
