from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass(frozen=True)
class PreprocessResult:
    blob: np.ndarray
    resized: np.ndarray


def resize_to_input(image_bgr: np.ndarray, input_size: Tuple[int, int]) -> np.ndarray:
    """
    Stretch the image to the network input size (no letterbox padding).

    YOLOv2 grid exports are trained on square inputs resized without keeping
    the aspect ratio, so box coordinates are in resized-image pixels.
    """

    try:
        import cv2  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError("OpenCV is required for resize_to_input(). Install with `pip install opencv-python`.") from e

    new_w, new_h = input_size
    h, w = image_bgr.shape[:2]
    if (w, h) == (new_w, new_h):
        return image_bgr.copy()
    return cv2.resize(image_bgr, (new_w, new_h), interpolation=cv2.INTER_LINEAR)


def make_blob(image_bgr: np.ndarray, input_size: Tuple[int, int], normalize: bool = False) -> PreprocessResult:
    """
    Resize -> BGR to RGB -> HWC to CHW -> add batch axis.

    Pixel values stay in 0..255 unless `normalize` is set (then scaled to 0..1).
    """

    if image_bgr is None or not hasattr(image_bgr, "shape"):
        raise TypeError("image_bgr must be a NumPy array (BGR).")
    if image_bgr.ndim != 3 or image_bgr.shape[2] != 3:
        raise ValueError(f"Expected image shape (H, W, 3), got {getattr(image_bgr, 'shape', None)}")
    resized = resize_to_input(image_bgr, input_size)

    blob = resized[:, :, ::-1].astype(np.float32)
    if normalize:
        blob /= 255.0
    blob = np.ascontiguousarray(np.transpose(blob, (2, 0, 1))[None, ...])

    return PreprocessResult(blob=blob, resized=resized)
