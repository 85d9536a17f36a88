"""
Error types raised by yolo2_kit.

All of them derive from builtin exceptions so callers that already catch
`ValueError` / `IndexError` keep working.
"""


class DetectorConfigError(ValueError):
    """Invalid grid geometry, anchors or labels."""


class TensorSizeError(ValueError):
    """Raw output tensor does not match `rows * cols * channels`."""


class OffsetOutOfRangeError(IndexError):
    """Cell or channel coordinate outside the grid."""
