from __future__ import annotations

from .config import DetectorConfig
from .errors import OffsetOutOfRangeError


class OffsetIndexer:
    """
    Flat index into a channel-major (planar) output tensor.

    The network emits a (channels, rows, cols) tensor flattened to 1D, so all
    cells of channel 0 come first, then all cells of channel 1, and so on.
    """

    def __init__(self, rows: int, cols: int, channels: int):
        if rows <= 0 or cols <= 0 or channels <= 0:
            raise ValueError(f"grid dimensions must be positive, got rows={rows} cols={cols} channels={channels}")
        self.rows = rows
        self.cols = cols
        self.channels = channels
        self._channel_stride = rows * cols

    @classmethod
    def for_config(cls, config: DetectorConfig) -> "OffsetIndexer":
        return cls(config.rows, config.cols, config.channels)

    def offset(self, cell_x: int, cell_y: int, channel: int) -> int:
        if not 0 <= cell_x < self.cols:
            raise OffsetOutOfRangeError(f"cell_x {cell_x} outside [0, {self.cols})")
        if not 0 <= cell_y < self.rows:
            raise OffsetOutOfRangeError(f"cell_y {cell_y} outside [0, {self.rows})")
        if not 0 <= channel < self.channels:
            raise OffsetOutOfRangeError(f"channel {channel} outside [0, {self.channels})")
        return channel * self._channel_stride + cell_y * self.cols + cell_x

    __call__ = offset


def grid_offset(config: DetectorConfig, cell_x: int, cell_y: int, channel: int) -> int:
    return OffsetIndexer.for_config(config).offset(cell_x, cell_y, channel)
