import unittest

from yolo2_kit.config import DetectorConfig
from yolo2_kit.errors import OffsetOutOfRangeError
from yolo2_kit.offset import OffsetIndexer, grid_offset


class TestOffsetIndexer(unittest.TestCase):
    def test_planar_layout(self) -> None:
        idx = OffsetIndexer(rows=2, cols=2, channels=3)
        self.assertEqual(idx.offset(1, 1, 2), 2 * 4 + 1 * 2 + 1)
        self.assertEqual(idx.offset(0, 0, 0), 0)
        self.assertEqual(idx.offset(1, 0, 0), 1)
        self.assertEqual(idx.offset(0, 1, 0), 2)
        self.assertEqual(idx.offset(0, 0, 1), 4)

    def test_covers_every_index_once(self) -> None:
        idx = OffsetIndexer(rows=3, cols=4, channels=6)
        seen = {idx(x, y, c) for c in range(6) for y in range(3) for x in range(4)}
        self.assertEqual(seen, set(range(3 * 4 * 6)))

    def test_out_of_range_raises(self) -> None:
        idx = OffsetIndexer(rows=2, cols=2, channels=3)
        for args in ((2, 0, 0), (-1, 0, 0), (0, 2, 0), (0, -1, 0), (0, 0, 3), (0, 0, -1)):
            with self.subTest(args=args):
                with self.assertRaises(OffsetOutOfRangeError):
                    idx.offset(*args)

    def test_out_of_range_is_index_error(self) -> None:
        with self.assertRaises(IndexError):
            OffsetIndexer(rows=1, cols=1, channels=1).offset(0, 0, 1)

    def test_for_config(self) -> None:
        cfg = DetectorConfig.tiny_yolo_voc()
        self.assertEqual(grid_offset(cfg, 12, 12, 124), cfg.tensor_length - 1)
        self.assertEqual(OffsetIndexer.for_config(cfg).offset(3, 2, 1), 169 + 2 * 13 + 3)

    def test_non_positive_dimensions_rejected(self) -> None:
        with self.assertRaises(ValueError):
            OffsetIndexer(rows=0, cols=2, channels=3)


if __name__ == "__main__":
    unittest.main()
