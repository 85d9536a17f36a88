from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Detection:
    """
    One decoded box. (x, y) is the top-left corner in network input pixels
    and may be negative when the box extends past the grid origin.
    """

    label: str
    x: float
    y: float
    width: float
    height: float
    score: float
    class_id: Optional[int] = None

    def as_xywh(self) -> Tuple[float, float, float, float]:
        return self.x, self.y, self.width, self.height

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        return self.x, self.y, self.x + self.width, self.y + self.height

    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2
