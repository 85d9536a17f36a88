from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Tuple

from .types import Detection

MARKER_NAMESPACE = "onnx_object_detection"


@dataclass(frozen=True)
class Marker:
    """
    Arrow marker for one matched detection, positioned at the box center.

    Mirrors the fields a ROS `visualization_msgs/Marker` publisher needs;
    building and sending the actual message is left to the caller.
    """

    id: int
    frame_id: str
    position: Tuple[float, float, float]
    namespace: str = MARKER_NAMESPACE
    orientation: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 1.0)
    scale: Tuple[float, float, float] = (1.0, 0.1, 0.1)
    color_rgba: Tuple[float, float, float, float] = (0.0, 0.0, 1.0, 1.0)


def filter_by_label(detections: Iterable[Detection], label: str) -> List[Detection]:
    return [d for d in detections if d.label == label]


def markers_for_label(detections: Iterable[Detection], label: str, frame_id: str) -> List[Marker]:
    """One marker per detection whose label equals `label`; ids run 0..n-1 in input order."""

    markers: List[Marker] = []
    for det in filter_by_label(detections, label):
        cx, cy = det.center()
        markers.append(Marker(id=len(markers), frame_id=frame_id, position=(cx, cy, 0.0)))
    return markers
