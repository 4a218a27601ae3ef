from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Tuple

from .errors import MalformedSkeletonError
from .utils import clamp_int


Point2 = Tuple[int, int]

NUM_LANDMARKS = 21

WRIST = 0
THUMB_CMC, THUMB_MCP, THUMB_IP, THUMB_TIP = 1, 2, 3, 4
INDEX_MCP, INDEX_PIP, INDEX_DIP, INDEX_TIP = 5, 6, 7, 8
MIDDLE_MCP, MIDDLE_PIP, MIDDLE_DIP, MIDDLE_TIP = 9, 10, 11, 12
RING_MCP, RING_PIP, RING_DIP, RING_TIP = 13, 14, 15, 16
PINKY_MCP, PINKY_PIP, PINKY_DIP, PINKY_TIP = 17, 18, 19, 20

# (mcp, pip, dip, tip) for the four non-thumb fingers
FINGERS: Dict[str, Tuple[int, int, int, int]] = {
    "index": (INDEX_MCP, INDEX_PIP, INDEX_DIP, INDEX_TIP),
    "middle": (MIDDLE_MCP, MIDDLE_PIP, MIDDLE_DIP, MIDDLE_TIP),
    "ring": (RING_MCP, RING_PIP, RING_DIP, RING_TIP),
    "pinky": (PINKY_MCP, PINKY_PIP, PINKY_DIP, PINKY_TIP),
}


@dataclass(frozen=True)
class Landmark:
    """A single normalized hand keypoint (x, y in [0, 1]; z is detector-relative depth)."""

    x: float
    y: float
    z: float = 0.0

    def to_px(self, width: int, height: int) -> Point2:
        x_px = clamp_int(int(round(self.x * width)), 0, width - 1)
        y_px = clamp_int(int(round(self.y * height)), 0, height - 1)
        return (x_px, y_px)


HandSkeleton = Tuple[Landmark, ...]  # length 21


def _to_landmark(point) -> Landmark:
    if isinstance(point, Landmark):
        return point
    if hasattr(point, "x") and hasattr(point, "y"):
        return Landmark(float(point.x), float(point.y), float(getattr(point, "z", 0.0) or 0.0))
    coords = tuple(point)
    if len(coords) == 2:
        return Landmark(float(coords[0]), float(coords[1]))
    if len(coords) == 3:
        return Landmark(float(coords[0]), float(coords[1]), float(coords[2]))
    raise MalformedSkeletonError(f"Cannot read landmark from {point!r}")


def as_skeleton(points: Iterable) -> HandSkeleton:
    """
    Coerce detector output into a HandSkeleton.

    Accepts MediaPipe landmark objects, `Landmark`s or 2/3-tuples.
    Raises `MalformedSkeletonError` unless exactly 21 readable points are given.
    """

    try:
        skeleton = tuple(_to_landmark(p) for p in points)
    except MalformedSkeletonError:
        raise
    except (TypeError, ValueError) as e:
        raise MalformedSkeletonError(f"Unreadable landmarks: {e}") from e

    if len(skeleton) != NUM_LANDMARKS:
        raise MalformedSkeletonError(f"Expected {NUM_LANDMARKS} landmarks, got {len(skeleton)}")
    return skeleton


class GestureLabel(Enum):
    NONE = "None"
    OPEN_PALM = "Open Palm"
    FIST = "Fist"
    POINTING = "Pointing"
    VICTORY = "Victory"
    THUMBS_UP = "Thumbs Up"


@dataclass(frozen=True)
class ClassificationResult:
    """
    Gesture label plus a fixed per-rule confidence.

    Confidence is a rule-strength constant, not a calibrated probability.
    """

    label: GestureLabel
    confidence: float

    @property
    def is_actionable(self) -> bool:
        return self.label is not GestureLabel.NONE


NO_HAND = ClassificationResult(GestureLabel.NONE, 0.0)
