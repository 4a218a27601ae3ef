from __future__ import annotations

import math
from typing import Iterable, Tuple


def clamp_int(v: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, v))


def distance(a, b) -> float:
    """Euclidean distance between two landmarks in the image plane."""
    return math.hypot(a.x - b.x, a.y - b.y)


def joint_angle(p1, p2, p3) -> float:
    """
    Interior angle at `p2` formed by p1 -> p2 -> p3, in degrees within [0, 180].

    Computed as the difference of the polar angles of p2->p1 and p2->p3.
    """

    a1 = math.degrees(math.atan2(p1.y - p2.y, p1.x - p2.x))
    a3 = math.degrees(math.atan2(p3.y - p2.y, p3.x - p2.x))
    angle = abs(a1 - a3)
    if angle > 180.0:
        angle = 360.0 - angle
    return angle


def bbox_from_points(points: Iterable[Tuple[int, int]]) -> Tuple[int, int, int, int]:
    xs = []
    ys = []
    for x, y in points:
        xs.append(x)
        ys.append(y)
    if not xs:
        return (0, 0, 0, 0)
    return (min(xs), min(ys), max(xs), max(ys))
