from __future__ import annotations

from typing import Iterable, Optional, Tuple

import cv2
import numpy as np

from .detector import HAND_CONNECTIONS
from .state import GestureTally
from .types import FINGERS, THUMB_CMC, THUMB_TIP, WRIST, ClassificationResult, HandSkeleton
from .utils import bbox_from_points


FINGERTIPS = (THUMB_TIP,) + tuple(tip for (_, _, _, tip) in FINGERS.values())
PALM = (WRIST, THUMB_CMC) + tuple(mcp for (mcp, _, _, _) in FINGERS.values())


def draw_point(frame, pt: Tuple[int, int], color=(0, 0, 255), radius=5):
    cv2.circle(frame, pt, radius, color, -1, lineType=cv2.LINE_AA)
    return frame


def draw_text(frame, text: str, org: Tuple[int, int], color=(255, 255, 255), scale=0.6, thickness=2):
    cv2.putText(frame, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, (0, 0, 0), thickness + 2, cv2.LINE_AA)
    cv2.putText(frame, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, color, thickness, cv2.LINE_AA)
    return frame


def draw_polyline(frame, points: Iterable[Tuple[int, int]], color=(255, 255, 0), thickness=2, closed=False):
    pts = np.array([(int(x), int(y)) for x, y in points], dtype=np.int32)
    if pts.shape[0] < 2:
        return frame
    cv2.polylines(frame, [pts], closed, color, thickness, cv2.LINE_AA)
    return frame


def draw_skeleton(frame, skeleton: Optional[HandSkeleton], draw_bbox: bool = True):
    if not skeleton:
        return frame
    h, w = frame.shape[:2]
    pts = [lm.to_px(w, h) for lm in skeleton]

    draw_polyline(frame, [pts[i] for i in PALM], color=(255, 200, 0), thickness=1, closed=True)
    for a, b in HAND_CONNECTIONS:
        cv2.line(frame, pts[a], pts[b], (0, 255, 255), 2, cv2.LINE_AA)
    for i, pt in enumerate(pts):
        if i in FINGERTIPS:
            draw_point(frame, pt, color=(255, 0, 0), radius=6)
        else:
            draw_point(frame, pt, color=(40, 255, 120), radius=3)

    if draw_bbox:
        x0, y0, x1, y1 = bbox_from_points(pts)
        cv2.rectangle(frame, (x0, y0), (x1, y1), (0, 255, 0), 2)
    return frame


def draw_gesture(frame, result: ClassificationResult, org: Tuple[int, int] = (12, 28)):
    color = (80, 255, 80) if result.is_actionable else (200, 200, 200)
    return draw_text(frame, f"{result.label.value} ({result.confidence:.2f})", org, color=color, scale=0.8)


def draw_status(frame, ready: bool, org: Optional[Tuple[int, int]] = None):
    h, w = frame.shape[:2]
    if org is None:
        org = (max(0, w - 160), 28)
    if ready:
        return draw_text(frame, "detector ready", org, color=(80, 255, 80), scale=0.5, thickness=1)
    return draw_text(frame, "detector not ready", org, color=(0, 165, 255), scale=0.5, thickness=1)


def draw_tally(frame, tally: GestureTally, org: Tuple[int, int] = (12, 60), line_height: int = 22):
    x, y = org
    for label, count in tally.counts.items():
        draw_text(frame, f"{label.value}: {count}", (x, y), scale=0.55, thickness=1)
        y += line_height
    return frame
