from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import cv2

from .errors import MalformedSkeletonError
from .model_assets import ensure_hand_landmarker_task
from .sources import LandmarkSource
from .types import HandSkeleton, as_skeleton


logger = logging.getLogger(__name__)


HAND_CONNECTIONS: List[Tuple[int, int]] = [
    # thumb
    (0, 1),
    (1, 2),
    (2, 3),
    (3, 4),
    # index
    (0, 5),
    (5, 6),
    (6, 7),
    (7, 8),
    # middle
    (5, 9),
    (9, 10),
    (10, 11),
    (11, 12),
    # ring
    (9, 13),
    (13, 14),
    (14, 15),
    (15, 16),
    # pinky
    (13, 17),
    (17, 18),
    (18, 19),
    (19, 20),
    # palm base
    (0, 17),
]


@dataclass(frozen=True)
class _SolutionsBackend:
    mp: object
    hands: object


@dataclass(frozen=True)
class _TasksBackend:
    mp: object
    landmarker: object


def _try_create_solutions_backend(
    static_image_mode: bool,
    model_complexity: int,
    min_detection_confidence: float,
    min_tracking_confidence: float,
) -> Optional[_SolutionsBackend]:
    import mediapipe as mp  # type: ignore

    if not hasattr(mp, "solutions"):
        return None
    hands = mp.solutions.hands.Hands(
        static_image_mode=static_image_mode,
        max_num_hands=1,
        model_complexity=model_complexity,
        min_detection_confidence=min_detection_confidence,
        min_tracking_confidence=min_tracking_confidence,
    )
    return _SolutionsBackend(mp=mp, hands=hands)


def _create_tasks_backend(
    model_path: str,
    min_detection_confidence: float,
    min_tracking_confidence: float,
    live_stream_callback=None,
) -> _TasksBackend:
    """
    Build a MediaPipe Tasks HandLandmarker (needs a `.task` model asset on disk).

    VIDEO mode unless `live_stream_callback` is given, in which case the callback is
    registered once here and receives every LIVE_STREAM result.
    """

    import mediapipe as mp  # type: ignore

    # Import locations can differ slightly across builds.
    try:
        from mediapipe.tasks.python import BaseOptions  # type: ignore
        from mediapipe.tasks.python.vision import HandLandmarker, HandLandmarkerOptions, RunningMode  # type: ignore
    except ImportError:  # pragma: no cover
        from mediapipe.tasks import python as mp_python  # type: ignore

        BaseOptions = mp_python.BaseOptions
        vision = mp_python.vision
        HandLandmarker = vision.HandLandmarker
        HandLandmarkerOptions = vision.HandLandmarkerOptions
        RunningMode = vision.RunningMode

    model_path = ensure_hand_landmarker_task(model_path)

    kwargs = {}
    if live_stream_callback is not None:
        kwargs["result_callback"] = live_stream_callback
        running_mode = RunningMode.LIVE_STREAM
    else:
        running_mode = RunningMode.VIDEO

    options = HandLandmarkerOptions(
        base_options=BaseOptions(model_asset_path=model_path),
        running_mode=running_mode,
        num_hands=1,
        min_hand_detection_confidence=min_detection_confidence,
        min_tracking_confidence=min_tracking_confidence,
        **kwargs,
    )
    landmarker = HandLandmarker.create_from_options(options)
    return _TasksBackend(mp=mp, landmarker=landmarker)


def _to_mp_image(mp, frame_bgr):
    if not hasattr(mp, "Image") or not hasattr(mp, "ImageFormat"):
        raise RuntimeError("Your MediaPipe build does not expose `mp.Image` required for the Tasks API.")
    frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
    return mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)


def _first_hand(result) -> Optional[HandSkeleton]:
    # Only one hand is classified; extra hands are ignored.
    hands = getattr(result, "hand_landmarks", None) or []
    if not hands:
        return None
    return as_skeleton(hands[0])


class HandLandmarkDetector:
    """
    Synchronous MediaPipe hand landmark detector returning the first hand's skeleton.

    Input frames are expected as **BGR** images (OpenCV default). Uses `mp.solutions`
    when available and falls back to the Tasks HandLandmarker otherwise.
    """

    def __init__(
        self,
        static_image_mode: bool = False,
        model_complexity: int = 1,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
        tasks_model_path: str = "models/hand_landmarker.task",
    ) -> None:
        self._solutions = _try_create_solutions_backend(
            static_image_mode=static_image_mode,
            model_complexity=model_complexity,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        self._tasks: Optional[_TasksBackend] = None
        self._tasks_timestamp_ms = 0

        if self._solutions is None:
            logger.info("mediapipe.solutions unavailable, using Tasks HandLandmarker")
            self._tasks = _create_tasks_backend(
                model_path=tasks_model_path,
                min_detection_confidence=min_detection_confidence,
                min_tracking_confidence=min_tracking_confidence,
            )

    def close(self) -> None:
        if self._solutions is not None:
            self._solutions.hands.close()
        if self._tasks is not None:
            self._tasks.landmarker.close()

    def __enter__(self) -> "HandLandmarkDetector":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def detect(self, frame_bgr) -> Optional[HandSkeleton]:
        if self._solutions is not None:
            frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
            results = self._solutions.hands.process(frame_rgb)
            if not results.multi_hand_landmarks:
                return None
            return as_skeleton(results.multi_hand_landmarks[0].landmark)

        # Tasks VIDEO mode requires monotonically increasing timestamps, also for single images.
        mp_image = _to_mp_image(self._tasks.mp, frame_bgr)
        self._tasks_timestamp_ms += 33  # ~30fps
        return _first_hand(self._tasks.landmarker.detect_for_video(mp_image, self._tasks_timestamp_ms))


class LiveStreamLandmarkSource(LandmarkSource):
    """
    MediaPipe Tasks HandLandmarker in LIVE_STREAM mode.

    The result callback is registered once, when the landmarker is built. Every
    submission gets a strictly increasing timestamp which is also the key of its
    pending future; the callback resolves the matching future. Frames MediaPipe
    drops never get a callback, so their futures are cancelled once a later
    timestamp resolves.
    """

    def __init__(
        self,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
        tasks_model_path: str = "models/hand_landmarker.task",
    ) -> None:
        self._lock = threading.Lock()
        self._pending: Dict[int, Future] = {}
        self._last_ts = 0
        self._tasks = _create_tasks_backend(
            model_path=tasks_model_path,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
            live_stream_callback=self._on_result,
        )

    def _next_timestamp(self) -> int:
        ts = int(time.monotonic() * 1000)
        if ts <= self._last_ts:
            ts = self._last_ts + 1
        self._last_ts = ts
        return ts

    def detect_async(self, frame) -> "Future[Optional[HandSkeleton]]":
        future: Future = Future()
        mp_image = _to_mp_image(self._tasks.mp, frame)
        with self._lock:
            ts = self._next_timestamp()
            self._pending[ts] = future
        try:
            self._tasks.landmarker.detect_async(mp_image, ts)
        except Exception:
            with self._lock:
                self._pending.pop(ts, None)
            raise
        return future

    def _on_result(self, result, output_image, timestamp_ms: int) -> None:
        with self._lock:
            future = self._pending.pop(timestamp_ms, None)
            dropped = [ts for ts in self._pending if ts < timestamp_ms]
            stale = [self._pending.pop(ts) for ts in dropped]
        for f in stale:
            f.cancel()
        if future is None or not future.set_running_or_notify_cancel():
            return
        try:
            skeleton = _first_hand(result)
        except MalformedSkeletonError as e:
            future.set_exception(e)
            return
        future.set_result(skeleton)

    def close(self) -> None:
        self._tasks.landmarker.close()
        with self._lock:
            pending = list(self._pending.values())
            self._pending.clear()
        for f in pending:
            f.cancel()
