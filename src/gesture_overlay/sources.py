from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from .types import HandSkeleton


class LandmarkSource:
    """
    Asynchronous landmark detector as seen by the frame processor.

    `detect_async` returns a future resolving to the first hand's skeleton,
    or None when no hand is visible.
    """

    def detect_async(self, frame) -> "Future[Optional[HandSkeleton]]":
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self) -> "LandmarkSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class ThreadedLandmarkSource(LandmarkSource):
    """Runs a synchronous detector (`detect(frame) -> skeleton | None`) on one worker thread."""

    def __init__(self, detector, close_detector: bool = True) -> None:
        self.detector = detector
        self._close_detector = close_detector
        self._executor: Optional[ThreadPoolExecutor] = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="landmarks"
        )

    def detect_async(self, frame) -> "Future[Optional[HandSkeleton]]":
        if self._executor is None:
            raise RuntimeError("Landmark source is closed")
        return self._executor.submit(self.detector.detect, frame)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        if self._close_detector and hasattr(self.detector, "close"):
            self.detector.close()


class RememberingLandmarkSource(LandmarkSource):
    """Wraps another source and keeps the latest skeleton it resolved, for drawing."""

    def __init__(self, source: LandmarkSource) -> None:
        self.source = source
        self.skeleton: Optional[HandSkeleton] = None

    def detect_async(self, frame) -> "Future[Optional[HandSkeleton]]":
        future = self.source.detect_async(frame)
        future.add_done_callback(self._remember)
        return future

    def _remember(self, future: Future) -> None:
        if future.cancelled():
            return
        # failed or malformed detections draw nothing
        self.skeleton = future.result() if future.exception() is None else None

    def close(self) -> None:
        self.source.close()
