from __future__ import annotations

import functools
import logging
import threading
import time
from enum import Enum
from typing import Callable, Optional

from .classifier import GestureClassifier
from .config import ProcessorConfig
from .errors import DetectorUnavailableError, MalformedSkeletonError
from .smoothing import MajorityVoteSmoother
from .sources import LandmarkSource
from .state import GestureState, GestureTally
from .types import NO_HAND


logger = logging.getLogger(__name__)


class ProcessorState(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    IDLE = "idle"
    PROCESSING = "processing"


class FrameProcessor:
    """
    Per-frame lifecycle: frame -> landmark source -> classifier -> published gesture.

    Call `tick(frame)` once per displayed frame. At most one detector call is
    in flight; ticks arriving meanwhile are dropped, not queued. Each call
    carries a token, and completions whose token is no longer current
    (after `stop()` or after a stalled call was abandoned) are discarded.
    """

    def __init__(
        self,
        source_factory: Callable[[], LandmarkSource],
        classifier: Optional[GestureClassifier] = None,
        config: Optional[ProcessorConfig] = None,
        state: Optional[GestureState] = None,
        tally: Optional[GestureTally] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or ProcessorConfig()
        self.classifier = classifier or GestureClassifier()
        self.gesture = state or GestureState()
        self.tally = tally if tally is not None else GestureTally(self.config.count_policy)
        self.smoother: Optional[MajorityVoteSmoother] = None
        if self.config.smoothing_window > 0:
            self.smoother = MajorityVoteSmoother(self.config.smoothing_window)

        self.status = ProcessorState.UNINITIALIZED
        self.source: Optional[LandmarkSource] = None
        self.init_error: Optional[DetectorUnavailableError] = None

        self._source_factory = source_factory
        self._clock = clock
        self._lock = threading.RLock()
        self._init_started = False
        self._streaming = False
        self._token = 0
        self._inflight_token: Optional[int] = None
        self._inflight_since = 0.0

    @property
    def ready(self) -> bool:
        return self.gesture.ready

    @property
    def streaming(self) -> bool:
        return self._streaming

    @property
    def in_flight(self) -> bool:
        return self._inflight_token is not None

    # -- lifecycle ---------------------------------------------------------

    def initialize(self) -> bool:
        """Create the landmark source once. Returns readiness; never retries."""
        with self._lock:
            if self._init_started:
                return self.gesture.ready
            self._init_started = True
            self.status = ProcessorState.INITIALIZING

        try:
            source = self._source_factory()
        except Exception as e:
            logger.error("Landmark detector unavailable: %s", e)
            error = DetectorUnavailableError(f"Could not initialize landmark detector: {e}")
            error.__cause__ = e
            with self._lock:
                self.init_error = error
                self.status = ProcessorState.UNINITIALIZED
            return False

        with self._lock:
            self.source = source
            self.status = ProcessorState.READY
            self.gesture.ready = True
        logger.info("Landmark detector ready")
        return True

    def initialize_in_background(self) -> threading.Thread:
        thread = threading.Thread(target=self.initialize, name="detector-init", daemon=True)
        thread.start()
        return thread

    def start(self) -> bool:
        with self._lock:
            if not self.gesture.ready:
                logger.warning("Cannot start streaming: detector not ready")
                return False
            if self._streaming:
                return True
            self._streaming = True
            self.status = ProcessorState.IDLE
        logger.info("Streaming started")
        return True

    def stop(self) -> None:
        with self._lock:
            was_streaming = self._streaming
            self._streaming = False
            self._inflight_token = None
            if self.status is ProcessorState.PROCESSING:
                self.status = ProcessorState.IDLE
            if self.smoother is not None:
                self.smoother.reset()
            change = self.gesture.store(NO_HAND)
        self.gesture.notify(change)
        if was_streaming:
            logger.info("Streaming stopped")

    def close(self) -> None:
        self.stop()
        with self._lock:
            source, self.source = self.source, None
            self.gesture.ready = False
        if source is not None:
            source.close()

    def __enter__(self) -> "FrameProcessor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -- frame loop --------------------------------------------------------

    def tick(self, frame) -> bool:
        """Submit `frame` to the detector unless a call is already in flight."""
        with self._lock:
            if not self.gesture.ready or not self._streaming or self.source is None:
                return False
            if self._inflight_token is not None:
                waited = self._clock() - self._inflight_since
                if waited < self.config.detector_timeout_s:
                    logger.debug("Dropping tick: detector call %d in flight", self._inflight_token)
                    return False
                logger.warning(
                    "Detector call %d stalled for %.2fs, abandoning it", self._inflight_token, waited
                )
            self._token += 1
            token = self._token
            self._inflight_token = token
            self._inflight_since = self._clock()
            self.status = ProcessorState.PROCESSING
            source = self.source

        try:
            future = source.detect_async(frame)
        except Exception as e:
            logger.warning("Landmark detector rejected frame: %s", e)
            with self._lock:
                if self._inflight_token == token:
                    self._inflight_token = None
                    self.status = ProcessorState.IDLE
            return False

        future.add_done_callback(functools.partial(self._on_result, token))
        return True

    def _on_result(self, token: int, future) -> None:
        with self._lock:
            if token != self._inflight_token:
                logger.debug("Discarding stale detector result %d", token)
                return
            self._inflight_token = None
            self.status = ProcessorState.IDLE

            if future.cancelled():
                logger.warning("Detector call %d was cancelled", token)
                return
            exc = future.exception()
            if isinstance(exc, MalformedSkeletonError):
                logger.debug("Detector call %d returned a malformed hand: %s", token, exc)
                result = NO_HAND
            elif exc is not None:
                logger.warning("Detector call %d failed: %s", token, exc)
                return
            else:
                result = self.classifier.classify(future.result())

            if result == NO_HAND:
                if self.smoother is not None:
                    self.smoother.reset()
            elif self.smoother is not None:
                result = self.smoother.update(result)

            # store under the lock, notify after releasing it
            change = self.gesture.store(result)
            self.tally.record(result.label, change is not None)

        self.gesture.notify(change)
