import threading
from concurrent.futures import Future

import pytest

import handshapes
from gesture_overlay.errors import MalformedSkeletonError
from gesture_overlay.processor import FrameProcessor
from gesture_overlay.sources import LandmarkSource, RememberingLandmarkSource, ThreadedLandmarkSource
from gesture_overlay.types import NO_HAND, GestureLabel, as_skeleton


class FakeDetector:
    def __init__(self, skeleton):
        self.skeleton = skeleton
        self.frames = []
        self.closed = False

    def detect(self, frame):
        self.frames.append(frame)
        return self.skeleton

    def close(self):
        self.closed = True


def test_threaded_source_runs_detector():
    detector = FakeDetector(handshapes.fist())
    with ThreadedLandmarkSource(detector) as source:
        future = source.detect_async("frame")
        assert future.result(timeout=5) == handshapes.fist()
    assert detector.frames == ["frame"]
    assert detector.closed


def test_threaded_source_can_leave_detector_open():
    detector = FakeDetector(None)
    source = ThreadedLandmarkSource(detector, close_detector=False)
    assert source.detect_async("frame").result(timeout=5) is None
    source.close()
    assert not detector.closed
    with pytest.raises(RuntimeError):
        source.detect_async("frame")


def test_detector_errors_surface_on_the_future():
    class Broken:
        def detect(self, frame):
            raise ValueError("bad frame")

    with ThreadedLandmarkSource(Broken()) as source:
        with pytest.raises(ValueError):
            source.detect_async("frame").result(timeout=5)


def test_base_source_is_abstract():
    with pytest.raises(NotImplementedError):
        LandmarkSource().detect_async("frame")


def test_processor_with_threaded_source():
    detector = FakeDetector(handshapes.victory())
    published = threading.Event()

    processor = FrameProcessor(lambda: ThreadedLandmarkSource(detector))
    processor.gesture.subscribe(lambda prev, result: published.set())
    assert processor.initialize()
    assert processor.start()
    assert processor.tick("frame")
    assert published.wait(timeout=5)
    assert processor.gesture.label is GestureLabel.VICTORY
    processor.close()
    assert detector.closed


def test_processor_clears_gesture_when_detector_sees_malformed_hand():
    class Truncating:
        def __init__(self):
            self.hands = [handshapes.fist(), handshapes.fist()[:20]]

        def detect(self, frame):
            return as_skeleton(self.hands.pop(0))

        def close(self):
            pass

    shown = threading.Event()
    cleared = threading.Event()

    def on_change(prev, result):
        if result.label is GestureLabel.FIST:
            shown.set()
        elif result.label is GestureLabel.NONE:
            cleared.set()

    processor = FrameProcessor(lambda: ThreadedLandmarkSource(Truncating()))
    processor.gesture.subscribe(on_change)
    assert processor.initialize()
    assert processor.start()
    assert processor.tick("frame-1")
    assert shown.wait(timeout=5)
    assert processor.tick("frame-2")
    assert cleared.wait(timeout=5)
    assert processor.gesture.result == NO_HAND
    processor.close()


class PendingSource(LandmarkSource):
    def __init__(self):
        self.futures = []
        self.closed = False

    def detect_async(self, frame):
        future = Future()
        self.futures.append(future)
        return future

    def close(self):
        self.closed = True


def test_remembering_source_keeps_latest_skeleton():
    inner = PendingSource()
    source = RememberingLandmarkSource(inner)
    assert source.skeleton is None

    source.detect_async("frame-1").set_result(handshapes.pointing())
    assert source.skeleton == handshapes.pointing()

    source.detect_async("frame-2").set_exception(MalformedSkeletonError("Expected 21 landmarks, got 20"))
    assert source.skeleton is None

    source.detect_async("frame-3").set_result(handshapes.victory())
    source.detect_async("frame-4").cancel()
    assert source.skeleton == handshapes.victory()

    source.close()
    assert inner.closed


def test_remembering_source_feeds_processor_and_drawing():
    detector = FakeDetector(handshapes.open_palm())
    published = threading.Event()

    processor = FrameProcessor(lambda: RememberingLandmarkSource(ThreadedLandmarkSource(detector)))
    processor.gesture.subscribe(lambda prev, result: published.set())
    assert processor.initialize()
    assert processor.start()
    assert processor.tick("frame")
    assert published.wait(timeout=5)
    assert processor.gesture.label is GestureLabel.OPEN_PALM
    assert processor.source.skeleton == handshapes.open_palm()
    processor.close()
    assert detector.closed
