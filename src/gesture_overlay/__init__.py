from .classifier import GestureClassifier
from .config import ClassifierConfig, ProcessorConfig
from .detector import HandLandmarkDetector, LiveStreamLandmarkSource
from .errors import DetectorUnavailableError, GestureOverlayError, MalformedSkeletonError
from .processor import FrameProcessor, ProcessorState
from .smoothing import MajorityVoteSmoother
from .sources import LandmarkSource, RememberingLandmarkSource, ThreadedLandmarkSource
from .state import CountPolicy, GestureState, GestureTally
from .types import ClassificationResult, GestureLabel, HandSkeleton, Landmark, as_skeleton

__all__ = [
    "GestureClassifier",
    "ClassifierConfig",
    "ProcessorConfig",
    "HandLandmarkDetector",
    "LiveStreamLandmarkSource",
    "DetectorUnavailableError",
    "GestureOverlayError",
    "MalformedSkeletonError",
    "FrameProcessor",
    "ProcessorState",
    "MajorityVoteSmoother",
    "LandmarkSource",
    "RememberingLandmarkSource",
    "ThreadedLandmarkSource",
    "CountPolicy",
    "GestureState",
    "GestureTally",
    "ClassificationResult",
    "GestureLabel",
    "HandSkeleton",
    "Landmark",
    "as_skeleton",
]
