"""
Exceptions raised by the gesture overlay package.
"""


class GestureOverlayError(Exception):
    """Base exception for gesture overlay errors."""
    pass


class DetectorUnavailableError(GestureOverlayError):
    """Raised when the landmark detector cannot be initialized."""
    pass


class MalformedSkeletonError(GestureOverlayError, ValueError):
    """Raised when landmarks do not form a complete 21-point hand skeleton."""
    pass
