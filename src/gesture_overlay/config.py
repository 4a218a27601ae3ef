"""
Tunable thresholds for gesture classification and frame processing.
"""

from __future__ import annotations

from dataclasses import dataclass

from .state import CountPolicy


@dataclass(frozen=True)
class ClassifierConfig:
    """Empirical margins used by the geometric gesture rules (normalized image units)."""

    finger_extend_margin: float = 0.1  # index, middle, ring
    pinky_extend_margin: float = 0.05
    thumb_extend_margin: float = 0.1  # vertical
    thumb_lateral_margin: float = 0.1  # thumb also extends sideways
    curl_angle_deg: float = 160.0
    thumb_raise_margin: float = 0.15  # thumb tip above wrist
    victory_spread_ratio: float = 1.2

    def __post_init__(self):
        margins = {
            "finger_extend_margin": self.finger_extend_margin,
            "pinky_extend_margin": self.pinky_extend_margin,
            "thumb_extend_margin": self.thumb_extend_margin,
            "thumb_lateral_margin": self.thumb_lateral_margin,
            "thumb_raise_margin": self.thumb_raise_margin,
        }
        for name, value in margins.items():
            if value < 0:
                raise ValueError(f"{name} must be >= 0, got {value}")
        if not (0.0 < self.curl_angle_deg <= 180.0):
            raise ValueError(f"curl_angle_deg must be in (0, 180], got {self.curl_angle_deg}")
        if self.victory_spread_ratio <= 0:
            raise ValueError(f"victory_spread_ratio must be > 0, got {self.victory_spread_ratio}")

    def margin_for(self, finger: str) -> float:
        if finger == "pinky":
            return self.pinky_extend_margin
        if finger == "thumb":
            return self.thumb_extend_margin
        return self.finger_extend_margin


@dataclass(frozen=True)
class ProcessorConfig:
    """Frame loop settings."""

    detector_timeout_s: float = 2.0  # abandon a stalled detector call after this long
    smoothing_window: int = 0  # 0 disables majority-vote smoothing
    count_policy: CountPolicy = CountPolicy.ON_TRANSITION

    def __post_init__(self):
        if self.detector_timeout_s <= 0:
            raise ValueError(f"detector_timeout_s must be > 0, got {self.detector_timeout_s}")
        if self.smoothing_window < 0:
            raise ValueError(f"smoothing_window must be >= 0, got {self.smoothing_window}")
