import pytest

from gesture_overlay.smoothing import MajorityVoteSmoother
from gesture_overlay.types import ClassificationResult, GestureLabel


FIST = ClassificationResult(GestureLabel.FIST, 0.9)
VICTORY = ClassificationResult(GestureLabel.VICTORY, 0.92)
WEAK_NONE = ClassificationResult(GestureLabel.NONE, 0.7)


def test_single_outlier_is_suppressed():
    smoother = MajorityVoteSmoother(window=3)
    smoother.update(FIST)
    smoother.update(FIST)
    assert smoother.update(VICTORY) == FIST


def test_window_slides():
    smoother = MajorityVoteSmoother(window=3)
    for r in (FIST, VICTORY, VICTORY):
        out = smoother.update(r)
    assert out.label is GestureLabel.VICTORY
    assert out.confidence == pytest.approx(0.92)
    assert len(smoother) == 3


def test_tie_goes_to_most_recent():
    smoother = MajorityVoteSmoother(window=2)
    smoother.update(FIST)
    assert smoother.update(WEAK_NONE).label is GestureLabel.NONE


def test_confidence_is_mean_of_winning_votes():
    smoother = MajorityVoteSmoother(window=3)
    smoother.update(ClassificationResult(GestureLabel.FIST, 0.8))
    smoother.update(VICTORY)
    out = smoother.update(ClassificationResult(GestureLabel.FIST, 1.0))
    assert out.label is GestureLabel.FIST
    assert out.confidence == pytest.approx(0.9)


def test_window_of_one_passes_through():
    smoother = MajorityVoteSmoother(window=1)
    assert smoother.update(FIST) == FIST
    assert smoother.update(VICTORY) == VICTORY


def test_reset():
    smoother = MajorityVoteSmoother(window=3)
    smoother.update(FIST)
    smoother.update(FIST)
    smoother.reset()
    assert len(smoother) == 0
    assert smoother.update(VICTORY) == VICTORY


def test_invalid_window():
    with pytest.raises(ValueError):
        MajorityVoteSmoother(window=0)
