from types import SimpleNamespace

import pytest

import handshapes
from gesture_overlay.classifier import DEFAULT_RULES, GestureClassifier, GestureRule, match_rules
from gesture_overlay.config import ClassifierConfig
from gesture_overlay.types import NO_HAND, ClassificationResult, GestureLabel, Landmark


@pytest.fixture
def classifier():
    return GestureClassifier()


def test_absent_hand_is_none_with_zero_confidence(classifier):
    assert classifier.classify(None) == ClassificationResult(GestureLabel.NONE, 0.0)


@pytest.mark.parametrize("count", [0, 1, 20, 22])
def test_wrong_landmark_count_is_no_hand(classifier, count):
    skeleton = tuple(Landmark(0.5, 0.5) for _ in range(count))
    assert classifier.classify(skeleton) == NO_HAND


def test_unreadable_landmarks_are_no_hand(classifier):
    assert classifier.classify(["ab"] * 21) == NO_HAND
    assert classifier.classify([object()] * 21) == NO_HAND


@pytest.mark.parametrize(
    "shape, expected",
    [
        (handshapes.fist, ClassificationResult(GestureLabel.FIST, 0.9)),
        (handshapes.victory, ClassificationResult(GestureLabel.VICTORY, 0.92)),
        (handshapes.thumbs_up, ClassificationResult(GestureLabel.THUMBS_UP, 0.95)),
        (handshapes.pointing, ClassificationResult(GestureLabel.POINTING, 0.9)),
        (handshapes.open_palm, ClassificationResult(GestureLabel.OPEN_PALM, 0.93)),
    ],
)
def test_gestures(classifier, shape, expected):
    assert classifier.classify(shape()) == expected


def test_unrecognized_pose_is_weak_none(classifier):
    result = classifier.classify(handshapes.rock())
    assert result == ClassificationResult(GestureLabel.NONE, 0.7)
    assert not result.is_actionable


def test_parallel_fingers_are_not_victory(classifier):
    pose = classifier.describe(handshapes.victory_without_spread())
    assert pose.extended["index"] and pose.extended["middle"]
    assert not pose.victory_spread
    assert classifier.classify(handshapes.victory_without_spread()) == ClassificationResult(GestureLabel.NONE, 0.7)


def test_curled_fingers_far_from_wrist_are_not_a_fist(classifier):
    skeleton = handshapes.build(index="claw")
    pose = classifier.describe(skeleton)
    assert pose.curled["index"]
    assert not pose.extended["index"]
    assert not pose.fist_compact
    assert classifier.classify(skeleton).label is GestureLabel.NONE


def test_fist_takes_priority_over_thumbs_up(classifier):
    skeleton = handshapes.fist_with_raised_thumb()
    pose = classifier.describe(skeleton)
    by_label = {rule.label: rule for rule in DEFAULT_RULES}
    assert by_label[GestureLabel.FIST].matches(pose)
    assert by_label[GestureLabel.THUMBS_UP].matches(pose)
    assert classifier.classify(skeleton) == ClassificationResult(GestureLabel.FIST, 0.9)


def test_rule_order():
    assert [rule.label for rule in DEFAULT_RULES] == [
        GestureLabel.FIST,
        GestureLabel.VICTORY,
        GestureLabel.THUMBS_UP,
        GestureLabel.POINTING,
        GestureLabel.OPEN_PALM,
    ]


def test_first_matching_rule_wins(classifier):
    pose = classifier.describe(handshapes.open_palm())
    rules = (
        GestureRule(GestureLabel.POINTING, 0.5, lambda p: True),
        GestureRule(GestureLabel.OPEN_PALM, 0.6, lambda p: True),
    )
    assert match_rules(pose, rules) == ClassificationResult(GestureLabel.POINTING, 0.5)
    assert match_rules(pose, ()) == ClassificationResult(GestureLabel.NONE, 0.7)


def test_classify_is_idempotent(classifier):
    skeleton = handshapes.victory()
    assert classifier.classify(skeleton) == classifier.classify(skeleton)
    assert GestureClassifier().classify(skeleton) == classifier.classify(skeleton)


def test_accepts_mediapipe_style_landmarks(classifier):
    points = [SimpleNamespace(x=lm.x, y=lm.y, z=lm.z) for lm in handshapes.pointing()]
    assert classifier.classify(points).label is GestureLabel.POINTING


def test_accepts_plain_tuples(classifier):
    points = [(lm.x, lm.y, 0.0) for lm in handshapes.fist()]
    assert classifier.classify(points).label is GestureLabel.FIST


def test_thumb_extends_sideways(classifier):
    pose = classifier.describe(handshapes.open_palm())
    assert pose.extended["thumb"]
    assert not classifier.describe(handshapes.fist()).extended["thumb"]


def test_thresholds_are_configurable():
    strict = GestureClassifier(ClassifierConfig(finger_extend_margin=0.3))
    assert strict.classify(handshapes.pointing()) == ClassificationResult(GestureLabel.NONE, 0.7)

    wide = GestureClassifier(ClassifierConfig(victory_spread_ratio=3.0))
    assert wide.classify(handshapes.victory()).label is GestureLabel.NONE
