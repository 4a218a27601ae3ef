from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple

from .config import ClassifierConfig
from .errors import MalformedSkeletonError
from .types import (
    FINGERS,
    NO_HAND,
    THUMB_MCP,
    THUMB_TIP,
    WRIST,
    ClassificationResult,
    GestureLabel,
    HandSkeleton,
    as_skeleton,
)
from .utils import distance, joint_angle


logger = logging.getLogger(__name__)

NO_GESTURE_CONFIDENCE = 0.7


@dataclass(frozen=True)
class HandPose:
    """Boolean predicates derived from a single skeleton."""

    extended: Dict[str, bool]  # thumb/index/middle/ring/pinky
    curled: Dict[str, bool]  # index/middle/ring/pinky
    fist_compact: bool
    victory_spread: bool
    thumb_raised: bool

    def any_extended(self, *fingers: str) -> bool:
        return any(self.extended[f] for f in fingers)

    def all_extended(self, *fingers: str) -> bool:
        return all(self.extended[f] for f in fingers)


@dataclass(frozen=True)
class GestureRule:
    label: GestureLabel
    confidence: float
    matches: Callable[[HandPose], bool]


_FOUR = ("index", "middle", "ring", "pinky")


def _is_fist(pose: HandPose) -> bool:
    return (
        not pose.any_extended(*_FOUR)
        and all(pose.curled[f] for f in _FOUR)
        and pose.fist_compact
    )


def _is_victory(pose: HandPose) -> bool:
    return (
        pose.all_extended("index", "middle")
        and not pose.any_extended("ring", "pinky")
        and pose.victory_spread
    )


def _is_thumbs_up(pose: HandPose) -> bool:
    return pose.extended["thumb"] and pose.thumb_raised and not pose.any_extended(*_FOUR)


def _is_pointing(pose: HandPose) -> bool:
    return pose.extended["index"] and not pose.any_extended("middle", "ring", "pinky")


def _is_open_palm(pose: HandPose) -> bool:
    return pose.all_extended(*_FOUR)


# First match wins; the order resolves ambiguous poses.
DEFAULT_RULES: Tuple[GestureRule, ...] = (
    GestureRule(GestureLabel.FIST, 0.9, _is_fist),
    GestureRule(GestureLabel.VICTORY, 0.92, _is_victory),
    GestureRule(GestureLabel.THUMBS_UP, 0.95, _is_thumbs_up),
    GestureRule(GestureLabel.POINTING, 0.9, _is_pointing),
    GestureRule(GestureLabel.OPEN_PALM, 0.93, _is_open_palm),
)


def match_rules(pose: HandPose, rules: Sequence[GestureRule] = DEFAULT_RULES) -> ClassificationResult:
    for rule in rules:
        if rule.matches(pose):
            return ClassificationResult(rule.label, rule.confidence)
    return ClassificationResult(GestureLabel.NONE, NO_GESTURE_CONFIDENCE)


class GestureClassifier:
    """
    Geometric classifier mapping a 21-point hand skeleton to a gesture label.

    Stateless: every call is independent of previous frames. Invalid input never
    raises; it degrades to `(None, 0.0)`.

    Usage:
        classifier = GestureClassifier()
        result = classifier.classify(skeleton)
    """

    def __init__(
        self,
        config: Optional[ClassifierConfig] = None,
        rules: Sequence[GestureRule] = DEFAULT_RULES,
    ) -> None:
        self.config = config or ClassifierConfig()
        self.rules = tuple(rules)

    def classify(self, skeleton) -> ClassificationResult:
        if skeleton is None:
            return NO_HAND
        try:
            skeleton = as_skeleton(skeleton)
        except MalformedSkeletonError as e:
            logger.debug("Ignoring malformed skeleton: %s", e)
            return NO_HAND
        return match_rules(self.describe(skeleton), self.rules)

    def describe(self, skeleton: HandSkeleton) -> HandPose:
        cfg = self.config
        wrist = skeleton[WRIST]

        extended: Dict[str, bool] = {}
        curled: Dict[str, bool] = {}
        compact = True
        for name, (mcp_i, pip_i, dip_i, tip_i) in FINGERS.items():
            mcp, pip, dip, tip = skeleton[mcp_i], skeleton[pip_i], skeleton[dip_i], skeleton[tip_i]
            extended[name] = tip.y < mcp.y - cfg.margin_for(name)
            curled[name] = joint_angle(mcp, pip, dip) < cfg.curl_angle_deg or tip.y > pip.y
            if distance(tip, wrist) >= distance(mcp, wrist):
                compact = False

        thumb_tip = skeleton[THUMB_TIP]
        thumb_mcp = skeleton[THUMB_MCP]
        extended["thumb"] = (
            thumb_tip.y < thumb_mcp.y - cfg.thumb_extend_margin
            or abs(thumb_tip.x - thumb_mcp.x) > cfg.thumb_lateral_margin
        )

        index_mcp, _, _, index_tip = (skeleton[i] for i in FINGERS["index"])
        middle_mcp, _, _, middle_tip = (skeleton[i] for i in FINGERS["middle"])
        spread = distance(index_tip, middle_tip) > cfg.victory_spread_ratio * distance(index_mcp, middle_mcp)

        return HandPose(
            extended=extended,
            curled=curled,
            fist_compact=compact,
            victory_spread=spread,
            thumb_raised=thumb_tip.y < wrist.y - cfg.thumb_raise_margin,
        )
