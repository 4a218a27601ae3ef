from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from .types import NO_HAND, ClassificationResult, GestureLabel


logger = logging.getLogger(__name__)

Listener = Callable[[GestureLabel, ClassificationResult], None]


@dataclass(frozen=True)
class GestureChange:
    previous: GestureLabel
    result: ClassificationResult
    listeners: tuple


class GestureState:
    """
    Published gesture for the presentation layer.

    Listeners are called with `(previous_label, result)` whenever a published
    result carries a different label than the one before it. `store` and
    `notify` split publishing so callers can update state under their own
    lock and run listeners after releasing it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._result = NO_HAND
        self._listeners: List[Listener] = []
        self.ready = False

    @property
    def result(self) -> ClassificationResult:
        return self._result

    @property
    def label(self) -> GestureLabel:
        return self._result.label

    @property
    def confidence(self) -> float:
        return self._result.confidence

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def store(self, result: ClassificationResult) -> Optional[GestureChange]:
        """Store `result` without notifying; returns the pending change if the label changed."""
        with self._lock:
            previous = self._result.label
            self._result = result
            if result.label is previous:
                return None
            return GestureChange(previous, result, tuple(self._listeners))

    def notify(self, change: Optional[GestureChange]) -> None:
        if change is None:
            return
        for listener in change.listeners:
            try:
                listener(change.previous, change.result)
            except Exception:
                logger.exception("Gesture listener %r failed", listener)

    def publish(self, result: ClassificationResult) -> bool:
        """Store `result` and notify listeners; returns True if the label changed."""
        change = self.store(result)
        self.notify(change)
        return change is not None


class CountPolicy(Enum):
    EVERY_FRAME = "every-frame"  # count every frame with a non-None label
    ON_TRANSITION = "on-transition"  # count only when the label changes into a gesture


class GestureTally:
    """Per-gesture counters owned by the view layer."""

    def __init__(self, policy: CountPolicy = CountPolicy.ON_TRANSITION) -> None:
        self.policy = policy
        self._counts: Dict[GestureLabel, int] = {
            label: 0 for label in GestureLabel if label is not GestureLabel.NONE
        }

    def record(self, label: GestureLabel, changed: bool) -> bool:
        if label is GestureLabel.NONE:
            return False
        if self.policy is CountPolicy.ON_TRANSITION and not changed:
            return False
        self._counts[label] += 1
        return True

    def reset(self) -> None:
        for label in self._counts:
            self._counts[label] = 0

    @property
    def counts(self) -> Dict[GestureLabel, int]:
        return dict(self._counts)

    def __getitem__(self, label: GestureLabel) -> int:
        return self._counts[label]
