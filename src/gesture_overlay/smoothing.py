from __future__ import annotations

from collections import deque
from typing import Deque, Dict

from .types import ClassificationResult, GestureLabel


class MajorityVoteSmoother:
    """
    Majority vote over the last `window` classification results.

    Keeps the classifier pure; the frame processor composes this stage on top.
    Ties go to whichever tied label was seen most recently.
    """

    def __init__(self, window: int = 5) -> None:
        if window < 1:
            raise ValueError(f"window must be >= 1, got {window}")
        self.window = window
        self._history: Deque[ClassificationResult] = deque(maxlen=window)

    def update(self, result: ClassificationResult) -> ClassificationResult:
        self._history.append(result)

        votes: Dict[GestureLabel, int] = {}
        last_seen: Dict[GestureLabel, int] = {}
        for i, r in enumerate(self._history):
            votes[r.label] = votes.get(r.label, 0) + 1
            last_seen[r.label] = i

        winner = max(votes, key=lambda label: (votes[label], last_seen[label]))
        confs = [r.confidence for r in self._history if r.label is winner]
        return ClassificationResult(winner, sum(confs) / len(confs))

    def reset(self) -> None:
        self._history.clear()

    def __len__(self) -> int:
        return len(self._history)
