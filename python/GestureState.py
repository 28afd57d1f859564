import logging
from collections import Counter, deque
from typing import Dict, Optional

from HandFeatures import CurlState, HandFeatures, ThumbPlacement

logger = logging.getLogger(__name__)


# ==========================================
# PERSISTENT STATE (one hand stream)
# ==========================================
class FingerStateMemory:
    """
    Last curl state per finger and last thumb placement, read by the feature
    extractor to pick state-dependent thresholds.
    """

    def __init__(self):
        self.curls: Dict[str, CurlState] = {}
        self.thumb_placement: Optional[ThumbPlacement] = None

    def update(self, features: HandFeatures) -> None:
        self.curls.update(features.curls)
        self.thumb_placement = features.thumb_placement

    def reset(self) -> None:
        self.curls.clear()
        self.thumb_placement = None


class LabelStabilizer:
    """
    Sliding-window consensus over raw labels.

    The most frequent label becomes stable once its share of the window
    reaches `consensus`; a window dominated by None clears it; anything
    else keeps the previous stable label.
    """

    def __init__(self, window_size: int = 8, consensus: float = 0.6):
        self.window_size = max(1, int(window_size))
        self.consensus = max(0.0, min(1.0, float(consensus)))
        self._window = deque(maxlen=self.window_size)
        self.stable: Optional[str] = None

    @classmethod
    def consecutive(cls, frames: int = 3) -> "LabelStabilizer":
        """Switch only after `frames` identical raw labels in a row."""
        return cls(window_size=frames, consensus=1.0)

    def reset(self) -> None:
        self._window.clear()
        self.stable = None

    @property
    def window(self):
        return list(self._window)

    def push(self, label: Optional[str]) -> Optional[str]:
        self._window.append(label)

        counts = Counter(x for x in self._window if x is not None)
        none_count = len(self._window) - sum(counts.values())

        previous = self.stable
        if counts:
            top, votes = counts.most_common(1)[0]
            if votes / self.window_size >= self.consensus:
                self.stable = top
            elif none_count / self.window_size >= self.consensus:
                self.stable = None
        elif none_count / self.window_size >= self.consensus:
            self.stable = None

        if self.stable != previous:
            logger.info("stable label changed: %s -> %s", previous, self.stable)
        return self.stable


class ConfidenceSmoother:
    """Exponential moving average of the raw confidence."""

    def __init__(self, alpha: float = 0.15, initial: float = 0.0):
        self.alpha = min(1.0, max(1e-6, float(alpha)))
        self.value = float(initial)

    def update(self, raw: float) -> float:
        self.value = self.value * (1.0 - self.alpha) + float(raw) * self.alpha
        return self.value

    def reset(self) -> None:
        self.value = 0.0


class GestureState:
    """
    Everything that survives between frames for one tracked hand: curl
    hysteresis memory, label debounce and confidence smoothing.
    """

    def __init__(self, window_size: int = 8, consensus: float = 0.6, alpha: float = 0.15, policy: str = "consensus", consecutive_frames: int = 3):
        self.memory = FingerStateMemory()
        self.smoother = ConfidenceSmoother(alpha)
        self.policy = policy
        self.window_size = max(1, int(window_size))
        self.consensus = max(0.0, min(1.0, float(consensus)))
        self.consecutive_frames = max(1, int(consecutive_frames))
        self.labels = self._make_stabilizer()

    def _make_stabilizer(self) -> LabelStabilizer:
        if self.policy == "consecutive":
            return LabelStabilizer.consecutive(self.consecutive_frames)
        if self.policy != "consensus":
            logger.warning("unknown stabilizer policy %r, using consensus", self.policy)
        return LabelStabilizer(self.window_size, self.consensus)

    def configure(self, window_size=None, consensus=None, alpha=None, policy=None, consecutive_frames=None) -> None:
        if alpha is not None:
            self.smoother.alpha = min(1.0, max(1e-6, float(alpha)))

        before = (self.policy, self.window_size, self.consensus, self.consecutive_frames)
        if policy is not None:
            self.policy = policy
        if window_size is not None:
            self.window_size = max(1, int(window_size))
        if consensus is not None:
            self.consensus = max(0.0, min(1.0, float(consensus)))
        if consecutive_frames is not None:
            self.consecutive_frames = max(1, int(consecutive_frames))

        if (self.policy, self.window_size, self.consensus, self.consecutive_frames) != before:
            # window geometry changed: start a fresh debounce window
            self.labels = self._make_stabilizer()

    def update(self, raw_label: Optional[str], raw_confidence: float):
        stable = self.labels.push(raw_label)
        smoothed = self.smoother.update(raw_confidence)
        return stable, smoothed

    def lose_hand(self):
        """No detection this frame: vote None, decay confidence, forget curl history."""
        self.memory.reset()
        return self.update(None, 0.0)

    def reset(self) -> None:
        self.memory.reset()
        self.labels.reset()
        self.smoother.reset()
