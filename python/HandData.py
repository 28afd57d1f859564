from typing import List, Optional


class HandData:
    """
    Simple container for per-hand data that flows between modules.
    """

    def __init__(self):
        # raw mediapipe landmark object (for drawing)
        self.raw_landmarks = None

        # list of normalized image landmarks (landmark objects)
        self.landmarks = None

        # list of world landmarks in meters, origin near the hand center
        self.world_landmarks = None

        # "Left" / "Right"
        self.handedness = "Unknown"
        self.handedness_score = 1.0

        # boolean flag
        self.visible = False

        # timing
        self.timestamp = 0.0  # absolute time (seconds)
        self.dt = 0.0  # time since previous classified frame (seconds)

        # features computed per frame (HandFeatures)
        self.features = None

        # unstabilized match
        self.raw_label = None
        self.raw_confidence = 0.0

        # stabilized classification result
        self.label = None
        self.confidence = 0.0
        self.finger_states: List[str] = []

    def to_dict(self):
        """Serialize to JSON-friendly dict."""
        return {
            "handedness": self.handedness,
            "handedness_score": self.handedness_score,
            "visible": self.visible,
            "label": self.label,
            "confidence": self.confidence,
            "raw_label": self.raw_label,
            "raw_confidence": self.raw_confidence,
            "finger_states": list(self.finger_states),
            "features": self.features.to_dict() if self.features is not None else None,
            "timestamp": self.timestamp,
            "dt": self.dt,
        }


class SignResult:
    """
    Stabilized per-frame output for the UI. raw_label / raw_confidence keep
    the unsmoothed match for debugging.
    """

    def __init__(
        self,
        label: Optional[str] = None,
        confidence: float = 0.0,
        finger_states: Optional[List[str]] = None,
        raw_label: Optional[str] = None,
        raw_confidence: float = 0.0,
    ):
        self.label = label
        self.confidence = confidence
        self.finger_states = list(finger_states) if finger_states else []
        self.raw_label = raw_label
        self.raw_confidence = raw_confidence

    def to_dict(self):
        return {
            "label": self.label,
            "confidence": self.confidence,
            "fingerStates": list(self.finger_states),
        }

    def __repr__(self):
        return f"SignResult(label={self.label!r}, confidence={self.confidence:.3f}, raw={self.raw_label!r})"
