# GestureClassifier.py
import copy
import logging
import time

from GestureState import GestureState
from HandData import HandData, SignResult
from HandFeatures import (
    DEFAULT_CURL_CFG,
    DEFAULT_SHAPE_CFG,
    DEFAULT_THUMB_CFG,
    HandFeatureExtractor,
    describe_features,
)
from PoseMatcher import NO_MATCH, make_matcher
from VectorMath import clamp01

logger = logging.getLogger(__name__)


class GestureClassifier:
    """
    Per-frame pipeline for one hand stream:
    landmarks -> basis -> features -> pose match -> temporal stabilization.
    """

    def __init__(self, cfg=None):
        # default config
        self.cfg = {
            "curl": copy.deepcopy(DEFAULT_CURL_CFG),
            "thumb": dict(DEFAULT_THUMB_CFG),
            "shape": dict(DEFAULT_SHAPE_CFG),
            "matcher": {
                "strategy": "hybrid",
                "acceptance_threshold": 0.6,
                "curl_weight": 0.4,
                "direction_weight": 0.6,
                "folded_credit": 0.5,
            },
            "stabilizer": {
                "policy": "consensus",
                "window_size": 8,
                "consensus": 0.6,
                "consecutive_frames": 3,
                "alpha": 0.15,
            },
            "tracker": {
                "num_hands": 1,
                "min_detection_confidence": 0.5,
                "min_presence_confidence": 0.5,
                "min_tracking_confidence": 0.5,
            },
            "debug": {
                "log_scores": False,
            },
        }
        self.feature_extractor = HandFeatureExtractor()
        self.matcher = None
        self.matcher_strategy = None
        self.state = GestureState()
        self._last_time = None
        self.last_features = None

        self.update_config(cfg or {})

    def update_config(self, cfg):
        # deep-merge new cfg into self.cfg
        for k, v in (cfg or {}).items():
            if isinstance(v, dict):
                self.cfg.setdefault(k, {}).update(v)
            else:
                self.cfg[k] = v

        m = dict(self.cfg.get("matcher", {}))
        s = self.cfg.get("stabilizer", {})

        self.feature_extractor.configure(
            curl_cfg=self.cfg.get("curl"),
            thumb_cfg=self.cfg.get("thumb"),
            shape_cfg=self.cfg.get("shape"),
        )

        strategy = m.pop("strategy", "hybrid")
        # keyed on the configured name, since an unknown one resolves to hybrid
        if self.matcher is None or self.matcher_strategy != strategy:
            self.matcher = make_matcher(strategy, **m)
            self.matcher_strategy = strategy
        else:
            self.matcher.configure(**m)

        self.state.configure(
            window_size=s.get("window_size"),
            consensus=s.get("consensus"),
            alpha=s.get("alpha"),
            policy=s.get("policy"),
            consecutive_frames=s.get("consecutive_frames"),
        )
        self.log_scores = bool(self.cfg.get("debug", {}).get("log_scores", False))

    def reset(self):
        self.state.reset()
        self._last_time = None
        self.last_features = None

    def extract(self, landmarks):
        """Features for one frame, feeding the hysteresis memory."""
        return self.feature_extractor.extract(landmarks, self.state.memory)

    def classify_landmarks(self, landmarks, hand_score: float = 1.0) -> SignResult:
        features = self.extract(landmarks)
        self.last_features = features
        if not features.valid:
            return self.lose_hand()

        match = self.matcher.match(features)
        if self.log_scores and hasattr(self.matcher, "rank"):
            logger.debug("scores: %s", self.matcher.rank(features)[:3])

        raw_conf = match.confidence * clamp01(float(hand_score))
        label, confidence = self.state.update(match.label, raw_conf)
        return SignResult(
            label=label,
            confidence=confidence,
            finger_states=describe_features(features),
            raw_label=match.label,
            raw_confidence=raw_conf,
        )

    def lose_hand(self) -> SignResult:
        self.last_features = None
        label, confidence = self.state.lose_hand()
        return SignResult(
            label=label,
            confidence=confidence,
            finger_states=describe_features(None),
            raw_label=NO_MATCH.label,
            raw_confidence=NO_MATCH.confidence,
        )

    def target_similarity(self, landmarks, letter: str) -> float:
        """Score of the current frame against one named letter, without touching state."""
        features = self.feature_extractor.extract(landmarks)
        if not features.valid:
            return 0.0
        return self.matcher.target_similarity(features, letter)

    def classify_single(self, hand: HandData) -> HandData:
        now = hand.timestamp or time.time()
        hand.dt = now - self._last_time if self._last_time is not None else 0.0
        self._last_time = now

        lm = hand.world_landmarks if hand.world_landmarks is not None else hand.landmarks
        if lm is None:
            result = self.lose_hand()
        else:
            result = self.classify_landmarks(lm, hand.handedness_score)

        hand.features = self.last_features
        hand.raw_label = result.raw_label
        hand.raw_confidence = result.raw_confidence
        hand.label = result.label
        hand.confidence = result.confidence
        hand.finger_states = result.finger_states
        return hand

    def classify_hands(self, hands) -> SignResult:
        # only the first detected hand is classified
        if not hands:
            return self.lose_hand()
        hand = self.classify_single(hands[0])
        return SignResult(
            label=hand.label,
            confidence=hand.confidence,
            finger_states=hand.finger_states,
            raw_label=hand.raw_label,
            raw_confidence=hand.raw_confidence,
        )
