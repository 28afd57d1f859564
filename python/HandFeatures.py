import copy
import logging
from enum import Enum
from typing import Dict, List, Optional, Sequence

from HandBasis import IDENTITY_BASIS, HandBasis, compute_hand_basis, to_local
from Landmarks import (
    FINGER_SEGMENTS,
    FINGER_TIPS,
    FINGERS,
    INDEX_MCP,
    INDEX_TIP,
    MIDDLE_TIP,
    PINKY_MCP,
    RING_MCP,
    THUMB_IP,
    THUMB_MCP,
    THUMB_TIP,
    WRIST,
    palm_size as compute_palm_size,
    to_points,
)
from VectorMath import Vec3, angle, dist, normalize, vec_sub

logger = logging.getLogger(__name__)


class CurlState(str, Enum):
    EXTENDED = "Extended"
    FOLDED = "Folded"
    CLOSED = "Closed"


class ThumbPlacement(str, Enum):
    EXTENDED = "Extended"
    SIDE = "Side"
    OVER = "Over"
    UNDER = "Under"


SHAPE_NAMES = (
    "thumb_touching_index",
    "thumb_touching_middle",
    "thumb_touching_ring",
    "thumb_touching_pinky",
    "circular",
    "index_middle_together",
    "index_middle_spread",
    "index_middle_crossed",
)

DEFAULT_CURL_CFG = {
    "extend_enter": 1.2,
    "extend_exit": 1.1,
    "fold_ratio": 0.9,
    # per-finger overrides, e.g. {"pinky": {"extend_enter": 1.15}}
    "fingers": {},
}

DEFAULT_THUMB_CFG = {
    "extend_enter": 0.7,
    "extend_exit": 0.6,
    "fold_ratio": 0.35,
    "straight_angle": 150.0,
    "side_distance": 0.3,
    "over_ring_ratio": 1.3,
    "over_ring_distance": 0.9,
    "over_depth_enter": -0.1,
    "over_depth_exit": 0.2,
    "under_index_distance": 0.6,
    "under_depth_enter": 0.2,
    "under_depth_exit": -0.1,
}

DEFAULT_SHAPE_CFG = {
    "pinch": 0.3,
    "circular": 0.9,
    "together": 0.35,
    "spread": 0.5,
}


def classify_curl(ratio: float, last_state=None, enter: float = 1.2, exit: float = 1.1, fold: float = 0.9) -> CurlState:
    """
    Map an extension ratio to a curl state.

    A finger that was Extended last frame keeps that state until the ratio
    drops to the looser exit threshold.
    """
    threshold = exit if last_state == CurlState.EXTENDED else enter
    if ratio > threshold:
        return CurlState.EXTENDED
    if ratio > fold:
        return CurlState.FOLDED
    return CurlState.CLOSED


class HandFeatures:
    """
    Per-frame features for one hand. Directions are local-frame unit vectors.
    """

    def __init__(self):
        self.valid = False
        self.palm_size = 0.0
        self.basis: HandBasis = IDENTITY_BASIS
        self.curls: Dict[str, CurlState] = {name: CurlState.CLOSED for name in FINGERS}
        self.ratios: Dict[str, float] = {name: 0.0 for name in FINGERS}
        self.directions: Dict[str, Vec3] = {name: (0.0, 0.0, 0.0) for name in FINGERS}
        self.thumb_placement = ThumbPlacement.SIDE
        self.shapes: Dict[str, bool] = {name: False for name in SHAPE_NAMES}

    @classmethod
    def empty(cls) -> "HandFeatures":
        """Degenerate feature set used for invalid input: all closed, nothing detected."""
        return cls()

    def is_extended(self, finger: str) -> bool:
        return self.curls.get(finger) == CurlState.EXTENDED

    def extended_fingers(self) -> List[str]:
        return [name for name in FINGERS if self.is_extended(name)]

    def to_dict(self):
        return {
            "valid": self.valid,
            "palm_size": self.palm_size,
            "curls": {name: state.value for name, state in self.curls.items()},
            "ratios": dict(self.ratios),
            "directions": {name: list(vec) for name, vec in self.directions.items()},
            "thumb_placement": self.thumb_placement.value,
            "shapes": dict(self.shapes),
        }


class HandFeatureExtractor:
    """
    Computes curl states, local-frame finger directions and composite shape
    predicates from a landmark set.

    The extractor holds thresholds only. Hysteresis state lives in the memory
    object passed to extract(), which is read before and updated after each
    frame.
    """

    def __init__(self, curl_cfg=None, thumb_cfg=None, shape_cfg=None):
        self.curl_cfg = copy.deepcopy(DEFAULT_CURL_CFG)
        self.thumb_cfg = dict(DEFAULT_THUMB_CFG)
        self.shape_cfg = dict(DEFAULT_SHAPE_CFG)
        self.configure(curl_cfg, thumb_cfg, shape_cfg)

    def configure(self, curl_cfg=None, thumb_cfg=None, shape_cfg=None) -> None:
        if curl_cfg:
            for k, v in curl_cfg.items():
                if k == "fingers" and isinstance(v, dict):
                    # replaced wholesale so a dropped override stops applying
                    self.curl_cfg["fingers"] = {finger: dict(overrides) for finger, overrides in v.items()}
                else:
                    self.curl_cfg[k] = float(v)
        if thumb_cfg:
            self.thumb_cfg.update({k: float(v) for k, v in thumb_cfg.items()})
        if shape_cfg:
            self.shape_cfg.update({k: float(v) for k, v in shape_cfg.items()})

    def finger_thresholds(self, finger: str):
        """(enter, exit, fold) for one of index..pinky."""
        overrides = self.curl_cfg["fingers"].get(finger, {})
        enter = float(overrides.get("extend_enter", self.curl_cfg["extend_enter"]))
        exit_ = float(overrides.get("extend_exit", self.curl_cfg["extend_exit"]))
        fold = float(overrides.get("fold_ratio", self.curl_cfg["fold_ratio"]))
        # exit must never be stricter than enter
        return enter, min(exit_, enter), fold

    def extract(self, landmarks, memory=None) -> HandFeatures:
        points = to_points(landmarks)
        if points is None:
            logger.debug("invalid landmark set, returning empty features")
            return HandFeatures.empty()

        features = HandFeatures()
        features.valid = True
        features.palm_size = compute_palm_size(points)
        features.basis = compute_hand_basis(points)
        palm = max(features.palm_size, 1e-6)

        last_curls = memory.curls if memory is not None else {}
        last_placement = memory.thumb_placement if memory is not None else None

        # thumb: compared against the index knuckle instead of the wrist
        thumb_ratio = dist(points[THUMB_TIP], points[INDEX_MCP]) / palm
        features.ratios["thumb"] = thumb_ratio
        features.curls["thumb"] = classify_curl(
            thumb_ratio,
            last_curls.get("thumb"),
            enter=self.thumb_cfg["extend_enter"],
            exit=min(self.thumb_cfg["extend_exit"], self.thumb_cfg["extend_enter"]),
            fold=self.thumb_cfg["fold_ratio"],
        )

        wrist = points[WRIST]
        for name in FINGERS[1:]:
            base_idx, tip_idx = FINGER_SEGMENTS[name]
            base_dist = dist(wrist, points[base_idx])
            ratio = dist(wrist, points[tip_idx]) / base_dist if base_dist > 1e-9 else 0.0
            enter, exit_, fold = self.finger_thresholds(name)
            features.ratios[name] = ratio
            features.curls[name] = classify_curl(ratio, last_curls.get(name), enter, exit_, fold)

        for name, (base_idx, tip_idx) in FINGER_SEGMENTS.items():
            raw = normalize(vec_sub(points[tip_idx], points[base_idx]))
            features.directions[name] = to_local(raw, features.basis)

        features.thumb_placement = self._thumb_placement(points, palm, last_placement)
        features.shapes = self._shapes(points, palm)

        if memory is not None:
            memory.update(features)
        return features

    def _thumb_placement(self, points: Sequence[Vec3], palm: float, last) -> ThumbPlacement:
        c = self.thumb_cfg
        tip = points[THUMB_TIP]
        index_mcp = points[INDEX_MCP]
        depth = (tip[2] - index_mcp[2]) / palm
        to_ring = dist(tip, points[RING_MCP])
        to_index = dist(tip, index_mcp)

        # thumb wrapped across the front of the fingers
        crossing = to_ring < to_index * c["over_ring_ratio"]
        over_depth = c["over_depth_exit"] if last == ThumbPlacement.OVER else c["over_depth_enter"]
        if crossing and to_ring < palm * c["over_ring_distance"] and depth < over_depth:
            return ThumbPlacement.OVER

        under_depth = c["under_depth_exit"] if last == ThumbPlacement.UNDER else c["under_depth_enter"]
        if to_index < palm * c["under_index_distance"] and depth > under_depth:
            return ThumbPlacement.UNDER

        ip_angle = angle(points[THUMB_MCP], points[THUMB_IP], tip)
        if ip_angle > c["straight_angle"] and to_index > palm * c["side_distance"]:
            return ThumbPlacement.EXTENDED
        return ThumbPlacement.SIDE

    def _shapes(self, points: Sequence[Vec3], palm: float) -> Dict[str, bool]:
        c = self.shape_cfg
        thumb_tip = points[THUMB_TIP]
        shapes = {name: False for name in SHAPE_NAMES}

        tip_dists = {name: dist(thumb_tip, points[FINGER_TIPS[name]]) for name in FINGERS[1:]}
        for name, d in tip_dists.items():
            shapes[f"thumb_touching_{name}"] = d < palm * c["pinch"]

        avg_to_thumb = sum(tip_dists.values()) / len(tip_dists)
        shapes["circular"] = avg_to_thumb < palm * c["circular"]

        index_tip = points[INDEX_TIP]
        middle_tip = points[MIDDLE_TIP]
        pair_dist = dist(index_tip, middle_tip)
        if pair_dist < palm * c["together"]:
            shapes["index_middle_together"] = True
            # the tip that sits behind is nearer the pinky knuckle
            pinky_mcp = points[PINKY_MCP]
            shapes["index_middle_crossed"] = dist(index_tip, pinky_mcp) < dist(middle_tip, pinky_mcp)
        elif pair_dist > palm * c["spread"]:
            shapes["index_middle_spread"] = True
        return shapes


_SHAPE_LABELS = (
    ("thumb_touching_index", "Thumb Touching Index"),
    ("thumb_touching_middle", "Thumb Touching Middle"),
    ("thumb_touching_ring", "Thumb Touching Ring"),
    ("thumb_touching_pinky", "Thumb Touching Pinky"),
    ("circular", "Circular Shape"),
    ("index_middle_together", "Index/Middle Together"),
    ("index_middle_crossed", "Index/Middle Crossed"),
    ("index_middle_spread", "Index/Middle Spread"),
)


def describe_features(features: Optional[HandFeatures]) -> List[str]:
    """Human-readable finger states for live feedback."""
    if features is None or not features.valid:
        return ["Searching..."]

    states: List[str] = []
    for name in FINGERS[1:]:
        state = features.curls[name]
        if state != CurlState.CLOSED:
            states.append(f"{name.capitalize()} {state.value}")

    states.append(f"Thumb {features.thumb_placement.value}")

    for key, label in _SHAPE_LABELS:
        if features.shapes.get(key):
            states.append(label)

    # a pinched index forms a loop, it is not an open finger
    if features.shapes.get("thumb_touching_index") and "Index Extended" in states:
        states.remove("Index Extended")

    return states
