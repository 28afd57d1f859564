from typing import Dict, List, MutableMapping, Optional, Sequence, Tuple, Union

import numpy as np

from VectorMath import Vec3, dist

NUM_LANDMARKS = 21

WRIST = 0
THUMB_CMC, THUMB_MCP, THUMB_IP, THUMB_TIP = 1, 2, 3, 4
INDEX_MCP, INDEX_PIP, INDEX_DIP, INDEX_TIP = 5, 6, 7, 8
MIDDLE_MCP, MIDDLE_PIP, MIDDLE_DIP, MIDDLE_TIP = 9, 10, 11, 12
RING_MCP, RING_PIP, RING_DIP, RING_TIP = 13, 14, 15, 16
PINKY_MCP, PINKY_PIP, PINKY_DIP, PINKY_TIP = 17, 18, 19, 20

FINGERS: Tuple[str, ...] = ("thumb", "index", "middle", "ring", "pinky")

# (base, tip) landmark indices per finger; the thumb uses CMC -> TIP.
FINGER_SEGMENTS: Dict[str, Tuple[int, int]] = {
    "thumb": (THUMB_CMC, THUMB_TIP),
    "index": (INDEX_MCP, INDEX_TIP),
    "middle": (MIDDLE_MCP, MIDDLE_TIP),
    "ring": (RING_MCP, RING_TIP),
    "pinky": (PINKY_MCP, PINKY_TIP),
}

FINGER_TIPS: Dict[str, int] = {name: tip for name, (_, tip) in FINGER_SEGMENTS.items()}

LandmarkLike = Union[Sequence[float], MutableMapping[str, float]]


def _extract_point(entry: Union[LandmarkLike, object]) -> Vec3:
    if hasattr(entry, "x") and hasattr(entry, "y") and hasattr(entry, "z"):
        return (float(entry.x), float(entry.y), float(entry.z))
    if isinstance(entry, dict):
        return (float(entry.get("x", 0.0)), float(entry.get("y", 0.0)), float(entry.get("z", 0.0)))
    if isinstance(entry, (list, tuple)) and len(entry) >= 3:
        return (float(entry[0]), float(entry[1]), float(entry[2]))
    raise ValueError("Unsupported landmark format; expected object with x,y,z or sequence of 3 values.")


def to_points(landmarks) -> Optional[List[Vec3]]:
    """
    Coerce a landmark set into a list of (x, y, z) tuples.
    Returns None when the set is missing, too short, or not made of 3D points.
    """
    if landmarks is None:
        return None
    if isinstance(landmarks, np.ndarray):
        if landmarks.ndim != 2 or landmarks.shape[1] < 3:
            return None
        landmarks = landmarks[:, :3].tolist()
    try:
        if len(landmarks) < NUM_LANDMARKS:
            return None
        return [_extract_point(entry) for entry in landmarks]
    except (TypeError, ValueError):
        return None


def is_valid_landmark_set(landmarks) -> bool:
    return to_points(landmarks) is not None


def palm_size(points: Sequence[Vec3]) -> float:
    """Wrist -> index MCP, the scale reference for palm-relative thresholds."""
    return dist(points[WRIST], points[INDEX_MCP])
