import math
from typing import Tuple

Vec3 = Tuple[float, float, float]


# ---------- vector & geometry ----------
def vec_sub(a, b) -> Vec3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def vec_len(v) -> float:
    return math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])


def dot(a, b) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def cross(a, b) -> Vec3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def normalize(v) -> Vec3:
    """Unit vector along v. A zero vector comes back unchanged."""
    length = vec_len(v) or 1.0
    return (v[0] / length, v[1] / length, v[2] / length)


def dist(a, b) -> float:
    """Euclidean distance between two 3D points."""
    return vec_len(vec_sub(a, b))


def clamp01(v: float) -> float:
    return max(0.0, min(1.0, v))


def angle(a, b, c) -> float:
    """Angle (degrees) at b for points a-b-c."""
    ab = vec_sub(a, b)
    cb = vec_sub(c, b)
    mag1 = vec_len(ab)
    mag2 = vec_len(cb)
    if mag1 * mag2 == 0:
        return 0.0
    v = dot(ab, cb) / (mag1 * mag2)
    v = max(min(v, 1.0), -1.0)
    return math.degrees(math.acos(v))


def cosine_similarity(a, b) -> float:
    mag1 = vec_len(a)
    mag2 = vec_len(b)
    if mag1 * mag2 == 0:
        return 0.0
    v = dot(a, b) / (mag1 * mag2)
    return max(min(v, 1.0), -1.0)
