import numpy as np
import pytest

# Synthetic right hand in meters, palm facing the camera (z = 0 plane),
# fingers pointing up +y.
WRIST = (0.0, 0.0, 0.0)
THUMB_CMC = (-0.025, 0.025, 0.0)
MCPS = {
    "index": (-0.03, 0.09, 0.0),
    "middle": (-0.01, 0.095, 0.0),
    "ring": (0.01, 0.09, 0.0),
    "pinky": (0.03, 0.08, 0.0),
}

# offsets from the MCP for PIP, DIP, TIP
EXTENDED = ((0.0, 0.04, 0.0), (0.0, 0.065, 0.0), (0.0, 0.085, 0.0))
CLOSED = ((0.0, 0.03, 0.02), (0.0, 0.01, 0.04), (0.0, -0.03, 0.025))
FOLDED = ((0.0, 0.035, 0.01), (0.0, 0.03, 0.03), (0.0, 0.005, 0.035))
# tip ratio about 1.02 to 1.04: Folded, short of the 1.1 exit threshold
LOOSE = ((0.0, 0.03, 0.02), (0.0, 0.02, 0.035), (0.0, -0.004, 0.034))
# bent forward with the tips well away from the wrist
C_CURVE = ((0.0, 0.03, 0.02), (0.0, 0.045, 0.04), (0.0, 0.05, 0.06))
O_CURVE = ((0.0, 0.03, 0.02), (0.0, 0.035, 0.045), (0.0, 0.02, 0.06))

FINGER_SHAPES = {
    "extended": EXTENDED,
    "closed": CLOSED,
    "folded": FOLDED,
    "loose": LOOSE,
    "c_curve": C_CURVE,
    "o_curve": O_CURVE,
}

# thumb MCP, IP, TIP
THUMB_FIST = ((-0.045, 0.045, 0.005), (-0.05, 0.065, 0.01), (-0.048, 0.08, 0.012))
THUMB_TUCKED = ((-0.04, 0.045, 0.01), (-0.03, 0.065, 0.015), (-0.02, 0.075, 0.015))
THUMB_OUT = ((-0.05, 0.04, 0.0), (-0.075, 0.05, 0.0), (-0.095, 0.058, 0.0))
THUMB_LOOSE = ((-0.046, 0.045, 0.004), (-0.053, 0.063, 0.008), (-0.052, 0.078, 0.01))
# pointing back out of the palm, away from every letter
THUMB_BACK = ((-0.028, 0.025, -0.012), (-0.029, 0.02, -0.03), (-0.03, 0.015, -0.05))
# across the front of the fist / tucked under the curled fingers
THUMB_OVER = ((-0.035, 0.05, 0.0), (-0.015, 0.07, -0.01), (0.0, 0.075, -0.02))
THUMB_UNDER = ((-0.04, 0.045, 0.01), (-0.032, 0.062, 0.02), (-0.022, 0.072, 0.022))
# tip on the folded index tip
THUMB_PINCH = ((-0.04, 0.05, 0.01), (-0.035, 0.075, 0.025), (-0.028, 0.09, 0.03))
THUMB_C = ((-0.04, 0.05, 0.02), (-0.03, 0.075, 0.045), (-0.02, 0.09, 0.06))
# tip on the o_curve index tip
THUMB_O = ((-0.04, 0.05, 0.02), (-0.035, 0.08, 0.045), (-0.028, 0.105, 0.058))


def _add(a, b):
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def build_hand(thumb=THUMB_TUCKED, index="extended", middle="extended", ring="extended", pinky="extended"):
    """21 (x, y, z) tuples in landmark order."""
    points = [WRIST, THUMB_CMC, *thumb]
    for name, shape in (("index", index), ("middle", middle), ("ring", ring), ("pinky", pinky)):
        mcp = MCPS[name]
        points.append(mcp)
        for offset in FINGER_SHAPES[shape]:
            points.append(_add(mcp, offset))
    return points


def flat_hand():
    return build_hand(THUMB_TUCKED, "extended", "extended", "extended", "extended")


def fist_hand():
    return build_hand(THUMB_FIST, "closed", "closed", "closed", "closed")


def l_hand():
    return build_hand(THUMB_OUT, "extended", "closed", "closed", "closed")


def loose_fist_hand():
    return build_hand(THUMB_LOOSE, "loose", "loose", "loose", "loose")


def half_curled_hand():
    return build_hand(THUMB_BACK, "loose", "loose", "loose", "loose")


def crossed_hand():
    points = build_hand(THUMB_TUCKED, "extended", "extended", "closed", "closed")
    # index tip pushed behind the middle tip
    points[8] = (-0.005, 0.176, 0.005)
    return points


def spread_hand():
    points = build_hand(THUMB_TUCKED, "extended", "extended", "closed", "closed")
    points[8] = (-0.07, 0.17, 0.0)
    return points


# one synthetic hand per letter
LETTER_HANDS = {
    "A": fist_hand,
    "S": lambda: build_hand(THUMB_OVER, "closed", "closed", "closed", "closed"),
    "E": lambda: build_hand(THUMB_UNDER, "closed", "closed", "closed", "closed"),
    "I": lambda: build_hand(THUMB_FIST, "closed", "closed", "closed", "extended"),
    "Y": lambda: build_hand(THUMB_OUT, "closed", "closed", "closed", "extended"),
    "D": lambda: build_hand(THUMB_FIST, "extended", "closed", "closed", "closed"),
    "L": l_hand,
    "R": crossed_hand,
    "U": lambda: build_hand(THUMB_TUCKED, "extended", "extended", "closed", "closed"),
    "V": spread_hand,
    "W": lambda: build_hand(THUMB_TUCKED, "extended", "extended", "extended", "closed"),
    "F": lambda: build_hand(THUMB_PINCH, "folded", "extended", "extended", "extended"),
    "O": lambda: build_hand(THUMB_O, "o_curve", "o_curve", "o_curve", "o_curve"),
    "C": lambda: build_hand(THUMB_C, "c_curve", "c_curve", "c_curve", "c_curve"),
    "B": flat_hand,
}


def rotation_matrix(axis, degrees):
    axis = np.asarray(axis, dtype=float)
    axis = axis / np.linalg.norm(axis)
    theta = np.radians(degrees)
    k = np.array(
        [
            [0.0, -axis[2], axis[1]],
            [axis[2], 0.0, -axis[0]],
            [-axis[1], axis[0], 0.0],
        ]
    )
    return np.eye(3) + np.sin(theta) * k + (1.0 - np.cos(theta)) * (k @ k)


def transform(points, axis=(0.3, -0.5, 0.8), degrees=47.0, offset=(0.2, -0.1, 0.5)):
    """Rigidly rotate and translate a landmark set; returns an (N, 3) array."""
    arr = np.asarray(points, dtype=float)
    return arr @ rotation_matrix(axis, degrees).T + np.asarray(offset)


class Landmark:
    """Stand-in for a mediapipe landmark with x/y/z attributes."""

    def __init__(self, x, y, z):
        self.x = x
        self.y = y
        self.z = z


@pytest.fixture
def flat():
    return flat_hand()


@pytest.fixture
def fist():
    return fist_hand()


@pytest.fixture
def l_shape():
    return l_hand()
