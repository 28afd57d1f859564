from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from HandFeatures import ThumbPlacement
from Landmarks import FINGERS
from VectorMath import Vec3, normalize


class CurlRequirement(str, Enum):
    OPEN = "Open"
    CLOSED = "Closed"
    ANY = "Any"


@dataclass(frozen=True)
class PoseDefinition:
    """
    Canonical template for one static letter.

    curls: requirement per finger (missing fingers default to ANY)
    directions: optional canonical finger directions in the local hand frame
        (+x toward the pinky, +y up along the fingers, +z palm normal)
    shapes: optional composite predicates that must hold (True) or must not (False)
    thumb: allowed thumb placements, empty for any
    """

    name: str
    curls: Dict[str, CurlRequirement]
    directions: Dict[str, Vec3] = field(default_factory=dict)
    shapes: Dict[str, bool] = field(default_factory=dict)
    thumb: Tuple[ThumbPlacement, ...] = ()
    instruction: str = ""

    def __post_init__(self):
        curls = {name: self.curls.get(name, CurlRequirement.ANY) for name in FINGERS}
        object.__setattr__(self, "curls", curls)
        object.__setattr__(
            self, "directions", {name: normalize(vec) for name, vec in self.directions.items()}
        )

    @property
    def closed_count(self) -> int:
        return sum(1 for req in self.curls.values() if req == CurlRequirement.CLOSED)


O = CurlRequirement.OPEN
C = CurlRequirement.CLOSED
ANY = CurlRequirement.ANY

UP = (0.0, 1.0, 0.0)


def _curls(thumb, index, middle, ring, pinky) -> Dict[str, CurlRequirement]:
    return dict(zip(FINGERS, (thumb, index, middle, ring, pinky)))


# Order matters: ties go to the earlier entry, so poses with more closed
# fingers come first.
POSE_LIBRARY: Tuple[PoseDefinition, ...] = (
    PoseDefinition(
        name="A",
        curls=_curls(ANY, C, C, C, C),
        directions={"thumb": UP},
        thumb=(ThumbPlacement.SIDE, ThumbPlacement.EXTENDED),
        instruction="Thumb on the side of a closed fist.",
    ),
    PoseDefinition(
        name="S",
        curls=_curls(ANY, C, C, C, C),
        directions={"thumb": (0.4, 0.9, 0.0)},
        thumb=(ThumbPlacement.OVER,),
        instruction="Closed fist with the thumb wrapped across the fingers.",
    ),
    PoseDefinition(
        name="E",
        curls=_curls(ANY, C, C, C, C),
        thumb=(ThumbPlacement.UNDER,),
        instruction="Fingers curled down, thumb tucked underneath.",
    ),
    PoseDefinition(
        name="I",
        curls=_curls(C, C, C, C, O),
        directions={"pinky": UP},
        instruction="Pinky finger straight up, others closed.",
    ),
    PoseDefinition(
        name="Y",
        curls=_curls(O, C, C, C, O),
        directions={"thumb": (-0.9, 0.2, 0.0), "pinky": (0.4, 0.9, 0.0)},
        instruction="Thumb and pinky extended.",
    ),
    PoseDefinition(
        name="D",
        curls=_curls(C, O, C, C, C),
        directions={"index": UP},
        instruction="Index finger up, others touching thumb.",
    ),
    PoseDefinition(
        name="L",
        curls=_curls(O, O, C, C, C),
        directions={"thumb": (-0.9, 0.4, 0.0), "index": UP},
        instruction="Index and thumb extended (forming an L).",
    ),
    PoseDefinition(
        name="R",
        curls=_curls(ANY, O, O, C, C),
        directions={"index": UP, "middle": UP},
        shapes={"index_middle_crossed": True},
        instruction="Index and middle fingers crossed.",
    ),
    PoseDefinition(
        name="U",
        curls=_curls(ANY, O, O, C, C),
        directions={"index": UP, "middle": UP},
        shapes={"index_middle_together": True, "index_middle_crossed": False},
        instruction="Index and middle fingers up and touching.",
    ),
    PoseDefinition(
        name="V",
        curls=_curls(ANY, O, O, C, C),
        directions={"index": (-0.2, 1.0, 0.0), "middle": (0.2, 1.0, 0.0)},
        shapes={"index_middle_spread": True},
        instruction='Index and middle fingers in a "V" shape.',
    ),
    PoseDefinition(
        name="W",
        curls=_curls(ANY, O, O, O, C),
        directions={"index": (-0.3, 0.9, 0.0), "middle": UP, "ring": (0.3, 0.9, 0.0)},
        instruction="Index, middle, and ring fingers up and spread.",
    ),
    PoseDefinition(
        name="F",
        curls=_curls(ANY, ANY, O, O, O),
        directions={"middle": UP, "ring": UP, "pinky": UP},
        shapes={"thumb_touching_index": True},
        instruction="Index and thumb touching, other fingers up.",
    ),
    PoseDefinition(
        name="O",
        curls=_curls(ANY, ANY, ANY, ANY, ANY),
        directions={
            "thumb": (0.0, 0.7, 0.7),
            "index": (0.0, 0.3, 0.95),
            "middle": (0.0, 0.3, 0.95),
            "ring": (0.0, 0.3, 0.95),
            "pinky": (0.0, 0.3, 0.95),
        },
        shapes={"circular": True, "thumb_touching_index": True},
        instruction="All fingertips meet the thumb in a round O.",
    ),
    PoseDefinition(
        name="C",
        curls=_curls(ANY, O, O, O, O),
        directions={
            "index": (0.0, 0.7, 0.7),
            "middle": (0.0, 0.7, 0.7),
            "ring": (0.0, 0.7, 0.7),
            "pinky": (0.0, 0.7, 0.7),
        },
        shapes={"circular": True, "thumb_touching_index": False},
        instruction="Curve the fingers and thumb into a C, tips apart.",
    ),
    PoseDefinition(
        name="B",
        curls=_curls(C, O, O, O, O),
        directions={"index": UP, "middle": UP, "ring": UP, "pinky": UP},
        shapes={"thumb_touching_index": False},
        instruction="All fingers straight up, thumb tucked across palm.",
    ),
)

FLAT_HAND_LETTER = "B"
FIST_LETTER = "A"

_BY_NAME: Dict[str, PoseDefinition] = {pose.name: pose for pose in POSE_LIBRARY}


def get_pose(name: Optional[str]) -> Optional[PoseDefinition]:
    if not name:
        return None
    return _BY_NAME.get(name.upper())


def letters() -> List[str]:
    return [pose.name for pose in POSE_LIBRARY]
