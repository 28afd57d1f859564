import logging
from typing import Iterable, List, NamedTuple, Optional, Tuple

from HandFeatures import CurlState, HandFeatures, ThumbPlacement
from PoseLibrary import POSE_LIBRARY, CurlRequirement, PoseDefinition, get_pose
from VectorMath import clamp01, cosine_similarity

logger = logging.getLogger(__name__)


class MatchResult(NamedTuple):
    label: Optional[str]
    confidence: float


NO_MATCH = MatchResult(None, 0.0)


class PoseMatcher:
    """Common interface for scoring strategies: match(features) -> MatchResult."""

    name = "base"

    def match(self, features: HandFeatures) -> MatchResult:
        raise NotImplementedError

    def target_similarity(self, features: HandFeatures, letter: str) -> float:
        result = self.match(features)
        if result.label is None or get_pose(letter) is None:
            return 0.0
        return result.confidence if result.label == letter.upper() else 0.0

    def configure(self, **kwargs) -> None:
        pass


class HybridPoseMatcher(PoseMatcher):
    """
    Scores every library pose with a blend of curl compatibility and
    direction similarity, and keeps the best one above the acceptance
    threshold.
    """

    name = "hybrid"

    def __init__(
        self,
        library: Iterable[PoseDefinition] = POSE_LIBRARY,
        acceptance_threshold: float = 0.6,
        curl_weight: float = 0.4,
        direction_weight: float = 0.6,
        folded_credit: float = 0.5,
    ):
        self.library: Tuple[PoseDefinition, ...] = tuple(library)
        self.acceptance_threshold = acceptance_threshold
        self.curl_weight = curl_weight
        self.direction_weight = direction_weight
        self.folded_credit = folded_credit

    def configure(
        self,
        acceptance_threshold: float = None,
        curl_weight: float = None,
        direction_weight: float = None,
        folded_credit: float = None,
        **_ignored,
    ) -> None:
        if acceptance_threshold is not None:
            self.acceptance_threshold = clamp01(float(acceptance_threshold))
        if curl_weight is not None:
            self.curl_weight = max(0.0, float(curl_weight))
        if direction_weight is not None:
            self.direction_weight = max(0.0, float(direction_weight))
        if folded_credit is not None:
            self.folded_credit = clamp01(float(folded_credit))

    def _finger_credit(self, requirement: CurlRequirement, observed: CurlState) -> float:
        if requirement == CurlRequirement.ANY:
            return 1.0
        if observed == CurlState.FOLDED:
            return self.folded_credit
        if requirement == CurlRequirement.OPEN:
            return 1.0 if observed == CurlState.EXTENDED else 0.0
        return 1.0 if observed == CurlState.CLOSED else 0.0

    def curl_score(self, features: HandFeatures, pose: PoseDefinition) -> float:
        checks: List[float] = [
            self._finger_credit(requirement, features.curls[finger])
            for finger, requirement in pose.curls.items()
        ]
        return sum(checks) / len(checks)

    def shape_score(self, features: HandFeatures, pose: PoseDefinition) -> float:
        """Fraction of shape and thumb-placement requirements met; 1.0 when the pose has none."""
        checks = [bool(features.shapes.get(shape)) == wanted for shape, wanted in pose.shapes.items()]
        if pose.thumb:
            checks.append(features.thumb_placement in pose.thumb)
        if not checks:
            return 1.0
        return sum(checks) / len(checks)

    def direction_score(self, features: HandFeatures, pose: PoseDefinition) -> Optional[float]:
        """Mean cosine similarity remapped to [0, 1]; None when the pose has no directions."""
        if not pose.directions:
            return None
        total = 0.0
        for finger, canonical in pose.directions.items():
            total += cosine_similarity(features.directions[finger], canonical)
        avg = total / len(pose.directions)
        return (avg + 1.0) / 2.0

    def score_pose(self, features: HandFeatures, pose: PoseDefinition) -> float:
        if not features.valid:
            return 0.0
        curl = self.curl_score(features, pose)
        direction = self.direction_score(features, pose)
        if direction is None:
            score = curl
        else:
            total_w = max(self.curl_weight + self.direction_weight, 1e-6)
            score = (self.curl_weight * curl + self.direction_weight * direction) / total_w
        # shape and thumb-placement misses scale the blended score
        return clamp01(score * self.shape_score(features, pose))

    def rank(self, features: HandFeatures) -> List[Tuple[str, float]]:
        scores = [(pose.name, self.score_pose(features, pose)) for pose in self.library]
        # sorted() is stable, so library order still breaks ties
        return sorted(scores, key=lambda kv: kv[1], reverse=True)

    def match(self, features: HandFeatures) -> MatchResult:
        if features is None or not features.valid:
            return NO_MATCH

        best_label = None
        best_score = -1.0
        for pose in self.library:
            score = self.score_pose(features, pose)
            if score > best_score:
                best_score = score
                best_label = pose.name

        if best_label is None or best_score < self.acceptance_threshold:
            logger.debug("no match (best %s=%.2f)", best_label, best_score)
            return NO_MATCH
        return MatchResult(best_label, best_score)

    def target_similarity(self, features: HandFeatures, letter: str) -> float:
        pose = get_pose(letter)
        if pose is None or features is None:
            return 0.0
        return self.score_pose(features, pose)


class RuleBasedMatcher(PoseMatcher):
    """
    Branching rules over extended-finger counts and shape predicates.
    Most specific checks first; every hit reports full confidence.
    The round letters C and O are left to the hybrid matcher.
    """

    name = "rules"

    def match(self, features: HandFeatures) -> MatchResult:
        if features is None or not features.valid:
            return NO_MATCH

        ext = {name: features.is_extended(name) for name in features.curls}
        shapes = features.shapes
        finger_count = sum(1 for name in ("index", "middle", "ring", "pinky") if ext[name])

        # F before the four-finger check: the pinched index may still read as open
        if shapes.get("thumb_touching_index") and ext["middle"] and ext["ring"] and ext["pinky"]:
            return MatchResult("F", 1.0)

        if finger_count == 4:
            return MatchResult("B", 1.0)

        if finger_count == 3 and ext["index"] and ext["middle"] and ext["ring"]:
            return MatchResult("W", 1.0)

        if finger_count == 2 and ext["index"] and ext["middle"]:
            if shapes.get("index_middle_crossed"):
                return MatchResult("R", 1.0)
            if shapes.get("index_middle_spread"):
                return MatchResult("V", 1.0)
            return MatchResult("U", 1.0)

        if finger_count == 1:
            if ext["pinky"]:
                return MatchResult("Y" if ext["thumb"] else "I", 1.0)
            if ext["index"]:
                return MatchResult("L" if ext["thumb"] else "D", 1.0)

        if finger_count == 0:
            if features.thumb_placement == ThumbPlacement.OVER:
                return MatchResult("S", 1.0)
            if features.thumb_placement == ThumbPlacement.UNDER:
                return MatchResult("E", 1.0)
            return MatchResult("A", 1.0)

        return NO_MATCH


MATCHERS = {
    HybridPoseMatcher.name: HybridPoseMatcher,
    RuleBasedMatcher.name: RuleBasedMatcher,
}


def make_matcher(strategy: str = "hybrid", **kwargs) -> PoseMatcher:
    cls = MATCHERS.get(strategy)
    if cls is None:
        logger.warning("unknown matcher strategy %r, falling back to hybrid", strategy)
        cls = HybridPoseMatcher
    matcher = cls()
    matcher.configure(**kwargs)
    return matcher
