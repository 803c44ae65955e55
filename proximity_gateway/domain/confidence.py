"""
Match confidence scoring.

confidence = 0.7 * distance_confidence + 0.3 * name_confidence

Distance dominates; the name only separates candidates at similar range.
Name similarity is an ordered rule table, first rule that yields a score wins.
"""

from typing import Callable, List, NamedTuple, Optional
from proximity_gateway.utils.text_utils import normalize_name

DISTANCE_WEIGHT = 0.7
NAME_WEIGHT = 0.3
DISTANCE_RANGE_M = 1000.0
DEFAULT_NAME_CONFIDENCE = 0.5  # no name to compare against
NO_OVERLAP_CONFIDENCE = 0.1
MAX_OVERLAP_CONFIDENCE = 0.7


class SimilarityRule(NamedTuple):
    name: str
    score: Callable[[str, str], Optional[float]]


def _exact(a: str, b: str) -> Optional[float]:
    return 1.0 if a == b else None


def _containment(a: str, b: str) -> Optional[float]:
    return 0.8 if a in b or b in a else None


def _word_overlap(a: str, b: str) -> Optional[float]:
    words_a = a.split()
    words_b = b.split()
    if not words_a or not words_b:
        return NO_OVERLAP_CONFIDENCE

    common = [word for word in words_a if word in words_b]
    if not common:
        return NO_OVERLAP_CONFIDENCE

    return min(MAX_OVERLAP_CONFIDENCE, len(common) / max(len(words_a), len(words_b)))


NAME_SIMILARITY_RULES: List[SimilarityRule] = [
    SimilarityRule("exact", _exact),
    SimilarityRule("containment", _containment),
    SimilarityRule("word_overlap", _word_overlap),
]


def name_similarity(search_name: str, location_name: str) -> float:
    """Similarity of two names after normalisation, 0.1 to 1.0"""
    a = normalize_name(search_name).lower()
    b = normalize_name(location_name).lower()

    for rule in NAME_SIMILARITY_RULES:
        score = rule.score(a, b)
        if score is not None:
            return score

    return NO_OVERLAP_CONFIDENCE


def distance_confidence(distance_meters: float) -> float:
    """1.0 on top of the location, falling linearly to 0 at 1 km"""
    return max(0.0, 1.0 - distance_meters / DISTANCE_RANGE_M)


def calculate_confidence(
    distance_meters: float,
    search_name: Optional[str] = None,
    location_name: Optional[str] = None,
) -> float:
    """Blend spatial proximity and name similarity into a 0..1 score"""
    name_confidence = DEFAULT_NAME_CONFIDENCE
    if search_name and location_name:
        name_confidence = name_similarity(search_name, location_name)

    confidence = DISTANCE_WEIGHT * distance_confidence(distance_meters) + NAME_WEIGHT * name_confidence
    return min(1.0, max(0.0, confidence))
