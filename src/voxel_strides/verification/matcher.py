"""Evidence matching between task expectations and image features."""

from .config import (
    CLEAN_SCENE_INDICATORS,
    CLEAN_SCENE_SCORE,
    CLUTTER_INDICATORS,
    CLUTTER_PENALTY,
    COMMON_DESK_ITEMS,
    EQUIPMENT_INDICATOR_SCORE,
    EQUIPMENT_INDICATORS,
    EXERCISE_EQUIPMENT_SCORE,
    EXERCISE_TYPE_SCORE,
    EXPECTED_OBJECT_SCORE,
    EXPECTED_SCENE_SCORE,
    FEW_ITEMS_INDICATORS,
    FEW_ITEMS_SCORE,
    FUZZY_DISTANCE_LENGTH_DIVISOR,
    GYM_SCENE_INDICATORS,
    GYM_SCENE_SCORE,
    HIGH_COMPLEXITY_PENALTY,
    HIGH_COMPLEXITY_THRESHOLD,
    ITEM_REMOVED_SCORE,
    ITEM_SUMMARY_LIMIT,
    KEYWORD_MATCH_SCORE,
    LOW_COMPLEXITY_SCORE,
    LOW_COMPLEXITY_THRESHOLD,
    MAX_FUZZY_DISTANCE,
    MOST_ITEMS_REMOVED_SCORE,
    PERSON_INDICATORS,
    PERSON_SCORE,
    SURFACE_INDICATORS,
    SURFACE_VISIBLE_SCORE,
)
from .logging_utils import get_logger
from .models import ImageFeatures, MatchResult, TaskContext

logger = get_logger(__name__)

ITEMS_STILL_PRESENT_PREFIX = "items still present: "
ITEMS_NOT_DETECTED_PREFIX = "items not detected: "


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance between two strings (insert, delete, substitute)."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def words_match(word1: str, word2: str) -> bool:
    """
    Fuzzy word comparison.

    Words match when either contains the other, or when their edit
    distance is within min(2, shorter length // 3).
    """
    w1 = word1.lower()
    w2 = word2.lower()
    if w1 in w2 or w2 in w1:
        return True

    allowed = min(MAX_FUZZY_DISTANCE, min(len(w1), len(w2)) // FUZZY_DISTANCE_LENGTH_DIVISOR)
    return levenshtein_distance(w1, w2) <= allowed


def contains_any(values: list[str], indicators: tuple[str, ...]) -> bool:
    """True if any value contains any indicator as a case-insensitive substring."""
    return any(indicator in value.lower() for value in values for indicator in indicators)


def mentions(values: list[str], term: str) -> bool:
    term = term.lower()
    return any(term in value.lower() for value in values)


class EvidenceMatcher:
    """
    Scores how well image features evidence a task.

    Removal tasks, exercise tasks and everything else each use their own
    scoring strategy. The accumulated score is divided by the task's
    keyword plus expected-vocabulary count, which is not on the same scale
    as the score; confidence is clamped to [0, 1].
    """

    def match(self, context: TaskContext, features: ImageFeatures) -> MatchResult:
        """
        Match a task context against image features.

        Args:
            context: Expected evidence for the task
            features: Heuristic description of the proof image

        Returns:
            MatchResult with confidence and contributing elements in order
        """
        possible_matches = float(
            max(
                1,
                len(context.keywords)
                + len(context.expected_objects)
                + len(context.expected_scenes),
            )
        )

        if context.is_removal_task:
            strategy = "removal"
            total, matched = self._score_removal(context, features)
        elif context.is_exercise_task:
            strategy = "exercise"
            total, matched = self._score_exercise(context, features)
        else:
            strategy = "standard"
            total, matched = self._score_standard(context, features)

        confidence = min(1.0, max(0.0, total / possible_matches))
        result = MatchResult(
            confidence=confidence,
            matched_elements=tuple(matched),
            total_score=total,
            possible_matches=possible_matches,
        )

        logger.debug(
            f"{strategy} match: score={total:.2f}/{possible_matches:.0f}, "
            f"confidence={confidence:.3f}, completed={result.is_completed}"
        )
        return result

    def _score_removal(
        self, context: TaskContext, features: ImageFeatures
    ) -> tuple[float, list[str]]:
        objects = features.detected_objects
        elements = features.all_elements()
        matched: list[str] = []
        total = 0.0

        if contains_any(features.scene_labels, CLEAN_SCENE_INDICATORS):
            total += CLEAN_SCENE_SCORE
            matched.append("clean environment")

        if contains_any(elements, CLUTTER_INDICATORS):
            total -= CLUTTER_PENALTY
            matched.append("cluttered environment")

        if contains_any(objects, FEW_ITEMS_INDICATORS):
            total += FEW_ITEMS_SCORE
            matched.append("few or no items")

        items_found = [item for item in COMMON_DESK_ITEMS if mentions(elements, item)]
        items_absent = [item for item in COMMON_DESK_ITEMS if item not in items_found]

        found_count = 0
        for item in context.items_to_remove:
            if mentions(elements, item):
                found_count += 1
                items_found.append(item)
            else:
                total += ITEM_REMOVED_SCORE
                matched.append(f"{item} removed")

        if found_count <= len(context.items_to_remove) // 3:
            total += MOST_ITEMS_REMOVED_SCORE
            matched.append("most items removed")

        if contains_any(objects, SURFACE_INDICATORS):
            total += SURFACE_VISIBLE_SCORE
            matched.append("surface visible")

        if features.complexity < LOW_COMPLEXITY_THRESHOLD:
            total += LOW_COMPLEXITY_SCORE
            matched.append("low visual complexity")
        elif features.complexity > HIGH_COMPLEXITY_THRESHOLD:
            total -= HIGH_COMPLEXITY_PENALTY
            matched.append("high visual complexity")

        if items_found:
            matched.append(ITEMS_STILL_PRESENT_PREFIX + ", ".join(items_found[:ITEM_SUMMARY_LIMIT]))
        if items_absent:
            matched.append(ITEMS_NOT_DETECTED_PREFIX + ", ".join(items_absent[:ITEM_SUMMARY_LIMIT]))

        logger.trace(
            f"Removal scoring: found={items_found}, to_remove_found={found_count}, "
            f"complexity={features.complexity:.3f}, total={total:.2f}"
        )
        return total, matched

    def _score_exercise(
        self, context: TaskContext, features: ImageFeatures
    ) -> tuple[float, list[str]]:
        elements = features.all_elements()
        matched: list[str] = []
        total = 0.0

        if contains_any(features.scene_labels, GYM_SCENE_INDICATORS):
            total += GYM_SCENE_SCORE
            matched.append("gym environment")

        for indicator in EQUIPMENT_INDICATORS:
            if mentions(elements, indicator):
                total += EQUIPMENT_INDICATOR_SCORE
                matched.append(f"{indicator} detected")

        for exercise_type in context.exercise_types:
            if mentions(elements, exercise_type):
                total += EXERCISE_TYPE_SCORE
                matched.append(f"{exercise_type} activity")

        for equipment in context.exercise_equipment:
            if mentions(elements, equipment):
                total += EXERCISE_EQUIPMENT_SCORE
                matched.append(f"{equipment} present")

        if contains_any(features.detected_objects, PERSON_INDICATORS):
            total += PERSON_SCORE
            matched.append("person exercising")

        logger.trace(f"Exercise scoring: matched={matched}, total={total:.2f}")
        return total, matched

    def _score_standard(
        self, context: TaskContext, features: ImageFeatures
    ) -> tuple[float, list[str]]:
        elements = features.all_elements()
        matched: list[str] = []
        total = 0.0

        for keyword in context.keywords:
            if any(words_match(element, keyword) for element in elements):
                total += KEYWORD_MATCH_SCORE
                matched.append(keyword)

        for expected in context.expected_objects:
            if any(words_match(obj, expected) for obj in features.detected_objects):
                total += EXPECTED_OBJECT_SCORE
                matched.append(expected)

        for expected in context.expected_scenes:
            if any(words_match(scene, expected) for scene in features.scene_labels):
                total += EXPECTED_SCENE_SCORE
                matched.append(expected)

        logger.trace(f"Standard scoring: matched={matched}, total={total:.2f}")
        return total, matched
