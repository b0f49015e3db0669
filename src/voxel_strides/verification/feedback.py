"""Natural-language feedback for verification results."""

from enum import Enum

from .config import (
    EXCELLENT_CONFIDENCE,
    HIGH_CONFIDENCE,
    LOW_CONFIDENCE,
    MODERATE_CONFIDENCE,
)
from .logging_utils import get_logger
from .matcher import ITEMS_STILL_PRESENT_PREFIX
from .models import FeedbackCategory, MatchResult

logger = get_logger(__name__)

IMAGE_PROCESSING_FAILED_FEEDBACK = (
    "Failed to process image. The photo could not be read; please submit a different image."
)


class ConfidenceBand(str, Enum):
    """Confidence ranges used to pick a feedback template."""

    EXCELLENT = "excellent"  # > 0.8
    HIGH = "high"  # > 0.6
    MODERATE = "moderate"  # > 0.4
    LOW = "low"  # > 0.2
    MINIMAL = "minimal"


def confidence_band(confidence: float) -> ConfidenceBand:
    """Map a confidence value to its band."""
    if confidence > EXCELLENT_CONFIDENCE:
        return ConfidenceBand.EXCELLENT
    if confidence > HIGH_CONFIDENCE:
        return ConfidenceBand.HIGH
    if confidence > MODERATE_CONFIDENCE:
        return ConfidenceBand.MODERATE
    if confidence > LOW_CONFIDENCE:
        return ConfidenceBand.LOW
    return ConfidenceBand.MINIMAL


_REMOVAL_MOSTLY_DONE = (
    "Task appears to be mostly completed. The desk looks relatively clear, "
    "though there might still be a few small items."
)
_EXERCISE_PARTIAL = (
    "It looks like you're exercising, though the image doesn't show all the "
    "details of your workout."
)
_STANDARD_CLEAR = (
    "Great job! The image clearly shows that you've completed the task "
    "'{title}'. I can see {top3}."
)
_STANDARD_LIKELY = "Task appears to be completed. I can see evidence of {top3} in the image."

# (category, completed, band) -> template. Completed results are always
# above 0.3, so (completed, MINIMAL) and (not completed, MODERATE+) never occur.
# Placeholders: {top2}, {top3}, {title}, {items_visible}
FEEDBACK_TEMPLATES: dict[tuple[FeedbackCategory, bool, ConfidenceBand], str] = {
    (FeedbackCategory.REMOVAL, True, ConfidenceBand.EXCELLENT): (
        "Excellent job! The desk is completely clear. I can see that you've "
        "successfully removed all items from the desk."
    ),
    (FeedbackCategory.REMOVAL, True, ConfidenceBand.HIGH): (
        "Great job! The desk looks clean with most items removed. I can see {top2}."
    ),
    (FeedbackCategory.REMOVAL, True, ConfidenceBand.MODERATE): _REMOVAL_MOSTLY_DONE,
    (FeedbackCategory.REMOVAL, True, ConfidenceBand.LOW): _REMOVAL_MOSTLY_DONE,
    (FeedbackCategory.REMOVAL, False, ConfidenceBand.LOW): (
        "You've made a start, but there are still quite a few items on the desk.{items_visible}"
    ),
    (FeedbackCategory.REMOVAL, False, ConfidenceBand.MINIMAL): (
        "The desk still appears to have many items on it.{items_visible} "
        "Please remove more items and take another photo when the desk is clearer."
    ),
    (FeedbackCategory.EXERCISE, True, ConfidenceBand.EXCELLENT): (
        "Great workout! I can see you're at the gym with {top2}. Keep up the good work!"
    ),
    (FeedbackCategory.EXERCISE, True, ConfidenceBand.HIGH): (
        "Good job with your exercise routine! I can see {top2}."
    ),
    (FeedbackCategory.EXERCISE, True, ConfidenceBand.MODERATE): _EXERCISE_PARTIAL,
    (FeedbackCategory.EXERCISE, True, ConfidenceBand.LOW): _EXERCISE_PARTIAL,
    (FeedbackCategory.EXERCISE, False, ConfidenceBand.LOW): (
        "I can see some signs of exercise activity with {top3}, but not enough "
        "to verify your complete workout."
    ),
    (FeedbackCategory.EXERCISE, False, ConfidenceBand.MINIMAL): (
        "I don't see clear evidence of a workout in this image. Please take a "
        "photo that shows you exercising or at the gym."
    ),
    (FeedbackCategory.STANDARD, True, ConfidenceBand.EXCELLENT): _STANDARD_CLEAR,
    (FeedbackCategory.STANDARD, True, ConfidenceBand.HIGH): _STANDARD_CLEAR,
    (FeedbackCategory.STANDARD, True, ConfidenceBand.MODERATE): _STANDARD_LIKELY,
    (FeedbackCategory.STANDARD, True, ConfidenceBand.LOW): _STANDARD_LIKELY,
    (FeedbackCategory.STANDARD, False, ConfidenceBand.LOW): (
        "I can see some progress on your task, but it doesn't appear to be fully "
        "completed. I found {top3} but more evidence is needed."
    ),
    (FeedbackCategory.STANDARD, False, ConfidenceBand.MINIMAL): (
        "I don't see evidence that the task '{title}' has been completed. "
        "Please provide a clearer image of your completed task."
    ),
}


def _summarize(elements: tuple[str, ...], limit: int) -> str:
    if not elements:
        return "no specific evidence"
    return ", ".join(elements[:limit])


def items_still_present(matched_elements: tuple[str, ...]) -> str:
    """The item list from an "items still present: ..." element, or ""."""
    for element in matched_elements:
        if element.startswith(ITEMS_STILL_PRESENT_PREFIX):
            return element[len(ITEMS_STILL_PRESENT_PREFIX):]
    return ""


class FeedbackGenerator:
    """Renders a verification verdict as a user-facing sentence."""

    def __init__(
        self,
        templates: dict[tuple[FeedbackCategory, bool, ConfidenceBand], str] | None = None,
    ) -> None:
        self._templates = templates if templates is not None else FEEDBACK_TEMPLATES

    def generate_feedback(
        self,
        category: FeedbackCategory,
        match_result: MatchResult,
        task_title: str = "",
    ) -> str:
        """
        Generate feedback for a match result.

        Args:
            category: Removal, exercise or standard feedback family
            match_result: Verdict, confidence and matched elements
            task_title: Title interpolated into standard-task messages

        Returns:
            Feedback text
        """
        band = confidence_band(match_result.confidence)
        key = (category, match_result.is_completed, band)
        template = self._templates[key]

        elements = match_result.matched_elements
        remaining = items_still_present(elements)
        if remaining and not match_result.is_completed:
            items_visible = f" I can still see {remaining} that need to be removed."
        else:
            items_visible = ""

        feedback = template.format(
            top2=_summarize(elements, 2),
            top3=_summarize(elements, 3),
            title=task_title,
            items_visible=items_visible,
        )
        logger.debug(f"Feedback selected for {category.value}/{band.value}: {feedback}")
        return feedback
