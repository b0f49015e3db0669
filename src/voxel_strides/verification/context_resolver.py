"""Resolves the evidence a task's proof photo is expected to show."""

from .config import (
    CATEGORY_CONTEXT_TABLE,
    DEFAULT_CATEGORY_CONTEXT,
    DEFAULT_EXERCISE_TYPES,
    DEFAULT_ITEMS_TO_REMOVE,
    EXERCISE_EQUIPMENT_KEYWORDS,
    EXERCISE_KEYWORDS,
    EXERCISE_TYPE_KEYWORDS,
    KEYWORD_TRIGGER_TABLE,
    REMOVAL_KEYWORDS,
    REMOVAL_MARKER,
)
from .lexical_analyzer import LexicalAnalyzer, unique_in_order
from .logging_utils import get_logger
from .models import LexicalProfile, TaskCategory, TaskContext, TaskDescriptor, TaskType

logger = get_logger(__name__)


class TaskContextResolver:
    """Maps a task's category and keywords to expected objects and scenes."""

    def __init__(self, analyzer: LexicalAnalyzer) -> None:
        """
        Initialize the resolver.

        Args:
            analyzer: Lexical analyzer providing (cached) task keywords
        """
        self._analyzer = analyzer

    def determine_context(
        self, task: TaskDescriptor, profile: LexicalProfile | None = None
    ) -> TaskContext:
        """
        Determine the verification context of a task.

        Args:
            task: Task being verified
            profile: Precomputed lexical profile (looked up when omitted)

        Returns:
            TaskContext with expected vocabulary and specialized-type details
        """
        if profile is None:
            profile = self._analyzer.analyze_task(task)

        title_keywords = profile.title_keywords
        task_type, objects, scenes = CATEGORY_CONTEXT_TABLE.get(
            task.category.value, DEFAULT_CATEGORY_CONTEXT
        )
        expected_objects = list(objects)
        expected_scenes = list(scenes)

        for keyword in title_keywords:
            for triggers, extra_objects, extra_scenes in KEYWORD_TRIGGER_TABLE:
                if any(trigger in keyword for trigger in triggers):
                    expected_objects.extend(extra_objects)
                    expected_scenes.extend(extra_scenes)

        is_removal_task = any(keyword in REMOVAL_KEYWORDS for keyword in title_keywords)
        is_exercise_task = task.category is TaskCategory.EXERCISE or any(
            keyword in EXERCISE_KEYWORDS for keyword in title_keywords
        )

        items_to_remove: tuple[str, ...] = ()
        if is_removal_task:
            items_to_remove = self._items_to_remove(task.title)

        exercise_types: tuple[str, ...] = ()
        exercise_equipment: tuple[str, ...] = ()
        if is_exercise_task:
            exercise_types, exercise_equipment = self._exercise_details(profile.all_keywords)

        context = TaskContext(
            task_type=TaskType(task_type),
            keywords=profile.all_keywords,
            title_keywords=title_keywords,
            expected_objects=unique_in_order(expected_objects),
            expected_scenes=unique_in_order(expected_scenes),
            is_removal_task=is_removal_task,
            is_exercise_task=is_exercise_task,
            items_to_remove=items_to_remove,
            exercise_types=exercise_types,
            exercise_equipment=exercise_equipment,
        )

        logger.debug(
            f"Task {task.id} context: type={context.task_type.value}, "
            f"removal={is_removal_task}, exercise={is_exercise_task}, "
            f"expected_objects={len(context.expected_objects)}, "
            f"expected_scenes={len(context.expected_scenes)}"
        )
        return context

    def _items_to_remove(self, title: str) -> tuple[str, ...]:
        """Keywords after the first "remove" in the title, else generic clutter words."""
        lowered = title.lower()
        items: list[str] = []
        if REMOVAL_MARKER in lowered:
            after_marker = lowered.split(REMOVAL_MARKER, 1)[1].strip()
            items = self._analyzer.extract_keywords(after_marker)

        return tuple(items) if items else DEFAULT_ITEMS_TO_REMOVE

    @staticmethod
    def _exercise_details(
        keywords: tuple[str, ...],
    ) -> tuple[tuple[str, ...], tuple[str, ...]]:
        exercise_types = [
            keyword
            for keyword in keywords
            if any(word in keyword for word in EXERCISE_TYPE_KEYWORDS)
        ]
        equipment = [
            keyword
            for keyword in keywords
            if any(word in keyword for word in EXERCISE_EQUIPMENT_KEYWORDS)
        ]
        return tuple(exercise_types) or DEFAULT_EXERCISE_TYPES, tuple(equipment)
