"""Data models for task verification functionality."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from .config import COMPLETION_THRESHOLD


class TaskCategory(str, Enum):
    """Task category enumeration."""

    EXERCISE = "exercise"
    STUDY = "study"
    WORK = "work"
    HEALTH = "health"
    TRAVEL = "travel"
    SHOPPING = "shopping"
    HOME = "home"
    OTHER = "other"


class TaskPriority(str, Enum):
    """Task priority enumeration."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Difficulty(str, Enum):
    """Estimated task difficulty."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class TaskType(str, Enum):
    """Verification context a task is judged in."""

    GENERAL = "general"
    CLEANING = "cleaning"
    EXERCISE = "exercise"
    WORK = "work"
    STUDY = "study"
    HEALTH = "health"
    SHOPPING = "shopping"
    TRAVEL = "travel"


class FeedbackCategory(str, Enum):
    """Which scoring strategy and feedback family applies to a task."""

    REMOVAL = "removal"
    EXERCISE = "exercise"
    STANDARD = "standard"


class VerificationStatus(str, Enum):
    """Task verification status."""

    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class VerificationPhase(str, Enum):
    """Named phases reported while a verification is in flight."""

    DECODING_IMAGE = "decoding_image"
    EXTRACTING_TEXT = "extracting_text"
    DETECTING_OBJECTS = "detecting_objects"
    CLASSIFYING_SCENE = "classifying_scene"
    ANALYZING_TASK = "analyzing_task"
    MATCHING_EVIDENCE = "matching_evidence"
    GENERATING_FEEDBACK = "generating_feedback"
    COMPLETE = "complete"


class LexicalClass(Enum):
    """Coarse part-of-speech classes used for keyword extraction."""

    NOUN = "noun"
    VERB = "verb"
    ADJECTIVE = "adjective"
    OTHER = "other"


class NameType(Enum):
    """Named-entity classes used for entity extraction."""

    PERSONAL_NAME = "personal_name"
    PLACE_NAME = "place_name"
    ORGANIZATION_NAME = "organization_name"
    OTHER_NAME = "other_name"
    OTHER_WORD = "other_word"


@dataclass(frozen=True)
class TaskDescriptor:
    """Read-only snapshot of the task fields the verifier consumes."""

    title: str
    notes: str = ""
    category: TaskCategory = TaskCategory.OTHER
    priority: TaskPriority = TaskPriority.MEDIUM
    id: UUID = field(default_factory=uuid4)


@dataclass(frozen=True)
class LexicalProfile:
    """Keywords, entities and verbs extracted from a task's text."""

    title_keywords: tuple[str, ...]
    notes_keywords: tuple[str, ...]
    all_keywords: tuple[str, ...]
    entities: Mapping[str, tuple[str, ...]]
    action_verbs: tuple[str, ...]
    difficulty: Difficulty


@dataclass(frozen=True)
class TaskContext:
    """Expected evidence for a task and the specialized type flags."""

    task_type: TaskType
    keywords: tuple[str, ...]
    title_keywords: tuple[str, ...]
    expected_objects: tuple[str, ...]
    expected_scenes: tuple[str, ...]
    is_removal_task: bool = False
    is_exercise_task: bool = False
    items_to_remove: tuple[str, ...] = ()
    exercise_types: tuple[str, ...] = ()
    exercise_equipment: tuple[str, ...] = ()

    @property
    def feedback_category(self) -> FeedbackCategory:
        """Removal takes precedence over exercise, matching the scoring order."""
        if self.is_removal_task:
            return FeedbackCategory.REMOVAL
        if self.is_exercise_task:
            return FeedbackCategory.EXERCISE
        return FeedbackCategory.STANDARD


@dataclass
class ImageFeatures:
    """Heuristic description of a proof image."""

    detected_objects: list[str] = field(default_factory=list)
    scene_labels: list[str] = field(default_factory=list)
    extracted_text: list[str] = field(default_factory=list)
    complexity: float = 0.0
    brightness: float = 0.0
    colorfulness: float = 0.0
    edge_density: float = 0.0
    gym_likelihood: bool = False
    dominant_colors: list[str] = field(default_factory=list)
    horizontal_line_count: int = 0
    vertical_line_count: int = 0
    width: int = 0
    height: int = 0

    def all_elements(self) -> list[str]:
        """Objects, scenes and text combined, in that order."""
        return self.detected_objects + self.scene_labels + self.extracted_text

    def to_dict(self) -> dict[str, Any]:
        """Raw feature map exposed to callers."""
        return {
            "objects": list(self.detected_objects),
            "scenes": list(self.scene_labels),
            "text": list(self.extracted_text),
            "complexity": self.complexity,
            "brightness": self.brightness,
            "colorfulness": self.colorfulness,
            "edge_density": self.edge_density,
            "gym_likelihood": self.gym_likelihood,
            "dominant_colors": list(self.dominant_colors),
            "horizontal_lines": self.horizontal_line_count,
            "vertical_lines": self.vertical_line_count,
            "width": self.width,
            "height": self.height,
        }


@dataclass(frozen=True)
class MatchResult:
    """Outcome of reconciling task expectations with image evidence."""

    confidence: float
    matched_elements: tuple[str, ...] = ()
    total_score: float = 0.0
    possible_matches: float = 1.0

    @property
    def is_completed(self) -> bool:
        return self.confidence > COMPLETION_THRESHOLD


@dataclass(frozen=True)
class VerificationProgress:
    """Progress event for a verification in flight."""

    phase: VerificationPhase
    fraction: float


@dataclass
class VerificationResult:
    """Final result of verifying a task against a proof image."""

    completed: bool
    confidence: float
    feedback: str
    matched_elements: list[str] = field(default_factory=list)
    raw_features: dict[str, Any] = field(default_factory=dict)
    status: VerificationStatus = VerificationStatus.PENDING
    processing_time: float = 0.0
    error: str | None = None
