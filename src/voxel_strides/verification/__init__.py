"""Photo-proof task verification: lexical analysis, image heuristics and evidence matching."""

from .context_resolver import TaskContextResolver
from .exceptions import (
    ImageAnalysisError,
    ImageDecodeError,
    LexicalAnalysisError,
    TaggerUnavailableError,
    VerificationError,
)
from .feedback import FeedbackGenerator
from .lexical_analyzer import LexicalAnalyzer
from .matcher import EvidenceMatcher, words_match
from .models import (
    FeedbackCategory,
    ImageFeatures,
    LexicalProfile,
    MatchResult,
    TaskCategory,
    TaskContext,
    TaskDescriptor,
    TaskPriority,
    VerificationPhase,
    VerificationProgress,
    VerificationResult,
    VerificationStatus,
)
from .service import TaskVerificationService, create_default_service

__all__ = [
    "TaskDescriptor",
    "TaskCategory",
    "TaskPriority",
    "LexicalProfile",
    "TaskContext",
    "ImageFeatures",
    "MatchResult",
    "FeedbackCategory",
    "VerificationPhase",
    "VerificationProgress",
    "VerificationResult",
    "VerificationStatus",
    "LexicalAnalyzer",
    "TaskContextResolver",
    "EvidenceMatcher",
    "FeedbackGenerator",
    "TaskVerificationService",
    "create_default_service",
    "words_match",
    "VerificationError",
    "ImageDecodeError",
    "ImageAnalysisError",
    "LexicalAnalysisError",
    "TaggerUnavailableError",
]
