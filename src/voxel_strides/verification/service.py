"""Task verification service coordinating the full photo-proof pipeline."""

import asyncio
import random
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from pathlib import Path
from typing import Any, TypeVar

import numpy as np

from .config import (
    DECODED_PROGRESS,
    FEEDBACK_PROGRESS,
    MATCHING_PROGRESS,
    SUB_ANALYSIS_PROGRESS_STEP,
)
from .context_resolver import TaskContextResolver
from .exceptions import ImageDecodeError
from .feedback import IMAGE_PROCESSING_FAILED_FEEDBACK, FeedbackGenerator
from .image_analysis import (
    ImageFeatureExtractor,
    MediaPipePoseDetector,
    OpenCVRectangleDetector,
    TesseractTextRecognizer,
)
from .image_analysis.loading import ImageSource, load_image
from .lexical_analyzer import LexicalAnalyzer, empty_entities, freeze_entities
from .logging_utils import get_logger
from .matcher import EvidenceMatcher
from .models import (
    Difficulty,
    ImageFeatures,
    LexicalProfile,
    TaskDescriptor,
    VerificationPhase,
    VerificationProgress,
    VerificationResult,
    VerificationStatus,
)
from .nltk_tagger import NLTKTagger

logger = get_logger(__name__)

T = TypeVar("T")

ProgressCallback = Callable[[VerificationProgress], None]


def empty_profile() -> LexicalProfile:
    return LexicalProfile(
        title_keywords=(),
        notes_keywords=(),
        all_keywords=(),
        entities=freeze_entities(empty_entities()),
        action_verbs=(),
        difficulty=Difficulty.EASY,
    )


class TaskVerificationService:
    """
    Verifies that a proof photo evidences completion of a task.

    Text extraction, object detection, scene classification and task
    analysis run concurrently; evidence matching and feedback follow once
    all four are done. Sub-analysis failures degrade to empty results.
    Only an undecodable image ends the pipeline early, with a rejected
    result rather than an exception.
    """

    def __init__(
        self,
        analyzer: LexicalAnalyzer,
        extractor: ImageFeatureExtractor,
        resolver: TaskContextResolver | None = None,
        matcher: EvidenceMatcher | None = None,
        feedback_generator: FeedbackGenerator | None = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            analyzer: Lexical analyzer (owns the task-profile cache)
            extractor: Image feature extractor
            resolver: Task context resolver (built from analyzer when omitted)
            matcher: Evidence matcher
            feedback_generator: Feedback renderer
        """
        self.analyzer = analyzer
        self.extractor = extractor
        self.resolver = resolver or TaskContextResolver(analyzer)
        self.matcher = matcher or EvidenceMatcher()
        self.feedback_generator = feedback_generator or FeedbackGenerator()
        self.reset_stats()

    def reset_stats(self) -> None:
        """Reset verification counters."""
        self._stats = {
            "total_verifications": 0,
            "verified": 0,
            "rejected": 0,
            "failed": 0,
            "total_processing_time": 0.0,
        }

    def get_stats(self) -> dict[str, Any]:
        """
        Get verification statistics.

        Returns:
            Counters plus average processing time in seconds
        """
        stats = dict(self._stats)
        total = stats["total_verifications"]
        stats["average_processing_time"] = stats["total_processing_time"] / total if total else 0.0
        stats["lexical_cache"] = self.analyzer.get_cache_stats()
        stats["image_cache"] = self.extractor.get_cache_stats()
        return stats

    def _record(self, result: VerificationResult) -> None:
        self._stats["total_verifications"] += 1
        self._stats["total_processing_time"] += result.processing_time
        if result.error is not None:
            self._stats["failed"] += 1
        elif result.completed:
            self._stats["verified"] += 1
        else:
            self._stats["rejected"] += 1

    @staticmethod
    def _report(
        callback: ProgressCallback | None, phase: VerificationPhase, fraction: float
    ) -> None:
        logger.debug(f"Verification progress: {phase.value} ({fraction:.2f})")
        if callback is None:
            return
        try:
            callback(VerificationProgress(phase=phase, fraction=round(fraction, 4)))
        except Exception as e:
            logger.error(f"Error in progress callback: {e}")

    def _decode(self, image: ImageSource) -> tuple[np.ndarray, str]:
        rgb = load_image(image)
        return rgb, self.extractor.image_digest(rgb)

    def _decode_failure(self, error: Exception, start_time: float) -> VerificationResult:
        logger.warning(f"❌ Image could not be decoded: {error}")
        return VerificationResult(
            completed=False,
            confidence=0.0,
            feedback=IMAGE_PROCESSING_FAILED_FEEDBACK,
            status=VerificationStatus.REJECTED,
            processing_time=time.time() - start_time,
            error=str(error),
        )

    async def verify(
        self,
        task: TaskDescriptor,
        image: ImageSource,
        progress_callback: ProgressCallback | None = None,
    ) -> VerificationResult:
        """
        Verify a task against a proof image.

        Progress is reported as each phase finishes, with strictly
        increasing fractions ending at 1.0.

        Args:
            task: Task being verified
            image: Proof image (PIL image, encoded bytes, path or pixel array)
            progress_callback: Optional receiver of progress events

        Returns:
            VerificationResult; never raises for bad images or failed analyses
        """
        start_time = time.time()
        logger.info(f"🔍 Verifying task '{task.title}' ({task.category.value})")

        try:
            rgb, digest = await asyncio.to_thread(self._decode, image)
        except Exception as e:
            if not isinstance(e, ImageDecodeError):
                logger.error(f"decoding_image failed unexpectedly, rejecting image: {e}")
            result = self._decode_failure(e, start_time)
            self._record(result)
            self._report(progress_callback, VerificationPhase.COMPLETE, 1.0)
            return result

        self._report(progress_callback, VerificationPhase.DECODING_IMAGE, DECODED_PROGRESS)

        finished = 0

        async def sub_analysis(phase: VerificationPhase, work: Awaitable[T], default: T) -> T:
            nonlocal finished
            try:
                value = await work
            except Exception as e:
                logger.error(f"{phase.value} failed, continuing with empty result: {e}")
                value = default
            finished += 1
            self._report(
                progress_callback,
                phase,
                DECODED_PROGRESS + finished * SUB_ANALYSIS_PROGRESS_STEP,
            )
            return value

        text, objects, scenes, profile = await asyncio.gather(
            sub_analysis(
                VerificationPhase.EXTRACTING_TEXT,
                asyncio.to_thread(self.extractor.extract_text, rgb),
                [],
            ),
            sub_analysis(
                VerificationPhase.DETECTING_OBJECTS,
                asyncio.to_thread(self.extractor.detect_objects, rgb, digest),
                [],
            ),
            sub_analysis(
                VerificationPhase.CLASSIFYING_SCENE,
                asyncio.to_thread(self.extractor.classify_scene, rgb, digest),
                [],
            ),
            sub_analysis(
                VerificationPhase.ANALYZING_TASK,
                self.analyzer.analyze_task_async(task),
                empty_profile(),
            ),
        )

        try:
            features = await asyncio.to_thread(
                self.extractor.assemble_features, rgb, text, objects, scenes, digest
            )
        except Exception as e:
            logger.error(f"Image statistics failed, continuing with labels only: {e}")
            features = ImageFeatures(
                detected_objects=objects, scene_labels=scenes, extracted_text=text
            )

        context = self.resolver.determine_context(task, profile)
        match = self.matcher.match(context, features)
        self._report(progress_callback, VerificationPhase.MATCHING_EVIDENCE, MATCHING_PROGRESS)

        feedback = self.feedback_generator.generate_feedback(
            context.feedback_category, match, task.title
        )
        self._report(progress_callback, VerificationPhase.GENERATING_FEEDBACK, FEEDBACK_PROGRESS)

        result = VerificationResult(
            completed=match.is_completed,
            confidence=match.confidence,
            feedback=feedback,
            matched_elements=list(match.matched_elements),
            raw_features=features.to_dict(),
            status=VerificationStatus.VERIFIED if match.is_completed else VerificationStatus.REJECTED,
            processing_time=time.time() - start_time,
        )
        self._record(result)

        outcome = "✅ verified" if result.completed else "❌ rejected"
        logger.info(
            f"Task '{task.title}' {outcome}: confidence={result.confidence:.2f}, "
            f"processing_time={result.processing_time:.3f}s"
        )
        self._report(progress_callback, VerificationPhase.COMPLETE, 1.0)
        return result

    async def verify_stream(
        self, task: TaskDescriptor, image: ImageSource
    ) -> AsyncIterator[VerificationProgress | VerificationResult]:
        """
        Verify a task, yielding progress events and then the final result.

        Closing the iterator early cancels the verification.
        """
        queue: asyncio.Queue[VerificationProgress] = asyncio.Queue()
        verification = asyncio.create_task(self.verify(task, image, queue.put_nowait))

        try:
            while True:
                progress_wait = asyncio.ensure_future(queue.get())
                done, _ = await asyncio.wait(
                    {progress_wait, verification}, return_when=asyncio.FIRST_COMPLETED
                )
                if progress_wait in done:
                    yield progress_wait.result()
                    continue

                progress_wait.cancel()
                while not queue.empty():
                    yield queue.get_nowait()
                yield verification.result()
                return
        finally:
            if not verification.done():
                verification.cancel()


def create_default_service(
    seed: int | None = None,
    pose_model_path: Path | str | None = None,
    enable_pose: bool = True,
) -> TaskVerificationService:
    """
    Build a service wired with the NLTK, Tesseract, OpenCV and MediaPipe backends.

    Args:
        seed: Seed for filler-label sampling (random when None)
        pose_model_path: MediaPipe pose model file (models cache when None)
        enable_pose: Whether to run pose detection at all

    Returns:
        Configured TaskVerificationService
    """
    analyzer = LexicalAnalyzer(NLTKTagger())
    extractor = ImageFeatureExtractor(
        text_recognizer=TesseractTextRecognizer(),
        rectangle_detector=OpenCVRectangleDetector(),
        pose_detector=MediaPipePoseDetector(pose_model_path) if enable_pose else None,
        rng=random.Random(seed),
    )
    return TaskVerificationService(analyzer=analyzer, extractor=extractor)
