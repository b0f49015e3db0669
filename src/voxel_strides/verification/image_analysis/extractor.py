"""Image feature extraction: text, object labels, scene labels and statistics."""

import random
import threading

import numpy as np

from ..cache_utils import LRUCache, content_hash
from ..config import EQUIPMENT_ANALYSIS_SIZE, IMAGE_CACHE_MAX_ENTRIES, MIN_DETECTED_LABELS
from ..exceptions import ImageAnalysisError
from ..logging_utils import get_logger
from ..models import ImageFeatures
from .interfaces import PoseDetector, RectangleDetector, TextRecognizer
from .labels import (
    dedupe,
    equipment_labels,
    frame_labels,
    pose_labels,
    property_labels,
    region_labels,
    scene_labels,
)
from .loading import ImageSource, load_image, resize_rgb
from .models import BodyPose, ImageStatistics, RegionDetection
from .statistics import compute_statistics

logger = get_logger(__name__)


class ImageFeatureExtractor:
    """
    Derives a heuristic ImageFeatures description from a proof image.

    Every operation accepts anything load_image accepts. Detector failures
    are logged and treated as "nothing detected". Statistics are cached by
    pixel content.
    """

    def __init__(
        self,
        text_recognizer: TextRecognizer,
        rectangle_detector: RectangleDetector,
        pose_detector: PoseDetector | None = None,
        rng: random.Random | None = None,
        cache_size: int = IMAGE_CACHE_MAX_ENTRIES,
    ) -> None:
        """
        Initialize the extractor.

        Args:
            text_recognizer: OCR backend
            rectangle_detector: Quadrilateral region backend
            pose_detector: Body pose backend (pose labels skipped when None)
            rng: Random source for filler labels
            cache_size: Maximum number of images whose statistics are kept
        """
        self.text_recognizer = text_recognizer
        self.rectangle_detector = rectangle_detector
        self.pose_detector = pose_detector
        self.rng = rng or random.Random()
        self._cache = LRUCache(cache_size)
        self._key_locks: dict[str, threading.Lock] = {}
        self._key_locks_guard = threading.Lock()

    @staticmethod
    def image_digest(rgb: np.ndarray) -> str:
        """Content digest of a pixel array, shared by every statistics kind."""
        return content_hash(str(rgb.shape), rgb.tobytes())

    def _key_lock(self, key: str) -> threading.Lock:
        with self._key_locks_guard:
            return self._key_locks.setdefault(key, threading.Lock())

    def _cached_statistics(
        self, rgb: np.ndarray, kind: str, digest: str | None = None
    ) -> ImageStatistics:
        key = f"{kind}:{digest or self.image_digest(rgb)}"
        stats = self._cache.get(key)
        if stats is not None:
            return stats

        # Concurrent misses for one image compute once; later callers wait and hit
        try:
            with self._key_lock(key):
                if key in self._cache:
                    return self._cache.get(key)
                source = rgb if kind == "full" else resize_rgb(rgb, EQUIPMENT_ANALYSIS_SIZE)
                stats = compute_statistics(source)
                self._cache.put(key, stats)
                return stats
        finally:
            with self._key_locks_guard:
                self._key_locks.pop(key, None)

    def compute_statistics(self, image: ImageSource) -> ImageStatistics:
        """Pixel statistics of the image as given."""
        return self._cached_statistics(load_image(image), "full")

    def equipment_statistics(self, image: ImageSource) -> ImageStatistics:
        """Pixel statistics of the 224x224 copy the equipment rules read."""
        return self._cached_statistics(load_image(image), "equipment")

    def extract_text(self, image: ImageSource) -> list[str]:
        """
        Recognize text lines in the image.

        Returns:
            Text lines, or an empty list when recognition fails
        """
        rgb = load_image(image)
        try:
            lines = self.text_recognizer.recognize_text(rgb)
        except ImageAnalysisError as e:
            logger.error(f"Text extraction failed: {e}")
            return []
        logger.debug(f"Extracted {len(lines)} text lines")
        return lines

    def _detect_regions(self, rgb: np.ndarray) -> RegionDetection:
        try:
            return self.rectangle_detector.detect_rectangles(rgb)
        except ImageAnalysisError as e:
            logger.error(f"Region detection failed: {e}")
            return RegionDetection()

    def _detect_poses(self, rgb: np.ndarray) -> list[BodyPose]:
        if self.pose_detector is None:
            return []
        try:
            return self.pose_detector.detect_poses(rgb)
        except ImageAnalysisError as e:
            logger.error(f"Pose detection failed: {e}")
            return []

    def detect_objects(self, image: ImageSource, digest: str | None = None) -> list[str]:
        """
        Synthesize object labels for the image.

        Region labels come first, then pose and frame labels. Property
        labels are added when fewer than three labels were found, and
        equipment labels always run last.

        Args:
            image: Proof image
            digest: Precomputed image_digest of the decoded pixels

        Returns:
            De-duplicated labels in first-seen order
        """
        rgb = load_image(image)
        detection = self._detect_regions(rgb)

        labels: list[str] = []
        if detection.regions:
            labels += region_labels(detection.regions, self.rng)
        labels += pose_labels(self._detect_poses(rgb))
        labels += frame_labels(detection.raw_count)

        if len(labels) < MIN_DETECTED_LABELS:
            labels += property_labels(self._cached_statistics(rgb, "full", digest), self.rng)

        labels += equipment_labels(self._cached_statistics(rgb, "equipment", digest))

        objects = dedupe(labels)
        logger.debug(f"Detected {len(objects)} object labels from {len(detection.regions)} regions")
        logger.trace(f"Object labels: {objects}")
        return objects

    def classify_scene(self, image: ImageSource, digest: str | None = None) -> list[str]:
        """Scene labels for the image."""
        scenes = scene_labels(self._cached_statistics(load_image(image), "full", digest))
        logger.debug(f"Scene labels: {scenes}")
        return scenes

    def extract_features(self, image: ImageSource) -> ImageFeatures:
        """
        Run every analysis on one image.

        Args:
            image: Proof image

        Returns:
            ImageFeatures combining labels, text and statistics

        Raises:
            ImageDecodeError: If the image cannot be decoded
        """
        rgb = load_image(image)
        digest = self.image_digest(rgb)
        return self.assemble_features(
            rgb,
            text=self.extract_text(rgb),
            objects=self.detect_objects(rgb, digest),
            scenes=self.classify_scene(rgb, digest),
            digest=digest,
        )

    def assemble_features(
        self,
        rgb: np.ndarray,
        text: list[str],
        objects: list[str],
        scenes: list[str],
        digest: str | None = None,
    ) -> ImageFeatures:
        """Combine separately computed labels with the image's statistics."""
        stats = self._cached_statistics(rgb, "full", digest)
        equipment_stats = self._cached_statistics(rgb, "equipment", digest)
        return ImageFeatures(
            detected_objects=objects,
            scene_labels=scenes,
            extracted_text=text,
            complexity=stats.complexity,
            brightness=stats.brightness,
            colorfulness=stats.colorfulness,
            edge_density=stats.edge_density,
            gym_likelihood=stats.is_likely_gym,
            dominant_colors=list(stats.dominant_colors),
            horizontal_line_count=equipment_stats.horizontal_lines,
            vertical_line_count=equipment_stats.vertical_lines,
            width=stats.width,
            height=stats.height,
        )

    def get_cache_stats(self) -> dict[str, int]:
        """Get image statistics cache counters."""
        return self._cache.get_stats()

    def clear_cache(self) -> None:
        self._cache.clear()
