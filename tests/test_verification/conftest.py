"""Shared fakes and fixtures for verification tests."""

import re
import struct
import threading
import zlib
from collections.abc import Callable
from typing import Any

import numpy as np
import pytest

from voxel_strides.verification.exceptions import ImageAnalysisError, TaggerUnavailableError
from voxel_strides.verification.image_analysis.extractor import ImageFeatureExtractor
from voxel_strides.verification.image_analysis.interfaces import (
    PoseDetector,
    RectangleDetector,
    TextRecognizer,
)
from voxel_strides.verification.image_analysis.models import (
    BodyPose,
    ImageStatistics,
    RectangleRegion,
    RegionDetection,
)
from voxel_strides.verification.interfaces import PartOfSpeechTagger
from voxel_strides.verification.lexical_analyzer import LexicalAnalyzer
from voxel_strides.verification.models import LexicalClass, NameType

FAKE_VERBS = {
    "clean", "remove", "run", "go", "read", "lift", "organize", "write", "buy",
    "finish", "clear", "study", "declutter", "train", "jog", "walk", "cook",
    "wash", "meet", "visit", "running",
}
FAKE_ADJECTIVES = {"messy", "new", "daily", "quick", "empty", "long", "heavy"}
FAKE_FUNCTION_WORDS = {
    "the", "my", "for", "a", "an", "from", "and", "of", "to", "all", "with",
    "on", "in", "at", "i", "it",
}
FAKE_NAMES = {
    "Alice": NameType.PERSONAL_NAME,
    "Bob": NameType.PERSONAL_NAME,
    "Paris": NameType.PLACE_NAME,
    "London": NameType.PLACE_NAME,
    "Acme": NameType.ORGANIZATION_NAME,
    "Friday": NameType.OTHER_NAME,
}


class FakeTagger(PartOfSpeechTagger):
    """Lexicon-driven tagger that counts calls."""

    def __init__(self, unavailable: bool = False) -> None:
        self.unavailable = unavailable
        self.lexical_calls = 0
        self.name_type_calls = 0

    @staticmethod
    def tokenize(text: str) -> list[str]:
        return re.findall(r"[A-Za-z0-9]+(?:['-][A-Za-z0-9]+)*", text)

    def tag_lexical_classes(self, text: str) -> list[tuple[str, LexicalClass]]:
        self.lexical_calls += 1
        if self.unavailable:
            raise TaggerUnavailableError("tagger data missing")

        tagged = []
        for token in self.tokenize(text):
            word = token.lower()
            if word in FAKE_FUNCTION_WORDS:
                tagged.append((token, LexicalClass.OTHER))
            elif word in FAKE_VERBS:
                tagged.append((token, LexicalClass.VERB))
            elif word in FAKE_ADJECTIVES:
                tagged.append((token, LexicalClass.ADJECTIVE))
            else:
                tagged.append((token, LexicalClass.NOUN))
        return tagged

    def tag_name_types(self, text: str) -> list[tuple[str, NameType]]:
        self.name_type_calls += 1
        if self.unavailable:
            raise TaggerUnavailableError("tagger data missing")
        return [(token, FAKE_NAMES.get(token, NameType.OTHER_WORD)) for token in self.tokenize(text)]


class FakeTextRecognizer(TextRecognizer):
    def __init__(
        self,
        lines: list[str] | None = None,
        error: Exception | None = None,
        block: threading.Event | None = None,
    ) -> None:
        self.lines = lines or []
        self.error = error
        self.block = block
        self.calls = 0

    def recognize_text(self, rgb: np.ndarray) -> list[str]:
        self.calls += 1
        if self.block is not None:
            self.block.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return list(self.lines)


class FakeRectangleDetector(RectangleDetector):
    def __init__(
        self, detection: RegionDetection | None = None, error: Exception | None = None
    ) -> None:
        self.detection = detection or RegionDetection()
        self.error = error
        self.calls = 0

    def detect_rectangles(self, rgb: np.ndarray) -> RegionDetection:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.detection


class FakePoseDetector(PoseDetector):
    def __init__(self, poses: list[BodyPose] | None = None, error: Exception | None = None) -> None:
        self.poses = poses or []
        self.error = error

    def detect_poses(self, rgb: np.ndarray) -> list[BodyPose]:
        if self.error is not None:
            raise self.error
        return list(self.poses)


def solid_image(color: tuple[int, int, int], width: int = 200, height: int = 200) -> np.ndarray:
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, :] = color
    return image


@pytest.fixture
def fake_tagger() -> FakeTagger:
    return FakeTagger()


@pytest.fixture
def analyzer(fake_tagger: FakeTagger) -> LexicalAnalyzer:
    return LexicalAnalyzer(fake_tagger)


@pytest.fixture
def tagger_factory() -> type[FakeTagger]:
    return FakeTagger


@pytest.fixture
def fakes() -> dict[str, Any]:
    """Fake detector classes and the image error type they raise."""
    return {
        "text": FakeTextRecognizer,
        "rectangles": FakeRectangleDetector,
        "poses": FakePoseDetector,
        "error": ImageAnalysisError,
    }


@pytest.fixture
def make_image() -> Callable[..., np.ndarray]:
    return solid_image


@pytest.fixture
def make_extractor() -> Callable[..., ImageFeatureExtractor]:
    """Build an extractor around fake detectors."""
    import random

    def factory(
        lines: list[str] | None = None,
        detection: RegionDetection | None = None,
        poses: list[BodyPose] | None = None,
        seed: int = 7,
        **detector_errors: Exception,
    ) -> ImageFeatureExtractor:
        return ImageFeatureExtractor(
            text_recognizer=FakeTextRecognizer(lines, error=detector_errors.get("text_error")),
            rectangle_detector=FakeRectangleDetector(
                detection, error=detector_errors.get("rectangle_error")
            ),
            pose_detector=FakePoseDetector(poses, error=detector_errors.get("pose_error")),
            rng=random.Random(seed),
        )

    return factory


@pytest.fixture
def make_stats() -> Callable[..., ImageStatistics]:
    """ImageStatistics with neutral defaults and keyword overrides."""

    def factory(**overrides: Any) -> ImageStatistics:
        values: dict[str, Any] = {
            "width": 200,
            "height": 200,
            "brightness": 0.5,
            "colorfulness": 0.4,
            "edge_density": 0.2,
            "complexity": 0.5,
            "horizontal_lines": 0,
            "vertical_lines": 0,
            "has_gym_colors": False,
            "has_equipment_patterns": False,
            "gym_score": 0.0,
            "is_likely_gym": False,
            "dominant_colors": (),
        }
        values.update(overrides)
        return ImageStatistics(**values)

    return factory


@pytest.fixture
def single_item_detection() -> RegionDetection:
    """One mid-sized region: a nearly empty desk."""
    return RegionDetection(regions=[RectangleRegion(width=0.5, height=0.4)], raw_count=1)


@pytest.fixture
def cluttered_detection() -> RegionDetection:
    """Ten small square regions: a cluttered desk."""
    regions = [RectangleRegion(width=0.1, height=0.1) for _ in range(10)]
    return RegionDetection(regions=regions, raw_count=10)


@pytest.fixture
def squat_pose() -> BodyPose:
    """Knees level with the ankles: a squat."""
    return BodyPose(
        keypoints={
            "left_shoulder": (0.4, 0.7),
            "right_shoulder": (0.6, 0.7),
            "left_hip": (0.45, 0.4),
            "right_hip": (0.55, 0.4),
            "left_knee": (0.45, 0.3),
            "right_knee": (0.55, 0.3),
            "left_ankle": (0.45, 0.25),
            "right_ankle": (0.55, 0.25),
        }
    )


def _png_chunk(kind: bytes, data: bytes) -> bytes:
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))


@pytest.fixture
def oversized_png() -> bytes:
    """PNG stream whose header declares 30000x30000 pixels."""
    header = struct.pack(">IIBBBBB", 30000, 30000, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", header)
        + _png_chunk(b"IDAT", zlib.compress(b"\x00"))
        + _png_chunk(b"IEND", b"")
    )
