"""Tests for the image feature extractor."""

import io
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from collections.abc import Callable
from typing import Any
from unittest.mock import patch

import numpy as np
import pytest
from PIL import Image

from voxel_strides.verification.exceptions import ImageAnalysisError, ImageDecodeError
from voxel_strides.verification.image_analysis import extractor as extractor_module
from voxel_strides.verification.image_analysis.extractor import ImageFeatureExtractor
from voxel_strides.verification.image_analysis.models import BodyPose, RegionDetection

ExtractorFactory = Callable[..., ImageFeatureExtractor]
ImageFactory = Callable[..., np.ndarray]


@pytest.mark.unit
class TestImageFeatureExtractor:
    """Test cases for ImageFeatureExtractor."""

    def test_extract_text(self, make_extractor: ExtractorFactory, make_image: ImageFactory) -> None:
        """Test extract text."""
        extractor = make_extractor(lines=["Chapter 1", "Notes"])

        assert extractor.extract_text(make_image((255, 255, 255))) == ["Chapter 1", "Notes"]

    def test_text_failure_is_empty(
        self,
        make_extractor: ExtractorFactory,
        make_image: ImageFactory,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test text failure is empty."""
        extractor = make_extractor(text_error=ImageAnalysisError("tesseract missing"))

        with caplog.at_level(logging.ERROR):
            assert extractor.extract_text(make_image((255, 255, 255))) == []

        assert "Text extraction failed" in caplog.text

    def test_objects_for_single_region(
        self,
        make_extractor: ExtractorFactory,
        make_image: ImageFactory,
        single_item_detection: RegionDetection,
    ) -> None:
        """Test objects for single region."""
        extractor = make_extractor(detection=single_item_detection)

        objects = extractor.detect_objects(make_image((255, 255, 255)))

        assert objects[:3] == ["item", "clean space", "empty surface"]
        assert objects[-1] == "fitness equipment"
        assert len(objects) == 6

    def test_objects_from_properties_when_nothing_detected(
        self, make_extractor: ExtractorFactory, make_image: ImageFactory
    ) -> None:
        """Test objects from properties when nothing detected."""
        objects = make_extractor().detect_objects(make_image((255, 255, 255)))

        assert objects[:8] == [
            "clean surface",
            "empty space",
            "organized space",
            "monochrome objects",
            "minimalist space",
            "clean space",
            "few items",
            "empty surface",
        ]
        assert objects[-1] == "fitness equipment"

    def test_pose_labels_suppress_property_labels(
        self,
        make_extractor: ExtractorFactory,
        make_image: ImageFactory,
        squat_pose: BodyPose,
    ) -> None:
        """Test pose labels suppress property labels."""
        extractor = make_extractor(poses=[squat_pose])

        objects = extractor.detect_objects(make_image((255, 255, 255)))

        assert objects == ["person", "person squatting", "active person", "fitness equipment"]

    def test_frame_labels(self, make_extractor: ExtractorFactory, make_image: ImageFactory) -> None:
        """Test frame labels."""
        extractor = make_extractor(detection=RegionDetection(regions=[], raw_count=7))

        objects = extractor.detect_objects(make_image((255, 255, 255)))

        assert objects == [
            "equipment with frame",
            "complex equipment",
            "weight machine",
            "fitness equipment",
        ]

    def test_mid_gray_gets_gym_equipment(
        self,
        make_extractor: ExtractorFactory,
        make_image: ImageFactory,
        squat_pose: BodyPose,
    ) -> None:
        """Test mid gray gets gym equipment."""
        extractor = make_extractor(poses=[squat_pose])

        objects = extractor.detect_objects(make_image((128, 128, 128)))

        assert objects[-1] == "gym equipment"

    def test_detector_failures_are_nothing_detected(
        self,
        make_extractor: ExtractorFactory,
        make_image: ImageFactory,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test detector failures are nothing detected."""
        extractor = make_extractor(
            rectangle_error=ImageAnalysisError("opencv failed"),
            pose_error=ImageAnalysisError("model missing"),
        )

        with caplog.at_level(logging.ERROR):
            objects = extractor.detect_objects(make_image((255, 255, 255)))

        assert objects[0] == "clean surface"
        assert "Region detection failed" in caplog.text
        assert "Pose detection failed" in caplog.text

    def test_without_pose_detector(self, fakes: dict[str, Any], make_image: ImageFactory) -> None:
        """Test without pose detector."""
        extractor = ImageFeatureExtractor(
            text_recognizer=fakes["text"](),
            rectangle_detector=fakes["rectangles"](RegionDetection(raw_count=4)),
        )

        objects = extractor.detect_objects(make_image((255, 255, 255)))

        assert "person" not in objects
        assert objects[0] == "equipment with frame"

    def test_same_seed_same_labels(
        self,
        make_extractor: ExtractorFactory,
        make_image: ImageFactory,
        single_item_detection: RegionDetection,
    ) -> None:
        """Test same seed same labels."""
        image = make_image((255, 255, 255))

        first = make_extractor(detection=single_item_detection, seed=11).detect_objects(image)
        second = make_extractor(detection=single_item_detection, seed=11).detect_objects(image)

        assert first == second

    def test_classify_scene(self, make_extractor: ExtractorFactory, make_image: ImageFactory) -> None:
        """Test classify scene."""
        extractor = make_extractor()

        assert extractor.classify_scene(make_image((255, 255, 255))) == [
            "clean bright space",
            "empty surface",
            "standard room",
            "minimalist environment",
            "clean space",
            "office space",
        ]
        assert extractor.classify_scene(make_image((128, 128, 128))) == [
            "gym",
            "traditional gym",
            "open workout space",
            "fitness facility",
            "workout area",
        ]

    def test_extract_features(self, make_extractor: ExtractorFactory, make_image: ImageFactory) -> None:
        """Test extract features."""
        extractor = make_extractor(lines=["Shopping list"])

        features = extractor.extract_features(make_image((255, 255, 255)))

        assert features.extracted_text == ["Shopping list"]
        assert "office space" in features.scene_labels
        assert features.brightness == pytest.approx(1.0)
        assert features.dominant_colors == ["white"]
        assert (features.width, features.height) == (200, 200)
        assert (features.horizontal_line_count, features.vertical_line_count) == (21, 21)
        assert not features.gym_likelihood
        assert features.to_dict()["objects"] == features.detected_objects

    def test_extract_features_rejects_bad_image(self, make_extractor: ExtractorFactory) -> None:
        """Test extract features rejects bad image."""
        with pytest.raises(ImageDecodeError):
            make_extractor().extract_features(b"definitely not a picture")


@pytest.mark.unit
class TestStatisticsCache:
    """Test cases for the image statistics cache."""

    def test_repeat_lookup_hits_cache(
        self, make_extractor: ExtractorFactory, make_image: ImageFactory
    ) -> None:
        """Test repeat lookup hits cache."""
        extractor = make_extractor()
        image = make_image((10, 200, 30))

        first = extractor.compute_statistics(image)
        second = extractor.compute_statistics(image.copy())

        assert second is first
        assert extractor.get_cache_stats()["hits"] == 1

    def test_decoded_sources_share_entries(
        self, make_extractor: ExtractorFactory, make_image: ImageFactory
    ) -> None:
        """Test decoded sources share entries."""
        extractor = make_extractor()
        image = make_image((10, 200, 30))
        buffer = io.BytesIO()
        Image.fromarray(image).save(buffer, format="PNG")

        first = extractor.compute_statistics(image)

        assert extractor.compute_statistics(buffer.getvalue()) is first

    def test_equipment_statistics_use_resized_copy(
        self, make_extractor: ExtractorFactory, make_image: ImageFactory
    ) -> None:
        """Test equipment statistics use resized copy."""
        extractor = make_extractor()
        image = make_image((255, 255, 255), width=640, height=480)

        full = extractor.compute_statistics(image)
        equipment = extractor.equipment_statistics(image)

        assert (full.width, full.height) == (640, 480)
        assert (equipment.width, equipment.height) == (224, 224)
        assert extractor.get_cache_stats()["size"] == 2

    def test_different_pixels_miss(
        self, make_extractor: ExtractorFactory, make_image: ImageFactory
    ) -> None:
        """Test different pixels miss."""
        extractor = make_extractor()

        white = extractor.compute_statistics(make_image((255, 255, 255)))
        black = extractor.compute_statistics(make_image((0, 0, 0)))

        assert white.brightness > black.brightness
        assert extractor.get_cache_stats()["misses"] == 2

    def test_clear_cache(self, make_extractor: ExtractorFactory, make_image: ImageFactory) -> None:
        """Test clear cache."""
        extractor = make_extractor()
        extractor.compute_statistics(make_image((255, 255, 255)))

        extractor.clear_cache()

        assert extractor.get_cache_stats()["size"] == 0

    def test_extract_features_hashes_pixels_once(
        self, make_extractor: ExtractorFactory, make_image: ImageFactory
    ) -> None:
        """Test one feature extraction digests the pixel buffer a single time."""
        extractor = make_extractor()

        with patch.object(
            extractor_module, "content_hash", wraps=extractor_module.content_hash
        ) as mock_hash:
            extractor.extract_features(make_image((120, 120, 120)))

        assert mock_hash.call_count == 1
        assert extractor.get_cache_stats()["size"] == 2

    def test_concurrent_misses_compute_once(
        self, make_extractor: ExtractorFactory, make_image: ImageFactory
    ) -> None:
        """Test concurrent lookups of an uncached image share one computation."""
        extractor = make_extractor()
        image = make_image((10, 200, 30))
        real_compute = extractor_module.compute_statistics
        calls = 0
        calls_lock = threading.Lock()

        def slow_compute(rgb: np.ndarray) -> Any:
            nonlocal calls
            with calls_lock:
                calls += 1
            time.sleep(0.05)
            return real_compute(rgb)

        with patch.object(extractor_module, "compute_statistics", side_effect=slow_compute):
            with ThreadPoolExecutor(max_workers=4) as pool:
                results = list(pool.map(lambda _: extractor.compute_statistics(image), range(4)))

        assert calls == 1
        assert all(stats is results[0] for stats in results)
