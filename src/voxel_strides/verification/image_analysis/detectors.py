"""Detector backends: Tesseract OCR, OpenCV quadrilaterals and MediaPipe pose."""

import threading
import urllib.error
import urllib.request
from pathlib import Path
from typing import Any

import cv2
import numpy as np
import pytesseract
from PIL import Image

from ..cache_utils import get_models_cache_dir
from ..config import (
    POSE_MAX_PEOPLE,
    POSE_MIN_DETECTION_CONFIDENCE,
    POSE_MIN_VISIBILITY,
    POSE_MODEL_FILENAME,
    POSE_MODEL_URL,
    RECTANGLE_APPROX_EPSILON,
    RECTANGLE_CANNY_HIGH,
    RECTANGLE_CANNY_LOW,
    RECTANGLE_MAX_ASPECT_RATIO,
    RECTANGLE_MAX_OBSERVATIONS,
    RECTANGLE_MIN_ASPECT_RATIO,
    RECTANGLE_MIN_SIZE,
    TESSERACT_CONFIG,
)
from ..exceptions import ImageAnalysisError
from ..logging_utils import get_logger
from .interfaces import PoseDetector, RectangleDetector, TextRecognizer
from .models import BodyPose, RectangleRegion, RegionDetection

logger = get_logger(__name__)

# MediaPipe pose landmark indices for the joints the pose heuristics read
POSE_LANDMARK_INDICES = {
    "left_shoulder": 11,
    "right_shoulder": 12,
    "left_hip": 23,
    "right_hip": 24,
    "left_knee": 25,
    "right_knee": 26,
    "left_ankle": 27,
    "right_ankle": 28,
}


class TesseractTextRecognizer(TextRecognizer):
    """Text recognition through the Tesseract OCR engine."""

    def __init__(self, config: str = TESSERACT_CONFIG, lang: str = "eng") -> None:
        self.config = config
        self.lang = lang

    def recognize_text(self, rgb: np.ndarray) -> list[str]:
        try:
            raw_text = pytesseract.image_to_string(
                Image.fromarray(rgb), lang=self.lang, config=self.config
            )
        except (pytesseract.TesseractNotFoundError, pytesseract.TesseractError, OSError) as e:
            raise ImageAnalysisError(f"Text recognition failed: {e}") from e

        lines = [line.strip() for line in raw_text.splitlines()]
        return [line for line in lines if line]


class OpenCVRectangleDetector(RectangleDetector):
    """
    Quadrilateral detection with Canny edges and polygon approximation.

    Every convex four-point contour counts toward the raw count; only those
    within the aspect-ratio and size limits are kept as regions, largest
    first.
    """

    def __init__(
        self,
        min_aspect_ratio: float = RECTANGLE_MIN_ASPECT_RATIO,
        max_aspect_ratio: float = RECTANGLE_MAX_ASPECT_RATIO,
        min_size: float = RECTANGLE_MIN_SIZE,
        max_observations: int = RECTANGLE_MAX_OBSERVATIONS,
    ) -> None:
        self.min_aspect_ratio = min_aspect_ratio
        self.max_aspect_ratio = max_aspect_ratio
        self.min_size = min_size
        self.max_observations = max_observations

    def _find_quadrilaterals(self, rgb: np.ndarray) -> list[np.ndarray]:
        gray = cv2.cvtColor(rgb, cv2.COLOR_RGB2GRAY)
        blurred = cv2.GaussianBlur(gray, (5, 5), 0)
        edges = cv2.Canny(blurred, RECTANGLE_CANNY_LOW, RECTANGLE_CANNY_HIGH)
        contours, _ = cv2.findContours(edges, cv2.RETR_LIST, cv2.CHAIN_APPROX_SIMPLE)

        quadrilaterals = []
        for contour in contours:
            perimeter = cv2.arcLength(contour, True)
            approx = cv2.approxPolyDP(contour, RECTANGLE_APPROX_EPSILON * perimeter, True)
            if len(approx) == 4 and cv2.isContourConvex(approx):
                quadrilaterals.append(approx)
        return quadrilaterals

    def detect_rectangles(self, rgb: np.ndarray) -> RegionDetection:
        height, width = rgb.shape[:2]
        try:
            quadrilaterals = self._find_quadrilaterals(rgb)
        except cv2.error as e:
            raise ImageAnalysisError(f"Rectangle detection failed: {e}") from e

        shorter_side = min(width, height)
        regions = []
        for quad in quadrilaterals:
            _, _, w, h = cv2.boundingRect(quad)
            if min(w, h) / shorter_side < self.min_size:
                continue
            region = RectangleRegion(width=w / width, height=h / height)
            if self.min_aspect_ratio <= region.aspect_ratio <= self.max_aspect_ratio:
                regions.append(region)

        regions.sort(key=lambda r: r.area, reverse=True)
        logger.trace(f"Found {len(quadrilaterals)} quadrilaterals, kept {len(regions)} regions")
        return RegionDetection(
            regions=regions[: self.max_observations], raw_count=len(quadrilaterals)
        )


def default_pose_model_path() -> Path:
    return get_models_cache_dir() / POSE_MODEL_FILENAME


def download_pose_model(dest: Path | None = None, url: str = POSE_MODEL_URL) -> Path:
    """
    Download the MediaPipe pose landmarker model if it is not present.

    Args:
        dest: Target file (defaults to the models cache directory)
        url: Model download URL

    Returns:
        Path to the model file

    Raises:
        ImageAnalysisError: If the download fails
    """
    dest = dest or default_pose_model_path()
    if dest.exists():
        logger.debug(f"Pose model already present at {dest}")
        return dest

    logger.info(f"📥 Downloading pose model to {dest}")
    dest.parent.mkdir(parents=True, exist_ok=True)
    try:
        urllib.request.urlretrieve(url, dest)
    except (urllib.error.URLError, OSError) as e:
        dest.unlink(missing_ok=True)
        raise ImageAnalysisError(f"Failed to download pose model: {e}") from e

    logger.info("✅ Pose model downloaded")
    return dest


class MediaPipePoseDetector(PoseDetector):
    """
    Human pose detection with the MediaPipe pose landmarker.

    mediapipe is an optional dependency (the "pose" extra) and is imported
    on first use. Landmarks are converted to a y-up coordinate system and
    landmarks below the visibility threshold are dropped.
    """

    def __init__(
        self,
        model_path: Path | str | None = None,
        max_people: int = POSE_MAX_PEOPLE,
        min_visibility: float = POSE_MIN_VISIBILITY,
    ) -> None:
        self._model_path = Path(model_path) if model_path else None
        self.max_people = max_people
        self.min_visibility = min_visibility
        self._mp: Any = None
        self._landmarker: Any = None
        self._lock = threading.Lock()

    @property
    def model_path(self) -> Path:
        return self._model_path or default_pose_model_path()

    def _get_landmarker(self) -> Any:
        if self._landmarker is not None:
            return self._landmarker

        try:
            import mediapipe as mp
            from mediapipe.tasks import python as mp_python
            from mediapipe.tasks.python import vision
        except ImportError as e:
            raise ImageAnalysisError(
                "mediapipe is not installed; install the 'pose' extra to enable pose detection"
            ) from e

        model_path = self.model_path
        if not model_path.exists():
            raise ImageAnalysisError(
                f"Pose model not found at {model_path}; run with --download-models first"
            )

        options = vision.PoseLandmarkerOptions(
            base_options=mp_python.BaseOptions(model_asset_path=str(model_path)),
            running_mode=vision.RunningMode.IMAGE,
            num_poses=self.max_people,
            min_pose_detection_confidence=POSE_MIN_DETECTION_CONFIDENCE,
        )
        try:
            self._landmarker = vision.PoseLandmarker.create_from_options(options)
        except (RuntimeError, ValueError) as e:
            raise ImageAnalysisError(f"Failed to load pose model: {e}") from e

        self._mp = mp
        logger.debug(f"Loaded pose landmarker from {model_path}")
        return self._landmarker

    def _to_body_pose(self, landmarks: list[Any]) -> BodyPose:
        keypoints = {}
        for name, index in POSE_LANDMARK_INDICES.items():
            if index >= len(landmarks):
                continue
            landmark = landmarks[index]
            visibility = landmark.visibility
            if visibility is not None and visibility < self.min_visibility:
                continue
            keypoints[name] = (float(landmark.x), 1.0 - float(landmark.y))
        return BodyPose(keypoints=keypoints)

    def detect_poses(self, rgb: np.ndarray) -> list[BodyPose]:
        with self._lock:
            landmarker = self._get_landmarker()
            mp_image = self._mp.Image(
                image_format=self._mp.ImageFormat.SRGB, data=np.ascontiguousarray(rgb)
            )
            try:
                result = landmarker.detect(mp_image)
            except (RuntimeError, ValueError) as e:
                raise ImageAnalysisError(f"Pose detection failed: {e}") from e

        return [self._to_body_pose(landmarks) for landmarks in result.pose_landmarks]
