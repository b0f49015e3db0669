"""Heuristic image analysis for proof photos."""

from .detectors import (
    MediaPipePoseDetector,
    OpenCVRectangleDetector,
    TesseractTextRecognizer,
    download_pose_model,
)
from .extractor import ImageFeatureExtractor
from .interfaces import PoseDetector, RectangleDetector, TextRecognizer
from .loading import load_image, resize_rgb
from .models import BodyPose, ImageStatistics, RectangleRegion, RegionDetection
from .statistics import compute_statistics

__all__ = [
    "BodyPose",
    "ImageFeatureExtractor",
    "ImageStatistics",
    "MediaPipePoseDetector",
    "OpenCVRectangleDetector",
    "PoseDetector",
    "RectangleDetector",
    "RectangleRegion",
    "RegionDetection",
    "TesseractTextRecognizer",
    "TextRecognizer",
    "compute_statistics",
    "download_pose_model",
    "load_image",
    "resize_rgb",
]
