"""Abstract interfaces for the detectors behind image analysis."""

from abc import ABC, abstractmethod

import numpy as np

from .models import BodyPose, RegionDetection


class TextRecognizer(ABC):
    """Abstract interface for text extraction."""

    @abstractmethod
    def recognize_text(self, rgb: np.ndarray) -> list[str]:
        """
        Extract lines of text from an image.

        Args:
            rgb: HxWx3 uint8 RGB pixel array

        Returns:
            Non-empty text lines in reading order

        Raises:
            ImageAnalysisError: If the recognizer fails
        """
        pass


class RectangleDetector(ABC):
    """Abstract interface for quadrilateral region detection."""

    @abstractmethod
    def detect_rectangles(self, rgb: np.ndarray) -> RegionDetection:
        """
        Detect rectangle-like regions.

        Args:
            rgb: HxWx3 uint8 RGB pixel array

        Returns:
            RegionDetection with filtered regions and the raw count

        Raises:
            ImageAnalysisError: If detection fails
        """
        pass


class PoseDetector(ABC):
    """Abstract interface for human body pose detection."""

    @abstractmethod
    def detect_poses(self, rgb: np.ndarray) -> list[BodyPose]:
        """
        Detect human body poses.

        Args:
            rgb: HxWx3 uint8 RGB pixel array

        Returns:
            One BodyPose per detected person (possibly empty)

        Raises:
            ImageAnalysisError: If detection fails
        """
        pass
