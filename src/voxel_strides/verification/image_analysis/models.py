"""Data models for image analysis."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RectangleRegion:
    """Quadrilateral region, size normalized to the image dimensions."""

    width: float
    height: float

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height if self.height > 0 else 0.0

    @property
    def area(self) -> float:
        return self.width * self.height


@dataclass
class RegionDetection:
    """Regions kept for labelling plus the raw quadrilateral count."""

    regions: list[RectangleRegion] = field(default_factory=list)
    raw_count: int = 0


@dataclass(frozen=True)
class BodyPose:
    """
    Body keypoints in normalized image coordinates.

    The origin is the bottom-left corner, so y grows upwards.
    Keys are names like "right_shoulder" or "left_ankle".
    """

    keypoints: dict[str, tuple[float, float]]

    def get(self, name: str) -> tuple[float, float] | None:
        return self.keypoints.get(name)


@dataclass(frozen=True)
class ImageStatistics:
    """Scalar and structural statistics computed from one image."""

    width: int
    height: int
    brightness: float
    colorfulness: float
    edge_density: float
    complexity: float
    horizontal_lines: int
    vertical_lines: int
    has_gym_colors: bool
    has_equipment_patterns: bool
    gym_score: float
    is_likely_gym: bool
    dominant_colors: tuple[str, ...] = ()

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height if self.height > 0 else 1.0
