"""
Heuristic label synthesis.

Object and scene labels are derived from region geometry, body pose and
pixel statistics rather than a trained detector. Filler labels are drawn
from fixed candidate lists with an injected random source, mimicking the
noise of a real detector.
"""

import random
from collections.abc import Callable
from typing import NamedTuple

from ..config import (
    ACTIVE_POSE_CONFIDENCE,
    BRIGHT_PROPERTY_THRESHOLD,
    BRIGHT_SCENE_THRESHOLD,
    CLUTTERED_COMPLEXITY,
    COLORFUL_PROPERTY_THRESHOLD,
    COLORFUL_SCENE_THRESHOLD,
    COMPLEX_FRAME_RECTANGLE_COUNT,
    DARK_PROPERTY_THRESHOLD,
    DARK_SCENE_THRESHOLD,
    FRAME_RECTANGLE_COUNT,
    GYM_FILLER_COUNT,
    GYM_OBJECTS,
    LYING_ALIGNMENT_TOLERANCE,
    LYING_SHOULDER_MAX_HEIGHT,
    MINIMALIST_COMPLEXITY,
    MODERN_GYM_BRIGHTNESS,
    MONOCHROME_PROPERTY_THRESHOLD,
    MOSTLY_CLEAN_BRIGHTNESS,
    OPEN_GYM_COMPLEXITY,
    PROPERTY_FILLER_COUNT,
    PROPERTY_FILLER_LABELS,
    REGION_FILLER_COUNT,
    REGION_FILLER_LABELS,
    SEATED_KNEE_HIP_DISTANCE,
    SQUAT_KNEE_ANKLE_DISTANCE,
    TALL_ASPECT_RATIO,
    WIDE_ASPECT_RATIO,
)
from ..lexical_analyzer import unique_in_order
from .models import BodyPose, ImageStatistics, RectangleRegion

REQUIRED_POSE_KEYPOINTS = (
    "right_shoulder", "left_shoulder", "right_hip", "left_hip", "right_knee", "left_knee",
)


def region_label(region: RectangleRegion) -> str:
    """Guess an object name from a region's aspect ratio and area."""
    aspect = region.aspect_ratio
    area = region.area
    square = 0.8 < aspect < 1.2

    if aspect > 2.0:
        return "shelf"
    if aspect < 0.5:
        return "bottle"
    if area > 0.4:
        return "table"
    if area > 0.3 and square:
        return "exercise machine"
    if area > 0.2 and aspect > 1.5:
        return "bench"
    if area < 0.1 and square:
        return "weight"
    if area < 0.1:
        return "small object"
    return "item"


def region_labels(regions: list[RectangleRegion], rng: random.Random) -> list[str]:
    """
    Labels for a set of detected regions.

    One label per region, then clutter labels from the region count and
    total area, then two random filler labels.
    """
    labels = [region_label(region) for region in regions]

    count = len(regions)
    if count > 8:
        labels += ["cluttered space", "multiple items"]
    elif count > 5:
        labels.append("several items")
    elif count > 2:
        labels.append("few items")
    elif count <= 1:
        labels += ["clean space", "empty surface"]

    total_area = sum(region.area for region in regions)
    if total_area > 0.4:
        labels.append("cluttered surface")
    elif total_area < 0.1:
        labels.append("mostly empty surface")

    labels += rng.sample(REGION_FILLER_LABELS, REGION_FILLER_COUNT)
    return labels


def frame_labels(raw_rectangle_count: int) -> list[str]:
    """Labels suggesting framed equipment from the raw quadrilateral count."""
    labels = []
    if raw_rectangle_count > FRAME_RECTANGLE_COUNT:
        labels.append("equipment with frame")
        if raw_rectangle_count > COMPLEX_FRAME_RECTANGLE_COUNT:
            labels += ["complex equipment", "weight machine"]
    return labels


def analyze_pose(pose: BodyPose) -> tuple[str, float]:
    """
    Classify a body pose.

    Args:
        pose: Keypoints in y-up normalized coordinates

    Returns:
        (pose label, confidence)
    """
    if any(pose.get(name) is None for name in REQUIRED_POSE_KEYPOINTS):
        return "person standing", 0.5

    right_shoulder = pose.keypoints["right_shoulder"]
    left_shoulder = pose.keypoints["left_shoulder"]
    right_hip = pose.keypoints["right_hip"]
    left_hip = pose.keypoints["left_hip"]
    right_knee = pose.keypoints["right_knee"]
    left_knee = pose.keypoints["left_knee"]

    shoulder_tilt = abs(right_shoulder[1] - left_shoulder[1])
    hip_tilt = abs(right_hip[1] - left_hip[1])

    right_ankle = pose.get("right_ankle")
    if right_ankle is not None and pose.get("left_ankle") is not None:
        if abs(right_knee[1] - right_ankle[1]) < SQUAT_KNEE_ANKLE_DISTANCE:
            return "person squatting", 0.8

    if (
        shoulder_tilt < LYING_ALIGNMENT_TOLERANCE
        and hip_tilt < LYING_ALIGNMENT_TOLERANCE
        and right_shoulder[1] < LYING_SHOULDER_MAX_HEIGHT
        and left_shoulder[1] < LYING_SHOULDER_MAX_HEIGHT
    ):
        return "person lying down", 0.8

    if (
        abs(right_knee[1] - right_hip[1]) < SEATED_KNEE_HIP_DISTANCE
        and abs(left_knee[1] - left_hip[1]) < SEATED_KNEE_HIP_DISTANCE
    ):
        return "person seated", 0.7

    return "person exercising", 0.6


def pose_labels(poses: list[BodyPose]) -> list[str]:
    if not poses:
        return []

    labels = ["person"]
    for pose in poses:
        pose_type, confidence = analyze_pose(pose)
        labels.append(pose_type)
        if confidence > ACTIVE_POSE_CONFIDENCE:
            labels.append("active person")
    return labels


def property_labels(stats: ImageStatistics, rng: random.Random) -> list[str]:
    """Labels inferred from whole-image brightness, color and complexity."""
    labels = []

    if stats.brightness > BRIGHT_PROPERTY_THRESHOLD:
        labels += ["clean surface", "empty space", "organized space"]
    elif stats.brightness > MOSTLY_CLEAN_BRIGHTNESS:
        labels.append("mostly clean surface")
    elif stats.brightness < DARK_PROPERTY_THRESHOLD:
        labels += ["dark environment", "cluttered space"]

    if stats.colorfulness > COLORFUL_PROPERTY_THRESHOLD:
        labels += ["colorful items", "decorative objects"]
    elif stats.colorfulness < MONOCHROME_PROPERTY_THRESHOLD:
        labels += ["monochrome objects", "minimalist space"]

    if stats.complexity > CLUTTERED_COMPLEXITY:
        labels += ["cluttered space", "many items"]
    elif stats.complexity < MINIMALIST_COMPLEXITY:
        labels += ["clean space", "few items", "empty surface"]

    if stats.is_likely_gym:
        labels += rng.sample(GYM_OBJECTS, GYM_FILLER_COUNT)

    labels += rng.sample(PROPERTY_FILLER_LABELS, PROPERTY_FILLER_COUNT)
    return labels


class EquipmentRule(NamedTuple):
    """An equipment label, when it applies, and an optional sub-type."""

    label: str
    applies: Callable[[ImageStatistics], bool]
    subtype: Callable[[ImageStatistics], str] | None = None


def _weight_machine_type(s: ImageStatistics) -> str:
    if s.horizontal_lines > int(s.vertical_lines * 1.5):
        return "leg press machine"
    if s.vertical_lines > int(s.horizontal_lines * 1.5):
        return "cable machine"
    return "multi-gym equipment"


# Every matching rule fires, in table order. The flat bench branch needs
# exactly one horizontal line, which the bench rule itself excludes.
EQUIPMENT_RULES: tuple[EquipmentRule, ...] = (
    EquipmentRule(
        "weight machine",
        lambda s: s.has_gym_colors
        and s.horizontal_lines > 4
        and s.vertical_lines > 4
        and s.complexity > 0.5,
        _weight_machine_type,
    ),
    EquipmentRule(
        "treadmill",
        lambda s: s.has_gym_colors
        and 2 < s.horizontal_lines < 6
        and 1 < s.vertical_lines < 4
        and s.complexity < 0.6,
    ),
    EquipmentRule(
        "bench",
        lambda s: s.has_gym_colors
        and 1 < s.horizontal_lines < 4
        and 0 < s.vertical_lines < 3
        and s.complexity < 0.4,
        lambda s: "flat bench"
        if s.horizontal_lines == 1 and s.vertical_lines >= 2
        else "adjustable bench",
    ),
    EquipmentRule(
        "weights",
        lambda s: s.has_gym_colors
        and s.complexity < 0.4
        and s.edge_density < 0.3
        and s.brightness < 0.4,
        lambda s: "dumbbells"
        if s.horizontal_lines < 2 and s.vertical_lines < 2
        else "weight plates",
    ),
    EquipmentRule(
        "cardio equipment",
        lambda s: s.has_gym_colors
        and s.horizontal_lines > 2
        and s.vertical_lines > 2
        and 0.4 < s.complexity < 0.7,
        lambda s: "exercise bike"
        if s.horizontal_lines > s.vertical_lines
        else "elliptical machine",
    ),
)


def equipment_labels(
    stats: ImageStatistics, rules: tuple[EquipmentRule, ...] = EQUIPMENT_RULES
) -> list[str]:
    """
    Gym equipment labels from a 224x224 copy's statistics.

    Args:
        stats: Statistics of the equipment-analysis copy
        rules: Ordered rule table

    Returns:
        Labels of every matching rule, or a generic fallback
    """
    labels = []
    for rule in rules:
        if rule.applies(stats):
            labels.append(rule.label)
            if rule.subtype is not None:
                labels.append(rule.subtype(stats))

    if not labels and stats.has_gym_colors:
        labels.append("gym equipment")
    if not labels and stats.has_equipment_patterns:
        labels.append("fitness equipment")
    return labels


def scene_labels(stats: ImageStatistics) -> list[str]:
    """Classify the scene from gym likelihood, lighting, shape, clutter and color."""
    scenes = []

    if stats.is_likely_gym:
        scenes.append("gym")
        if stats.brightness > MODERN_GYM_BRIGHTNESS:
            scenes.append("modern fitness center")
        else:
            scenes.append("traditional gym")

        if stats.complexity > CLUTTERED_COMPLEXITY:
            scenes.append("equipment area")
        elif stats.complexity < OPEN_GYM_COMPLEXITY:
            scenes.append("open workout space")

        scenes += ["fitness facility", "workout area"]
        return scenes

    if stats.brightness > BRIGHT_SCENE_THRESHOLD:
        if stats.complexity < MINIMALIST_COMPLEXITY:
            scenes += ["clean bright space", "empty surface"]
        elif stats.colorfulness > COLORFUL_SCENE_THRESHOLD:
            scenes.append("bright colorful room")
        else:
            scenes.append("bright space")
    elif stats.brightness < DARK_SCENE_THRESHOLD:
        scenes.append("dark room")
    else:
        scenes.append("indoor space")

    if stats.aspect_ratio > WIDE_ASPECT_RATIO:
        scenes.append("wide room")
    elif stats.aspect_ratio < TALL_ASPECT_RATIO:
        scenes.append("tall space")
    else:
        scenes.append("standard room")

    if stats.complexity > CLUTTERED_COMPLEXITY:
        scenes.append("cluttered environment")
    elif stats.complexity < MINIMALIST_COMPLEXITY:
        scenes += ["minimalist environment", "clean space"]

    colors = set(stats.dominant_colors)
    if colors & {"wood", "brown"}:
        scenes.append("home environment")
    if colors & {"white", "gray"}:
        scenes.append("office space")
    if "green" in colors:
        scenes.append("nature-influenced space")

    return scenes


def dedupe(labels: list[str]) -> list[str]:
    """Drop repeated labels, keeping first occurrences in order."""
    return list(unique_in_order(labels))
