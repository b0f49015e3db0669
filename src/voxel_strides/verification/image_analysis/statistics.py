"""Pixel statistics used by the image heuristics."""

import math

import numpy as np

from ..config import (
    ANALYSIS_SIZE,
    BRIGHTNESS_MAX_SAMPLES,
    COMPLEXITY_COLOR_WEIGHT,
    COMPLEXITY_EDGE_WEIGHT,
    DOMINANT_COLOR_COUNT,
    EDGE_DELTA_THRESHOLD,
    GRAYSCALE_CHANNEL_TOLERANCE,
    GYM_BLACK_MAX,
    GYM_BLACK_PROPORTION,
    GYM_BLUE_GREEN_MAX,
    GYM_BRIGHT_MIN,
    GYM_BRIGHT_OTHER_MAX,
    GYM_BRIGHT_PROPORTION,
    GYM_COLOR_MAX_SAMPLES,
    GYM_COLOR_WEIGHT,
    GYM_EDGE_DENSITY_THRESHOLD,
    GYM_EDGE_WEIGHT,
    GYM_GRAY_ONLY_PROPORTION,
    GYM_GRAY_PROPORTION,
    GYM_LIKELIHOOD_THRESHOLD,
    GYM_METAL_GRAY_RANGE,
    GYM_PATTERN_WEIGHT,
    LINE_SCAN_MARGIN,
    LINE_SCAN_STEP,
    LINE_SIMILARITY_THRESHOLD,
    PATTERN_MIN_LINES,
    PATTERN_SCAN_MARGIN,
    PATTERN_SCAN_STEP,
)
from .loading import resize_rgb
from .models import ImageStatistics

# Palette names in classification priority order
PALETTE = (
    "black", "gray", "white", "red", "green", "blue", "yellow",
    "cyan", "magenta", "orange", "brown", "wood", "other",
)
_PALETTE_INDEX = {name: index for index, name in enumerate(PALETTE)}


def sampling_stride(height: int, width: int, max_samples: int) -> int:
    """Per-axis stride that keeps a grid sample under max_samples pixels."""
    pixel_count = height * width
    if pixel_count <= max_samples:
        return 1
    return max(1, math.ceil(math.sqrt(pixel_count / max_samples)))


def sample_pixels(rgb: np.ndarray, max_samples: int) -> np.ndarray:
    """Grid-sampled pixels as an Nx3 float array scaled to [0, 1]."""
    stride = sampling_stride(rgb.shape[0], rgb.shape[1], max_samples)
    return rgb[::stride, ::stride].reshape(-1, 3).astype(np.float64) / 255.0


def average_brightness(rgb: np.ndarray, max_samples: int = BRIGHTNESS_MAX_SAMPLES) -> float:
    """Mean perceived luminance (0.299R + 0.587G + 0.114B) of a pixel sample."""
    pixels = sample_pixels(rgb, max_samples)
    luminance = pixels @ np.array([0.299, 0.587, 0.114])
    return float(luminance.mean())


def colorfulness(rgb: np.ndarray, max_samples: int = BRIGHTNESS_MAX_SAMPLES) -> float:
    """Mean of the per-channel population standard deviations of a pixel sample."""
    pixels = sample_pixels(rgb, max_samples)
    return float(pixels.std(axis=0).mean())


def edge_density(rgb: np.ndarray, threshold: int = EDGE_DELTA_THRESHOLD) -> float:
    """
    Fraction of pixels whose summed RGB delta to the left or top neighbour
    exceeds the threshold, normalized by the number of neighbour pairs.
    """
    height, width = rgb.shape[:2]
    if height < 2 or width < 2:
        return 0.0

    pixels = rgb.astype(np.int16)
    current = pixels[1:, 1:]
    left_delta = np.abs(current - pixels[1:, :-1]).sum(axis=-1)
    top_delta = np.abs(current - pixels[:-1, 1:]).sum(axis=-1)
    edges = np.count_nonzero((left_delta > threshold) | (top_delta > threshold))
    return edges / ((width - 1) * (height - 1) * 2)


def longest_run(mask: np.ndarray) -> int:
    """Length of the longest run of True values in a 1-D mask."""
    if not mask.any():
        return 0
    padded = np.concatenate(([0], mask.astype(np.int8), [0]))
    changes = np.diff(padded)
    starts = np.flatnonzero(changes == 1)
    ends = np.flatnonzero(changes == -1)
    return int((ends - starts).max())


def _similar_neighbours(line: np.ndarray) -> np.ndarray:
    delta = np.abs(line[1:] - line[:-1])
    return np.all(delta < LINE_SIMILARITY_THRESHOLD, axis=-1)


def count_lines(
    rgb: np.ndarray,
    step: int = LINE_SCAN_STEP,
    margin: int = LINE_SCAN_MARGIN,
) -> tuple[int, int]:
    """
    Count rows and columns that contain a long run of similar pixels.

    A scanned row counts as a horizontal line when consecutive similar
    pixels run longer than a third of the width; columns likewise against
    the height.

    Args:
        rgb: HxWx3 uint8 array
        step: Distance between scanned rows/columns
        margin: Rows/columns skipped at each border

    Returns:
        (horizontal_line_count, vertical_line_count)
    """
    height, width = rgb.shape[:2]
    pixels = rgb.astype(np.int16)

    horizontal = 0
    for y in range(margin, height - margin, step):
        if longest_run(_similar_neighbours(pixels[y])) > width // 3:
            horizontal += 1

    vertical = 0
    for x in range(margin, width - margin, step):
        if longest_run(_similar_neighbours(pixels[:, x])) > height // 3:
            vertical += 1

    return horizontal, vertical


def _grayscale_mask(pixels: np.ndarray) -> np.ndarray:
    r, g, b = pixels[:, 0], pixels[:, 1], pixels[:, 2]
    return (np.abs(r - g) < GRAYSCALE_CHANNEL_TOLERANCE) & (np.abs(g - b) < GRAYSCALE_CHANNEL_TOLERANCE)


def gym_color_proportions(
    rgb: np.ndarray, max_samples: int = GYM_COLOR_MAX_SAMPLES
) -> tuple[float, float, float]:
    """
    Proportions of near-black, metal-gray and bright red/blue pixels.

    Returns:
        (black, metal_gray, bright) fractions of the sampled pixels
    """
    pixels = sample_pixels(rgb, max_samples)
    if len(pixels) == 0:
        return 0.0, 0.0, 0.0
    r, g, b = pixels[:, 0], pixels[:, 1], pixels[:, 2]

    black = (r < GYM_BLACK_MAX) & (g < GYM_BLACK_MAX) & (b < GYM_BLACK_MAX)
    low, high = GYM_METAL_GRAY_RANGE
    metal_gray = _grayscale_mask(pixels) & (r > low) & (r < high)
    bright_red = (r > GYM_BRIGHT_MIN) & (g < GYM_BRIGHT_OTHER_MAX) & (b < GYM_BRIGHT_OTHER_MAX)
    bright_blue = (r < GYM_BRIGHT_OTHER_MAX) & (g < GYM_BLUE_GREEN_MAX) & (b > GYM_BRIGHT_MIN)

    total = len(pixels)
    return (
        np.count_nonzero(black) / total,
        np.count_nonzero(metal_gray) / total,
        (np.count_nonzero(bright_red) + np.count_nonzero(bright_blue)) / total,
    )


def has_gym_colors(rgb: np.ndarray) -> bool:
    black, gray, bright = gym_color_proportions(rgb)
    return (
        (black > GYM_BLACK_PROPORTION and gray > GYM_GRAY_PROPORTION)
        or gray > GYM_GRAY_ONLY_PROPORTION
        or (bright > GYM_BRIGHT_PROPORTION and gray > GYM_GRAY_PROPORTION)
    )


def has_equipment_patterns(rgb: np.ndarray) -> bool:
    """Grid-like structure: at least three long lines each way on a 100x100 copy."""
    horizontal, vertical = count_lines(
        resize_rgb(rgb, ANALYSIS_SIZE), step=PATTERN_SCAN_STEP, margin=PATTERN_SCAN_MARGIN
    )
    return horizontal >= PATTERN_MIN_LINES and vertical >= PATTERN_MIN_LINES


def gym_likelihood_score(gym_colors: bool, edges: float, equipment_patterns: bool) -> float:
    score = GYM_COLOR_WEIGHT if gym_colors else 0.0
    if edges > GYM_EDGE_DENSITY_THRESHOLD:
        score += GYM_EDGE_WEIGHT
    if equipment_patterns:
        score += GYM_PATTERN_WEIGHT
    return score


def classify_color(r: float, g: float, b: float) -> str:
    """Name the palette color of a single pixel with channels in [0, 1]."""
    pixel = np.array([[r, g, b]], dtype=np.float64)
    return PALETTE[int(classify_pixels(pixel)[0])]


def classify_pixels(pixels: np.ndarray) -> np.ndarray:
    """
    Palette indices for an Nx3 array of [0, 1] pixels.

    Rules are evaluated in order and the first match wins.
    """
    r, g, b = pixels[:, 0], pixels[:, 1], pixels[:, 2]
    grayscale = _grayscale_mask(pixels)
    brownish = (r > 0.5) & (g > 0.3) & (g < 0.6) & (b < 0.4)

    rules = [
        (grayscale & (r < 0.2), "black"),
        (grayscale & (r < 0.5), "gray"),
        (grayscale & (r > 0.8), "white"),
        (grayscale, "gray"),
        ((r > 0.6) & (g < 0.4) & (b < 0.4), "red"),
        ((r < 0.4) & (g > 0.6) & (b < 0.4), "green"),
        ((r < 0.4) & (g < 0.4) & (b > 0.6), "blue"),
        ((r > 0.6) & (g > 0.6) & (b < 0.4), "yellow"),
        ((r < 0.4) & (g > 0.6) & (b > 0.6), "cyan"),
        ((r > 0.6) & (g < 0.4) & (b > 0.6), "magenta"),
        (brownish & (r > 0.7), "orange"),
        (brownish, "brown"),
        ((r > 0.4) & (r < 0.7) & (g > 0.2) & (g < 0.5) & (b < 0.3), "wood"),
    ]
    conditions = [condition for condition, _ in rules]
    choices = [_PALETTE_INDEX[name] for _, name in rules]
    return np.select(conditions, choices, default=_PALETTE_INDEX["other"])


def dominant_colors(rgb: np.ndarray, count: int = DOMINANT_COLOR_COUNT) -> tuple[str, ...]:
    """Most frequent palette colors of a 100x100 copy, ties broken by palette order."""
    small = resize_rgb(rgb, ANALYSIS_SIZE)
    pixels = small.reshape(-1, 3).astype(np.float64) / 255.0
    counts = np.bincount(classify_pixels(pixels), minlength=len(PALETTE))
    order = np.argsort(-counts, kind="stable")
    return tuple(PALETTE[i] for i in order[:count] if counts[i] > 0)


def compute_statistics(rgb: np.ndarray) -> ImageStatistics:
    """
    Compute every statistic the label heuristics read.

    Brightness, colorfulness, gym colors and line counts use the image as
    given; edge density, complexity, equipment patterns and dominant colors
    use a 100x100 copy.

    Args:
        rgb: HxWx3 uint8 array

    Returns:
        ImageStatistics for the image
    """
    height, width = rgb.shape[:2]
    small = resize_rgb(rgb, ANALYSIS_SIZE)

    edges = edge_density(small)
    complexity = COMPLEXITY_EDGE_WEIGHT * edges + COMPLEXITY_COLOR_WEIGHT * colorfulness(small)
    horizontal, vertical = count_lines(rgb)
    gym_colors = has_gym_colors(rgb)
    patterns = has_equipment_patterns(small)
    gym_score = gym_likelihood_score(gym_colors, edges, patterns)

    return ImageStatistics(
        width=width,
        height=height,
        brightness=average_brightness(rgb),
        colorfulness=colorfulness(rgb),
        edge_density=edges,
        complexity=complexity,
        horizontal_lines=horizontal,
        vertical_lines=vertical,
        has_gym_colors=gym_colors,
        has_equipment_patterns=patterns,
        gym_score=gym_score,
        is_likely_gym=gym_score > GYM_LIKELIHOOD_THRESHOLD,
        dominant_colors=dominant_colors(small),
    )
