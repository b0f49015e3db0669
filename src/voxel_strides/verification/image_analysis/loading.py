"""Decoding proof images into RGB pixel arrays."""

import io
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..exceptions import ImageDecodeError
from ..logging_utils import get_logger

logger = get_logger(__name__)

ImageSource = Union[Image.Image, bytes, bytearray, str, Path, np.ndarray]


def _from_array(array: np.ndarray) -> np.ndarray:
    if array.ndim == 2:
        array = np.stack([array] * 3, axis=-1)
    if array.ndim != 3 or array.shape[2] not in (3, 4):
        raise ImageDecodeError(f"Expected an HxWx3 pixel array, got shape {array.shape}")
    if array.shape[0] == 0 or array.shape[1] == 0:
        raise ImageDecodeError("Image has no pixels")
    if array.dtype.kind not in "iuf":
        raise ImageDecodeError(f"Unsupported pixel dtype: {array.dtype}")
    if array.dtype != np.uint8:
        try:
            array = np.clip(array, 0, 255).astype(np.uint8)
        except (TypeError, ValueError) as e:
            raise ImageDecodeError(f"Could not convert pixels to uint8: {e}") from e
    return np.ascontiguousarray(array[:, :, :3])


def load_image(source: ImageSource) -> np.ndarray:
    """
    Decode an image into an RGB uint8 array.

    Args:
        source: PIL image, encoded bytes, file path or pixel array

    Returns:
        HxWx3 uint8 array

    Raises:
        ImageDecodeError: If the source cannot be decoded
    """
    if isinstance(source, np.ndarray):
        return _from_array(source)

    try:
        if isinstance(source, Image.Image):
            image = source
        elif isinstance(source, (bytes, bytearray)):
            if not source:
                raise ImageDecodeError("Image data is empty")
            image = Image.open(io.BytesIO(source))
        elif isinstance(source, (str, Path)):
            image = Image.open(source)
        else:
            raise ImageDecodeError(f"Unsupported image source type: {type(source).__name__}")

        image.load()
        rgb = np.asarray(image.convert("RGB"))
    except ImageDecodeError:
        raise
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        logger.warning(f"Failed to decode image: {e}")
        raise ImageDecodeError(f"Could not decode image: {e}") from e

    return _from_array(rgb)


def resize_rgb(rgb: np.ndarray, size: tuple[int, int]) -> np.ndarray:
    """Resize an RGB array to (width, height) with bilinear filtering."""
    if (rgb.shape[1], rgb.shape[0]) == size:
        return rgb
    resized = Image.fromarray(rgb).resize(size, Image.Resampling.BILINEAR)
    return np.asarray(resized)
