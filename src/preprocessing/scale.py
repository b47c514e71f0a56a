"""Upscaling of small receipt photographs before recognition.

Glyphs on small captures are too thin for reliable recognition, so the
shorter side is brought up to a minimum size.
"""

import cv2
import numpy as np

from src.utils.logger import get_logger

from .pixels import is_empty

logger = get_logger(__name__)


def scale_if_needed(image: np.ndarray, min_size: int = 1000) -> np.ndarray:
    """Uniformly upscale an image whose shorter side is below ``min_size``.

    Args:
        image: Input pixel buffer (any supported layout).
        min_size: Minimum length of the shorter side, in pixels.

    Returns:
        A new buffer whose shorter side equals ``min_size``, or an
        unchanged copy when the image is already large enough.
    """
    height, width = image.shape[:2]
    shorter = min(height, width)

    if shorter >= min_size or is_empty(image):
        return image.copy()

    factor = min_size / shorter
    if height <= width:
        new_height = min_size
        new_width = max(min_size, round(width * factor))
    else:
        new_width = min_size
        new_height = max(min_size, round(height * factor))

    result = cv2.resize(
        image, (new_width, new_height), interpolation=cv2.INTER_LINEAR
    )
    logger.debug(
        "Upscaled image from %dx%d to %dx%d", width, height, new_width, new_height
    )
    return result
