"""Tone corrections: desaturation, contrast, and brightness.

All transforms return RGBA buffers and leave the alpha channel as it was.
"""

import numpy as np

from src.utils.logger import get_logger

from .pixels import intensity, to_rgba

logger = get_logger(__name__)


def _apply_linear(image: np.ndarray, scale: float, offset: float) -> np.ndarray:
    rgba = to_rgba(image)
    colour = rgba[..., :3].astype(np.float32) * scale + offset
    rgba[..., :3] = np.clip(np.rint(colour), 0, 255).astype(np.uint8)
    return rgba


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Desaturate an image, keeping luminance in all three colour channels.

    Args:
        image: Input pixel buffer.

    Returns:
        RGBA buffer with R == G == B. Applying it twice gives the same
        pixels as applying it once.
    """
    rgba = to_rgba(image)
    rgba[..., :3] = intensity(image)[..., np.newaxis]
    logger.debug("Converted %dx%d image to grayscale", rgba.shape[1], rgba.shape[0])
    return rgba


def adjust_contrast(image: np.ndarray, contrast: float = 1.5) -> np.ndarray:
    """Stretch contrast around mid-gray.

    Computes ``out = in * contrast + translate`` per colour channel, with
    ``translate`` chosen so mid-gray is the fixed point.

    Args:
        image: Input pixel buffer.
        contrast: Scale factor; 1.0 leaves the image unchanged.

    Returns:
        RGBA buffer clamped to [0, 255].
    """
    translate = (0.5 - 0.5 * contrast) * 255.0
    result = _apply_linear(image, contrast, translate)
    logger.debug("Adjusted contrast (scale=%.2f, translate=%.1f)", contrast, translate)
    return result


def adjust_brightness(image: np.ndarray, brightness: float = 30.0) -> np.ndarray:
    """Shift every colour channel by ``brightness`` (negative darkens)."""
    result = _apply_linear(image, 1.0, brightness)
    logger.debug("Adjusted brightness by %.1f", brightness)
    return result
