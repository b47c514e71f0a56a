"""Binarization of receipt images.

Thermal receipts are often photographed under uneven light, so the
default is a local-mean adaptive threshold; a single global cutoff is
available for evenly lit scans.
"""

import numpy as np

from src.utils.logger import get_logger

from .pixels import from_intensity, intensity, is_empty

logger = get_logger(__name__)

WHITE = 255
BLACK = 0


def _local_means(plane: np.ndarray, half: int) -> np.ndarray:
    """Integer mean of each pixel's square neighbourhood, clipped at borders.

    Uses a zero-padded integral image so every output value reads only a
    fixed window of the input plane.
    """
    height, width = plane.shape
    integral = np.zeros((height + 1, width + 1), dtype=np.int64)
    integral[1:, 1:] = plane.astype(np.int64).cumsum(axis=0).cumsum(axis=1)

    rows = np.arange(height)
    cols = np.arange(width)
    top = np.maximum(rows - half, 0)
    bottom = np.minimum(rows + half, height - 1) + 1
    left = np.maximum(cols - half, 0)
    right = np.minimum(cols + half, width - 1) + 1

    sums = (
        integral[np.ix_(bottom, right)]
        - integral[np.ix_(top, right)]
        - integral[np.ix_(bottom, left)]
        + integral[np.ix_(top, left)]
    )
    counts = (bottom - top)[:, np.newaxis] * (right - left)[np.newaxis, :]
    return sums // counts


def adaptive_threshold(
    image: np.ndarray, block_size: int = 15, constant: int = 10
) -> np.ndarray:
    """Binarize against the mean of each pixel's local neighbourhood.

    A pixel becomes white when its intensity exceeds
    ``local_mean - constant`` and black otherwise. Windows near the
    image edges are clipped rather than padded.

    Args:
        image: Input pixel buffer (ideally already grayscale).
        block_size: Side of the square neighbourhood; ``block_size // 2``
            pixels are read on each side.
        constant: Value subtracted from the local mean.

    Returns:
        Opaque RGBA buffer containing only 0 and 255 in colour channels.
    """
    plane = intensity(image)
    if is_empty(plane):
        return from_intensity(plane)

    means = _local_means(plane, block_size // 2)
    binary = np.where(plane.astype(np.int64) > means - constant, WHITE, BLACK)
    logger.debug("Applied adaptive threshold (block=%d, c=%d)", block_size, constant)
    return from_intensity(binary.astype(np.uint8))


def global_threshold(image: np.ndarray, threshold: int = 128) -> np.ndarray:
    """Binarize with one cutoff for the whole image.

    Args:
        image: Input pixel buffer.
        threshold: Intensities strictly above this become white.

    Returns:
        Opaque RGBA buffer containing only 0 and 255.
    """
    plane = intensity(image)
    binary = np.where(plane > threshold, WHITE, BLACK).astype(np.uint8)
    logger.debug("Applied global threshold at %d", threshold)
    return from_intensity(binary)
