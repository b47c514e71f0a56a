"""Neighbourhood filters: sharpening and median denoising.

Both filters leave a border band untouched where a full window does not
fit, copying those pixels from the input.
"""

import cv2
import numpy as np

from src.utils.logger import get_logger

from .pixels import is_empty, to_rgba

logger = get_logger(__name__)


def sharpen(image: np.ndarray, strength: float = 1.0) -> np.ndarray:
    """Sharpen text edges with a 3x3 Laplacian-style kernel.

    Kernel centre is ``1 + 4 * strength``, the four orthogonal
    neighbours are ``-strength`` and corners are zero. The outermost rows
    and columns are copied unchanged.

    Args:
        image: Input pixel buffer.
        strength: Edge boost; 1.0 gives the classic 5/-1 kernel.

    Returns:
        RGBA buffer with each colour channel clamped to [0, 255].
    """
    rgba = to_rgba(image)
    height, width = rgba.shape[:2]
    if height < 3 or width < 3:
        return rgba

    kernel = np.array(
        [
            [0.0, -strength, 0.0],
            [-strength, 1.0 + 4.0 * strength, -strength],
            [0.0, -strength, 0.0],
        ],
        dtype=np.float32,
    )
    filtered = cv2.filter2D(rgba[..., :3].astype(np.float32), -1, kernel)
    rgba[1:-1, 1:-1, :3] = np.clip(filtered[1:-1, 1:-1], 0, 255).astype(np.uint8)
    logger.debug("Applied sharpen (strength=%.2f)", strength)
    return rgba


def median_filter(image: np.ndarray, radius: int = 1) -> np.ndarray:
    """Remove salt-and-pepper noise with a per-channel median.

    Args:
        image: Input pixel buffer.
        radius: Window radius; the window side is ``2 * radius + 1``.

    Returns:
        RGBA buffer; a border band ``radius`` pixels wide is copied from
        the input.
    """
    rgba = to_rgba(image)
    height, width = rgba.shape[:2]
    if radius <= 0 or is_empty(rgba) or height <= 2 * radius or width <= 2 * radius:
        return rgba

    blurred = cv2.medianBlur(rgba, 2 * radius + 1)
    inner = (slice(radius, height - radius), slice(radius, width - radius))
    rgba[inner] = blurred[inner]
    logger.debug("Applied median filter (radius=%d)", radius)
    return rgba
