"""Pixel buffer helpers shared by the preprocessing transforms.

A pixel buffer is a ``uint8`` numpy array shaped ``(H, W, 4)`` (RGBA) or
``(H, W)`` (single-channel intensity). RGB input is promoted to RGBA
with an opaque alpha channel so every stage shares one format.
"""

import cv2
import numpy as np

OPAQUE = 255


def to_rgba(image: np.ndarray) -> np.ndarray:
    """Return a new RGBA copy of a grayscale, RGB, or RGBA buffer.

    Args:
        image: Input pixel buffer.

    Returns:
        A fresh ``(H, W, 4)`` uint8 array.

    Raises:
        ValueError: If the array shape is not a supported pixel layout.
    """
    if image.dtype != np.uint8:
        image = np.clip(image, 0, 255).astype(np.uint8)

    if image.ndim == 2:
        rgba = np.empty((*image.shape, 4), dtype=np.uint8)
        rgba[..., :3] = image[..., np.newaxis]
        rgba[..., 3] = OPAQUE
        return rgba

    if image.ndim == 3 and image.shape[2] == 4:
        return image.copy()

    if image.ndim == 3 and image.shape[2] == 3:
        rgba = np.empty((*image.shape[:2], 4), dtype=np.uint8)
        rgba[..., :3] = image
        rgba[..., 3] = OPAQUE
        return rgba

    raise ValueError(f"Unsupported pixel buffer shape: {image.shape}")


def intensity(image: np.ndarray) -> np.ndarray:
    """Return the luminance plane of a pixel buffer as a new uint8 array."""
    if image.ndim == 2:
        return image.astype(np.uint8, copy=True)

    rgba = to_rgba(image)
    if rgba.size == 0:
        return np.zeros(rgba.shape[:2], dtype=np.uint8)
    # Rec.601 luma: 0.299 R + 0.587 G + 0.114 B.
    return cv2.cvtColor(rgba, cv2.COLOR_RGBA2GRAY)


def from_intensity(plane: np.ndarray) -> np.ndarray:
    """Expand an intensity plane into an opaque RGBA buffer."""
    return to_rgba(plane)


def is_empty(image: np.ndarray) -> bool:
    """Whether the buffer has zero width or zero height."""
    return image.shape[0] == 0 or image.shape[1] == 0
