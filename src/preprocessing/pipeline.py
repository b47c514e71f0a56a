"""Preprocessing pipeline that prepares receipt photos for recognition.

Chains upscaling, grayscale, contrast boost, binarization, and
sharpening, with optional median denoising and quality metrics tracking.
"""

from dataclasses import dataclass

import cv2
import numpy as np

from src.utils.config import PreprocessingConfig
from src.utils.logger import get_logger

from .binarize import adaptive_threshold, global_threshold
from .filters import median_filter, sharpen
from .pixels import intensity, is_empty
from .scale import scale_if_needed
from .tone import adjust_contrast, to_grayscale

logger = get_logger(__name__)

_THRESHOLD_METHODS = ("adaptive", "global")


@dataclass
class QualityMetrics:
    """Before/after image quality measurements."""

    sharpness_before: float
    sharpness_after: float
    contrast_before: float
    contrast_after: float


def calculate_sharpness(image: np.ndarray) -> float:
    """Calculate image sharpness using Laplacian variance.

    Args:
        image: Input pixel buffer.

    Returns:
        Sharpness score (higher means sharper); 0.0 for empty images.
    """
    if is_empty(image):
        return 0.0
    return float(cv2.Laplacian(intensity(image), cv2.CV_64F).var())


def calculate_contrast(image: np.ndarray) -> float:
    """Calculate contrast as the standard deviation of pixel intensities."""
    if is_empty(image):
        return 0.0
    return float(intensity(image).std())


def preprocess_for_ocr(
    image: np.ndarray, config: PreprocessingConfig | None = None
) -> np.ndarray:
    """Run the standard correction sequence on a receipt photograph.

    Order: scale-if-needed, grayscale, contrast, adaptive threshold,
    sharpen. Parameters come from ``config`` (defaults when omitted).

    Args:
        image: Raw pixel buffer (grayscale, RGB, or RGBA).
        config: Optional parameter overrides.

    Returns:
        Corrected RGBA buffer.
    """
    config = config or PreprocessingConfig()
    result = scale_if_needed(image, min_size=config.min_size)
    result = to_grayscale(result)
    result = adjust_contrast(result, contrast=config.contrast)
    result = adaptive_threshold(
        result, block_size=config.block_size, constant=config.threshold_constant
    )
    return sharpen(result, strength=config.sharpen_strength)


class PreprocessingPipeline:
    """Configurable receipt preprocessing pipeline.

    Every step of :func:`preprocess_for_ocr` can be toggled, a median
    denoise step can be inserted before binarization, and the global
    threshold can replace the adaptive one.

    Args:
        config: Preprocessing configuration controlling which steps to apply.

    Raises:
        ValueError: If ``config.threshold_method`` is not supported.
    """

    def __init__(self, config: PreprocessingConfig) -> None:
        if config.threshold_method not in _THRESHOLD_METHODS:
            raise ValueError(
                f"Unsupported threshold method: {config.threshold_method}"
            )
        self.config = config

    def process(self, image: np.ndarray) -> tuple[np.ndarray, QualityMetrics]:
        """Run the configured steps on an image.

        Args:
            image: Raw pixel buffer.

        Returns:
            Tuple of (processed_image, quality_metrics).
        """
        metrics = QualityMetrics(
            sharpness_before=calculate_sharpness(image),
            contrast_before=calculate_contrast(image),
            sharpness_after=0.0,
            contrast_after=0.0,
        )

        result = image.copy()

        if self.config.scale_enabled:
            result = scale_if_needed(result, min_size=self.config.min_size)

        if self.config.grayscale_enabled:
            result = to_grayscale(result)

        if self.config.contrast_enabled:
            result = adjust_contrast(result, contrast=self.config.contrast)

        if self.config.denoise_enabled:
            result = median_filter(result, radius=self.config.median_radius)

        if self.config.threshold_enabled:
            if self.config.threshold_method == "global":
                result = global_threshold(
                    result, threshold=self.config.global_threshold
                )
            else:
                result = adaptive_threshold(
                    result,
                    block_size=self.config.block_size,
                    constant=self.config.threshold_constant,
                )

        if self.config.sharpen_enabled:
            result = sharpen(result, strength=self.config.sharpen_strength)

        metrics.sharpness_after = calculate_sharpness(result)
        metrics.contrast_after = calculate_contrast(result)

        logger.info(
            "Preprocessing complete: sharpness %.1f->%.1f, contrast %.1f->%.1f",
            metrics.sharpness_before,
            metrics.sharpness_after,
            metrics.contrast_before,
            metrics.contrast_after,
        )
        return result, metrics
