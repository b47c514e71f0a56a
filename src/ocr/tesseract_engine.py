"""Tesseract recognizer for preprocessed receipt images.

Receipts are a single column of text, so the default page segmentation
mode treats the image as one uniform block.
"""

from dataclasses import dataclass

import numpy as np
import pytesseract
from PIL import Image
from pytesseract import TesseractError, TesseractNotFoundError

from src.errors import OcrError, OcrErrorCode
from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class OCRResult:
    """Plain-text recognition result for one image."""

    text: str
    language: str
    confidence: float

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()


class TesseractEngine:
    """Wrapper around Tesseract for receipt text recognition.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        default_lang: Default OCR language code (Portuguese for NFC-e).
        psm: Tesseract page segmentation mode.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        default_lang: str = "por",
        psm: int = 6,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.default_lang = default_lang
        self.psm = psm

    def recognize(self, image: np.ndarray, lang: str | None = None) -> OCRResult:
        """Recognize the text in an image.

        Args:
            image: Preprocessed pixel buffer.
            lang: OCR language code. Defaults to the engine default.

        Returns:
            OCRResult with the full text and mean word confidence (0-1).

        Raises:
            OcrError: ``TEXT_RECOGNITION_FAILED`` if Tesseract is missing
                or fails on the image.
        """
        lang = lang or self.default_lang
        config = f"--psm {self.psm}"
        pil_image = Image.fromarray(image)

        try:
            text = pytesseract.image_to_string(pil_image, lang=lang, config=config)
            data = pytesseract.image_to_data(
                pil_image,
                lang=lang,
                config=config,
                output_type=pytesseract.Output.DICT,
            )
        except (TesseractError, TesseractNotFoundError) as exc:
            logger.error("Tesseract failed: %s", exc)
            raise OcrError(OcrErrorCode.TEXT_RECOGNITION_FAILED, str(exc)) from exc

        confidences = [
            float(conf)
            for conf, word in zip(data["conf"], data["text"])
            if float(conf) > 0 and str(word).strip()
        ]
        confidence = (
            sum(confidences) / len(confidences) / 100.0 if confidences else 0.0
        )

        logger.info(
            "Recognized %d words with average confidence %.2f",
            len(confidences),
            confidence,
        )
        return OCRResult(text=text, language=lang, confidence=confidence)
