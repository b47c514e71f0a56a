"""End-to-end receipt scanning.

Loads a receipt image (photo, scan, or PDF), corrects it for recognition,
runs Tesseract, and parses the recognized text into a Receipt.
"""

import io
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from src.errors import OcrError, OcrErrorCode, ParserError, ParserErrorCode
from src.extraction.receipt_parser import BrazilianReceiptParser
from src.models.receipt import Receipt
from src.preprocessing.pipeline import PreprocessingPipeline
from src.utils.config import AppConfig
from src.utils.logger import get_logger

from .pdf_handler import PDFHandler, is_pdf
from .tesseract_engine import OCRResult, TesseractEngine

logger = get_logger(__name__)

ImageSource = Path | str | bytes | np.ndarray


class ReceiptScanner:
    """Image-to-receipt pipeline.

    Args:
        config: Application configuration object.
    """

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or AppConfig()
        self.pdf_handler = PDFHandler(dpi=self.config.ocr.pdf_dpi)
        self.preprocessing = PreprocessingPipeline(self.config.preprocessing)
        self.ocr_engine = TesseractEngine(
            tesseract_cmd=self.config.ocr.tesseract_cmd,
            default_lang=self.config.ocr.default_lang,
            psm=self.config.ocr.psm,
        )
        self.parser = BrazilianReceiptParser(self.config.parser)

    def scan(self, source: ImageSource, filename: str = "receipt") -> Receipt:
        """Scan a receipt image into a structured receipt.

        Args:
            source: Image path, encoded image/PDF bytes, or a pixel buffer.
            filename: Display name used in logs.

        Returns:
            Parsed receipt.

        Raises:
            OcrError: ``IMAGE_LOAD_FAILED`` if the source cannot be decoded,
                ``TEXT_RECOGNITION_FAILED`` if Tesseract fails, or
                ``NO_TEXT_FOUND`` if no text was recognized.
        """
        logger.info("Scanning receipt: %s", filename)
        pages = self.recognize_pages(source)
        if all(page.is_blank for page in pages):
            logger.warning("No text recognized in %s", filename)
            raise OcrError(OcrErrorCode.NO_TEXT_FOUND)
        return self.parser.parse("\n".join(page.text for page in pages))

    def recognize_pages(self, source: ImageSource) -> list[OCRResult]:
        """Preprocess and recognize every page of ``source``."""
        results: list[OCRResult] = []
        for image in self.load_images(source):
            processed, _ = self.preprocessing.process(image)
            results.append(self.ocr_engine.recognize(processed))
        return results

    def recognize(self, source: ImageSource) -> str:
        """Preprocess and recognize every page of ``source``.

        Returns:
            Recognized text, pages joined by newlines.
        """
        return "\n".join(page.text for page in self.recognize_pages(source))

    def parse_text(self, text: str) -> Receipt:
        """Parse already-recognized receipt text.

        Raises:
            ParserError: ``EMPTY_TEXT`` if ``text`` is blank.
        """
        if not text.strip():
            raise ParserError(ParserErrorCode.EMPTY_TEXT)
        return self.parser.parse(text)

    def load_images(self, source: ImageSource) -> list[np.ndarray]:
        """Decode ``source`` into one pixel buffer per page.

        Raises:
            OcrError: ``IMAGE_LOAD_FAILED`` if the source cannot be decoded.
        """
        if isinstance(source, np.ndarray):
            return [source]

        if isinstance(source, str):
            source = Path(source)

        if is_pdf(source):
            return self.pdf_handler.pdf_to_images(source)

        try:
            if isinstance(source, bytes):
                img = Image.open(io.BytesIO(source))
            else:
                img = Image.open(source)
            with img:
                return [np.array(img.convert("RGBA"))]
        except (FileNotFoundError, UnidentifiedImageError, OSError) as exc:
            logger.error("Could not load image: %s", exc)
            raise OcrError(OcrErrorCode.IMAGE_LOAD_FAILED, str(exc)) from exc
