"""Tests for the end-to-end receipt scanner."""

import io
from pathlib import Path
from unittest.mock import MagicMock, patch

import numpy as np
import pytest
from PIL import Image

from src.errors import OcrError, OcrErrorCode, ParserError, ParserErrorCode
from src.ocr.scanner import ReceiptScanner
from src.ocr.tesseract_engine import OCRResult
from src.utils.config import AppConfig, PreprocessingConfig


def _png_bytes() -> bytes:
    img = Image.fromarray(np.full((30, 20, 3), 255, dtype=np.uint8))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def scanner() -> ReceiptScanner:
    config = AppConfig(preprocessing=PreprocessingConfig(min_size=40))
    return ReceiptScanner(config)


class TestLoadImages:
    """Tests for source decoding."""

    def test_array_passthrough(
        self, scanner: ReceiptScanner, sample_image: np.ndarray
    ) -> None:
        images = scanner.load_images(sample_image)
        assert images[0] is sample_image

    def test_png_bytes(self, scanner: ReceiptScanner) -> None:
        images = scanner.load_images(_png_bytes())
        assert images[0].shape == (30, 20, 4)

    def test_png_path(self, scanner: ReceiptScanner, tmp_path: Path) -> None:
        path = tmp_path / "nota.png"
        path.write_bytes(_png_bytes())
        assert scanner.load_images(str(path))[0].shape == (30, 20, 4)

    def test_missing_file(self, scanner: ReceiptScanner, tmp_path: Path) -> None:
        with pytest.raises(OcrError) as exc_info:
            scanner.load_images(tmp_path / "missing.png")
        assert exc_info.value.code is OcrErrorCode.IMAGE_LOAD_FAILED

    def test_garbage_bytes(self, scanner: ReceiptScanner) -> None:
        with pytest.raises(OcrError) as exc_info:
            scanner.load_images(b"not an image")
        assert exc_info.value.code is OcrErrorCode.IMAGE_LOAD_FAILED

    def test_pdf_bytes_use_pdf_handler(self, scanner: ReceiptScanner) -> None:
        page = np.zeros((10, 10, 3), dtype=np.uint8)
        scanner.pdf_handler = MagicMock()
        scanner.pdf_handler.pdf_to_images.return_value = [page, page]
        assert len(scanner.load_images(b"%PDF-1.4")) == 2


class TestScan:
    """Tests for the scan pipeline with a mocked recognizer."""

    def test_scan_parses_recognized_text(
        self, scanner: ReceiptScanner, receipt_text: str
    ) -> None:
        scanner.ocr_engine = MagicMock()
        scanner.ocr_engine.recognize.return_value = OCRResult(
            text=receipt_text, language="por", confidence=0.9
        )

        receipt = scanner.scan(_png_bytes(), "nota.png")

        assert receipt.store_name == "FESTVAL"
        assert receipt.total_amount == pytest.approx(46.87)
        processed = scanner.ocr_engine.recognize.call_args[0][0]
        assert min(processed.shape[:2]) == 40

    def test_pages_joined(self, scanner: ReceiptScanner) -> None:
        page = np.zeros((5, 5), dtype=np.uint8)
        scanner.load_images = MagicMock(return_value=[page, page])
        scanner.ocr_engine = MagicMock()
        scanner.ocr_engine.recognize.side_effect = [
            OCRResult("PAGINA 1", "por", 0.9),
            OCRResult("PAGINA 2", "por", 0.9),
        ]
        assert scanner.recognize(b"%PDF") == "PAGINA 1\nPAGINA 2"

    def test_no_text_found(self, scanner: ReceiptScanner) -> None:
        scanner.ocr_engine = MagicMock()
        scanner.ocr_engine.recognize.return_value = OCRResult(" \n", "por", 0.0)

        with pytest.raises(OcrError) as exc_info:
            scanner.scan(_png_bytes())
        assert exc_info.value.code is OcrErrorCode.NO_TEXT_FOUND

    def test_blank_page_among_text_pages(self, scanner: ReceiptScanner) -> None:
        page = np.zeros((5, 5), dtype=np.uint8)
        scanner.load_images = MagicMock(return_value=[page, page])
        scanner.ocr_engine = MagicMock()
        scanner.ocr_engine.recognize.side_effect = [
            OCRResult(" ", "por", 0.0),
            OCRResult("TOTAL R$ 20,37", "por", 0.9),
        ]

        receipt = scanner.scan(b"%PDF")
        assert receipt.total_amount == pytest.approx(20.37)

    def test_no_pages(self, scanner: ReceiptScanner) -> None:
        scanner.load_images = MagicMock(return_value=[])
        with pytest.raises(OcrError) as exc_info:
            scanner.scan(b"%PDF")
        assert exc_info.value.code is OcrErrorCode.NO_TEXT_FOUND

    @patch("src.ocr.tesseract_engine.pytesseract")
    def test_scan_with_stubbed_tesseract(
        self, mock_pytesseract: MagicMock, scanner: ReceiptScanner
    ) -> None:
        mock_pytesseract.image_to_string.return_value = "TOTAL R$ 20,37"
        mock_pytesseract.image_to_data.return_value = {"text": [], "conf": []}

        receipt = scanner.scan(np.full((20, 20), 255, dtype=np.uint8))
        assert receipt.total_amount == pytest.approx(20.37)


class TestParseText:
    """Tests for parsing already-recognized text."""

    def test_parse_text(self, scanner: ReceiptScanner) -> None:
        assert scanner.parse_text("TOTAL R$ 5,00").total_amount == pytest.approx(5.0)

    def test_blank_text_rejected(self, scanner: ReceiptScanner) -> None:
        with pytest.raises(ParserError) as exc_info:
            scanner.parse_text("   ")
        assert exc_info.value.code is ParserErrorCode.EMPTY_TEXT
