"""Tests for PDF rendering."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import numpy as np
import pytest
from PIL import Image
from pdf2image.exceptions import PDFPageCountError

from src.errors import OcrError, OcrErrorCode
from src.ocr.pdf_handler import PDFHandler, is_pdf


def _mock_pil_image(width: int = 300, height: int = 200) -> Image.Image:
    """Create a mock PIL image."""
    return Image.fromarray(np.zeros((height, width, 3), dtype=np.uint8))


class TestIsPdf:
    """Tests for PDF detection."""

    def test_pdf_bytes(self) -> None:
        assert is_pdf(b"%PDF-1.4 rest")
        assert not is_pdf(b"\x89PNG\r\n")

    def test_pdf_path(self) -> None:
        assert is_pdf(Path("nota.PDF"))
        assert not is_pdf(Path("nota.png"))


class TestPDFHandler:
    """Tests for the PDFHandler class."""

    def test_init_default_dpi(self) -> None:
        assert PDFHandler().dpi == 300

    @patch("src.ocr.pdf_handler.convert_from_path")
    def test_pdf_to_images_from_path(self, mock_convert: MagicMock) -> None:
        mock_convert.return_value = [_mock_pil_image(), _mock_pil_image()]
        handler = PDFHandler(dpi=200)

        with patch.object(Path, "exists", return_value=True):
            images = handler.pdf_to_images(Path("/fake/nota.pdf"))

        assert len(images) == 2
        assert all(isinstance(img, np.ndarray) for img in images)
        assert images[0].shape == (200, 300, 3)
        mock_convert.assert_called_once_with("/fake/nota.pdf", dpi=200)

    @patch("src.ocr.pdf_handler.convert_from_bytes")
    def test_pdf_to_images_from_bytes(self, mock_convert: MagicMock) -> None:
        mock_convert.return_value = [_mock_pil_image()]
        images = PDFHandler().pdf_to_images(b"%PDF-1.4 fake content")
        assert len(images) == 1

    def test_pdf_to_images_file_not_found(self) -> None:
        with pytest.raises(OcrError) as exc_info:
            PDFHandler().pdf_to_images(Path("/nonexistent/file.pdf"))
        assert exc_info.value.code is OcrErrorCode.IMAGE_LOAD_FAILED

    @patch("src.ocr.pdf_handler.convert_from_bytes")
    def test_unreadable_pdf(self, mock_convert: MagicMock) -> None:
        mock_convert.side_effect = PDFPageCountError("no pages")
        with pytest.raises(OcrError) as exc_info:
            PDFHandler().pdf_to_images(b"%PDF-broken")
        assert exc_info.value.code is OcrErrorCode.IMAGE_LOAD_FAILED
