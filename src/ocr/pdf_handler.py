"""PDF rendering for NFC-e receipts delivered as DANFE PDFs.

Renders each page to an RGB numpy array so PDFs enter the same
preprocessing and recognition path as photographs.
"""

from pathlib import Path

import numpy as np
from pdf2image import convert_from_bytes, convert_from_path
from pdf2image.exceptions import (
    PDFInfoNotInstalledError,
    PDFPageCountError,
    PDFSyntaxError,
)

from src.errors import OcrError, OcrErrorCode
from src.utils.logger import get_logger

logger = get_logger(__name__)

PDF_MAGIC = b"%PDF"


def is_pdf(source: Path | bytes) -> bool:
    """Whether ``source`` is a PDF file path or PDF bytes."""
    if isinstance(source, bytes):
        return source[:4] == PDF_MAGIC
    return Path(source).suffix.lower() == ".pdf"


class PDFHandler:
    """Converts receipt PDFs to page images.

    Args:
        dpi: Rendering resolution; receipts need at least 200 DPI for
            small print to survive recognition.
    """

    def __init__(self, dpi: int = 300) -> None:
        self.dpi = dpi

    def pdf_to_images(self, pdf_source: Path | bytes) -> list[np.ndarray]:
        """Render every page of a PDF.

        Args:
            pdf_source: Path to a PDF file or raw PDF bytes.

        Returns:
            Page images as RGB numpy arrays.

        Raises:
            OcrError: ``IMAGE_LOAD_FAILED`` if the file is missing or
                cannot be rendered.
        """
        try:
            if isinstance(pdf_source, bytes):
                pages = convert_from_bytes(pdf_source, dpi=self.dpi)
            else:
                path = Path(pdf_source)
                if not path.exists():
                    raise OcrError(
                        OcrErrorCode.IMAGE_LOAD_FAILED, f"PDF not found: {path}"
                    )
                pages = convert_from_path(str(path), dpi=self.dpi)
        except (PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError) as exc:
            raise OcrError(OcrErrorCode.IMAGE_LOAD_FAILED, str(exc)) from exc

        images = [np.array(page.convert("RGB")) for page in pages]
        logger.info("Rendered PDF to %d images at %d DPI", len(images), self.dpi)
        return images
