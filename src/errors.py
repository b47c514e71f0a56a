"""Error taxonomy for the scanning, parsing, and storage layers.

The preprocessing and parsing core never raises these; they are raised by
the scanner, the repository, and the outer API/CLI surfaces.
"""

from enum import StrEnum


class OcrErrorCode(StrEnum):
    """Failures while obtaining text from an image."""

    IMAGE_LOAD_FAILED = "ocr.image_load_failed"
    TEXT_RECOGNITION_FAILED = "ocr.text_recognition_failed"
    NO_TEXT_FOUND = "ocr.no_text_found"
    CAMERA_ERROR = "ocr.camera_error"
    PERMISSION_DENIED = "ocr.permission_denied"
    UNKNOWN = "ocr.unknown"


class ParserErrorCode(StrEnum):
    """Failures reported around receipt text parsing."""

    EMPTY_TEXT = "parser.empty_text"
    NO_ITEMS_FOUND = "parser.no_items_found"
    INVALID_FORMAT = "parser.invalid_format"
    UNKNOWN = "parser.unknown"


class StorageErrorCode(StrEnum):
    """Failures of the local receipt store."""

    SAVE_FAILED = "storage.save_failed"
    LOAD_FAILED = "storage.load_failed"
    DELETE_FAILED = "storage.delete_failed"
    NOT_FOUND = "storage.not_found"


_USER_MESSAGES: dict[StrEnum, str] = {
    OcrErrorCode.IMAGE_LOAD_FAILED: "Failed to load image",
    OcrErrorCode.TEXT_RECOGNITION_FAILED: "Failed to recognize text",
    OcrErrorCode.NO_TEXT_FOUND: "No text found in image",
    OcrErrorCode.CAMERA_ERROR: "Camera error occurred",
    OcrErrorCode.PERMISSION_DENIED: "Camera permission denied",
    OcrErrorCode.UNKNOWN: "Unknown OCR error",
    ParserErrorCode.EMPTY_TEXT: "No text to parse",
    ParserErrorCode.NO_ITEMS_FOUND: "No items found in receipt",
    ParserErrorCode.INVALID_FORMAT: "Invalid receipt format",
    ParserErrorCode.UNKNOWN: "Unknown parsing error",
    StorageErrorCode.SAVE_FAILED: "Failed to save receipt",
    StorageErrorCode.LOAD_FAILED: "Failed to load receipts",
    StorageErrorCode.DELETE_FAILED: "Failed to delete receipt",
    StorageErrorCode.NOT_FOUND: "Receipt not found",
}


class ScanError(Exception):
    """Base class for errors surfaced to the user.

    Args:
        code: Taxonomy code identifying the failure.
        detail: Optional technical detail for logs.
    """

    def __init__(self, code: StrEnum, detail: str | None = None) -> None:
        self.code = code
        self.detail = detail
        message = self.user_message
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return _USER_MESSAGES[self.code]


class OcrError(ScanError):
    """Raised when an image cannot be turned into text."""

    def __init__(self, code: OcrErrorCode, detail: str | None = None) -> None:
        super().__init__(code, detail)


class ParserError(ScanError):
    """Raised by callers that reject unparseable receipt text."""

    def __init__(self, code: ParserErrorCode, detail: str | None = None) -> None:
        super().__init__(code, detail)


class StorageError(ScanError):
    """Raised when the receipt store cannot complete an operation."""

    def __init__(self, code: StorageErrorCode, detail: str | None = None) -> None:
        super().__init__(code, detail)
