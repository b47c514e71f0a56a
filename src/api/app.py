"""FastAPI application for the NFC-e receipt scanner.

Provides REST endpoints to scan receipt images, parse recognized text,
and manage stored receipts.
"""

import shutil
import time
from typing import Annotated

from fastapi import FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from src.errors import (
    OcrError,
    OcrErrorCode,
    ParserError,
    ScanError,
    StorageError,
    StorageErrorCode,
)
from src.models.receipt import Receipt
from src.ocr.scanner import ReceiptScanner
from src.storage.repository import ReceiptRepository
from src.utils.config import load_config
from src.utils.logger import get_logger

from .schemas import (
    ErrorResponse,
    HealthResponse,
    ParseRequest,
    ReceiptListResponse,
    ReceiptResponse,
    ScanResponse,
)

logger = get_logger(__name__)

VERSION = "1.0.0"

app = FastAPI(
    title="NFC-e Receipt Scanner API",
    description="Extract structured data from Brazilian NFC-e receipts",
    version=VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_ERROR_RESPONSES: dict[int | str, dict] = {
    status: {"model": ErrorResponse} for status in (400, 404, 422, 500)
}

_ALLOWED_CONTENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/tiff",
    "image/webp",
    "application/pdf",
    "application/octet-stream",
}


def _get_components() -> tuple[ReceiptScanner, ReceiptRepository]:
    """Initialize and return the scanner and the receipt store.

    Returns:
        Tuple of (receipt_scanner, receipt_repository).
    """
    config = load_config()
    return ReceiptScanner(config), ReceiptRepository(config.storage.db_path)


def _status_for(error: ScanError) -> int:
    if isinstance(error, StorageError):
        return 404 if error.code == StorageErrorCode.NOT_FOUND else 500
    if isinstance(error, ParserError):
        return 422
    if isinstance(error, OcrError):
        if error.code == OcrErrorCode.IMAGE_LOAD_FAILED:
            return 400
        if error.code == OcrErrorCode.NO_TEXT_FOUND:
            return 422
    return 500


@app.exception_handler(ScanError)
async def scan_error_handler(request: Request, exc: ScanError) -> JSONResponse:
    """Translate taxonomy errors into JSON error responses."""
    logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
    body = ErrorResponse(code=str(exc.code), detail=exc.user_message)
    return JSONResponse(status_code=_status_for(exc), content=body.model_dump())


def _scan_response(receipt: Receipt, saved: bool, start_time: float) -> ScanResponse:
    return ScanResponse(
        success=True,
        receipt=ReceiptResponse.from_receipt(receipt),
        item_count=sum(1 for item in receipt.items if not item.is_discount),
        saved=saved,
        processing_time_ms=(time.time() - start_time) * 1000,
    )


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return system health status."""
    return HealthResponse(
        status="healthy",
        version=VERSION,
        tesseract_available=shutil.which("tesseract") is not None,
    )


@app.post("/scan", response_model=ScanResponse, responses=_ERROR_RESPONSES)
async def scan_receipt(
    file: Annotated[UploadFile, File(...)],
    save: Annotated[bool, Query()] = False,
) -> ScanResponse:
    """Scan an uploaded receipt photo or PDF.

    Args:
        file: Uploaded image (PNG, JPEG, TIFF, WebP) or PDF.
        save: Whether to persist the parsed receipt.

    Returns:
        The parsed receipt.
    """
    start_time = time.time()

    if file.content_type and file.content_type not in _ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {file.content_type}",
        )

    scanner, repository = _get_components()
    try:
        content = await file.read()
        receipt = await run_in_threadpool(
            scanner.scan, content, file.filename or "receipt"
        )
        if save:
            receipt = repository.save(receipt)
        return _scan_response(receipt, save, start_time)
    except (HTTPException, ScanError):
        raise
    except Exception as exc:
        logger.error("Scan failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    finally:
        repository.close()


@app.post("/parse", response_model=ScanResponse, responses=_ERROR_RESPONSES)
async def parse_text(
    request: ParseRequest,
    save: Annotated[bool, Query()] = False,
) -> ScanResponse:
    """Parse already-recognized receipt text."""
    start_time = time.time()
    scanner, repository = _get_components()
    try:
        receipt = scanner.parse_text(request.text)
        if save:
            receipt = repository.save(receipt)
        return _scan_response(receipt, save, start_time)
    finally:
        repository.close()


@app.get(
    "/receipts", response_model=ReceiptListResponse, responses=_ERROR_RESPONSES
)
async def list_receipts() -> ReceiptListResponse:
    """List stored receipts, newest first."""
    _, repository = _get_components()
    try:
        receipts = repository.list_all()
    finally:
        repository.close()
    return ReceiptListResponse(
        total=len(receipts),
        receipts=[ReceiptResponse.from_receipt(r) for r in receipts],
    )


@app.get(
    "/receipts/{receipt_id}",
    response_model=ReceiptResponse,
    responses=_ERROR_RESPONSES,
)
async def get_receipt(receipt_id: int) -> ReceiptResponse:
    """Return one stored receipt."""
    _, repository = _get_components()
    try:
        return ReceiptResponse.from_receipt(repository.get(receipt_id))
    finally:
        repository.close()


@app.delete(
    "/receipts/{receipt_id}", status_code=204, responses=_ERROR_RESPONSES
)
async def delete_receipt(receipt_id: int) -> Response:
    """Delete a stored receipt."""
    _, repository = _get_components()
    try:
        repository.delete(receipt_id)
    finally:
        repository.close()
    return Response(status_code=204)
