"""Pydantic request/response schemas for the FastAPI endpoints."""

from pydantic import BaseModel, Field

from src.models.receipt import Receipt, Unit


class ReceiptItemResponse(BaseModel):
    """Response schema for a single receipt line."""

    item_number: str
    barcode: str
    description: str
    quantity: float
    unit: Unit
    unit_price: float
    total_price: float
    is_discount: bool


class ReceiptResponse(BaseModel):
    """Response schema for a parsed or stored receipt."""

    id: int
    created_at: int
    store_name: str
    cnpj: str
    address: str
    date_time: str
    items: list[ReceiptItemResponse]
    subtotal: float
    discount: float
    total_amount: float
    total_taxes: float
    federal_taxes: float
    state_taxes: float
    payment_method: str
    card_number: str
    access_key: str
    nfce_number: str
    raw_text: str

    @classmethod
    def from_receipt(cls, receipt: Receipt) -> "ReceiptResponse":
        return cls(**receipt.to_dict())


class ScanResponse(BaseModel):
    """Response schema for a scan or parse request."""

    success: bool
    receipt: ReceiptResponse
    item_count: int
    saved: bool = False
    processing_time_ms: float


class ParseRequest(BaseModel):
    """Request body carrying already-recognized receipt text."""

    text: str = Field(..., description="Recognized receipt text")


class ReceiptListResponse(BaseModel):
    """Response schema for the stored receipt listing."""

    total: int
    receipts: list[ReceiptResponse]


class ErrorResponse(BaseModel):
    """Response schema for taxonomy errors."""

    code: str
    detail: str


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    tesseract_available: bool
